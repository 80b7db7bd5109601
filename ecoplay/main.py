"""
EcoPlay Backend API
Main FastAPI application entry point.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import time

from ecoplay.config import settings
from ecoplay.database import init_db, close_db

# Import routers
from ecoplay.api.users import router as users_router
from ecoplay.api.watering import router as watering_router
from ecoplay.api.submissions import router as submissions_router
from ecoplay.api.quizzes import router as quizzes_router
from ecoplay.api.redemptions import router as redemptions_router
from ecoplay.api.lessons import router as lessons_router
from ecoplay.api.admin import router as admin_router
from ecoplay.api.system import router as system_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    logger.info("Starting EcoPlay Backend...")
    await init_db()
    logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down EcoPlay Backend...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title="EcoPlay Backend",
    description="""
    ## Gamified environmental engagement for schools

    #### 🌱 Watering
    - One verified watering record per user per day
    - Daily streaks, reset after a missed day

    #### ♻️ Activities
    - Planting, Cleanup, Recycling, Conservation
    - Credited on submission, reconciled by admins and educators

    #### 📚 Quizzes & Lessons
    - Graded quizzes, credited on every attempt
    - Lessons pay out once per user

    #### 🎁 Rewards
    - Redemptions never overdraw

    #### 🧾 Ledger
    - Every point change is an entry in the points ledger
    - On-demand audit of balances and streaks
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add request processing time to response headers."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred"
        }
    )


# Include routers
app.include_router(users_router)
app.include_router(watering_router)
app.include_router(submissions_router)
app.include_router(quizzes_router)
app.include_router(redemptions_router)
app.include_router(lessons_router)
app.include_router(admin_router)
app.include_router(system_router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API info."""
    return {
        "name": "EcoPlay Backend",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "ecoplay.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
