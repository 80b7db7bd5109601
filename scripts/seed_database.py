#!/usr/bin/env python3
"""
Database Seeder for EcoPlay

Populates the database with demo users, quizzes, lessons and some activity.
Points are granted through LedgerService so balances always match the ledger.

Usage:
    # From project root with venv activated:
    python scripts/seed_database.py

    # With options:
    python scripts/seed_database.py --users 30 --days 10 --clear
"""
import argparse
import asyncio
import os
import random
import sys
from datetime import timedelta

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Configuration
DEFAULT_NUM_USERS = 20
DEFAULT_NUM_DAYS = 7

FIRST_NAMES = [
    "Amara", "Ben", "Chloe", "Daniel", "Eva", "Farid", "Grace", "Hiro",
    "Isla", "Jonah", "Kemi", "Leo", "Maya", "Nina", "Omar", "Priya",
]

LAST_NAMES = [
    "Okafor", "Smith", "Garcia", "Chen", "Kim", "Patel", "Brown", "Tanaka",
    "Ahmed", "Lopez", "Singh", "Wilson",
]

SCHOOLS = ["Greenfield Primary", "Riverside Academy", "Oakwood High"]

ACTIVITY_NOTES = {
    "Planting": "Planted sunflower seeds in the school garden",
    "Cleanup": "Picked up litter around the playground",
    "Recycling": "Sorted the classroom recycling bin",
    "Conservation": "Switched off lights in empty rooms",
}

QUIZZES = [
    {
        "title": "Plant Basics",
        "description": "How plants grow and what they need",
        "questions": [
            {"prompt": "What do plants take in through their leaves?",
             "options": ["Oxygen", "Carbon dioxide", "Nitrogen"], "correct_index": 1},
            {"prompt": "Which part of the plant absorbs water?",
             "options": ["Roots", "Flowers", "Leaves"], "correct_index": 0},
            {"prompt": "Best time of day to water a garden?",
             "options": ["Midday", "Early morning", "Never"], "correct_index": 1},
        ],
    },
    {
        "title": "Recycling Right",
        "description": "What goes in which bin",
        "questions": [
            {"prompt": "Can greasy pizza boxes go in paper recycling?",
             "options": ["Yes", "No"], "correct_index": 1},
            {"prompt": "Which of these is compostable?",
             "options": ["Banana peel", "Plastic bag", "Glass jar"], "correct_index": 0},
        ],
    },
]

LESSONS = [
    {"title": "Why Water Matters", "type": "video", "points_reward": 20,
     "content": "https://example.org/videos/why-water-matters",
     "description": "A short film about the water cycle"},
    {"title": "Composting 101", "type": "text", "points_reward": 15,
     "content": "Composting turns food scraps into soil. Mix greens and browns, keep it moist, turn it weekly."},
    {"title": "Energy Detective", "type": "interactive", "points_reward": 25,
     "content": "https://example.org/interactive/energy-detective"},
]


async def seed_database(num_users: int, num_days: int, clear_existing: bool = False):
    """Seed the database with demo data."""
    try:
        from ecoplay.database import async_session_maker, engine, init_db, Base
        from ecoplay.models import database_models  # noqa: F401
        from ecoplay.services.errors import LedgerError
        from ecoplay.services.ledger_service import LedgerService
        from ecoplay.services.lesson_service import LessonService
        from ecoplay.services.quiz_service import QuizService
        from ecoplay.services.streak_service import today_utc
        from ecoplay.services.user_service import UserService
    except ImportError as e:
        print(f"Error importing application modules: {e}")
        print("Make sure you're running from the project root with dependencies installed.")
        sys.exit(1)

    print("=" * 60)
    print("EcoPlay Database Seeder")
    print("=" * 60)
    print(f"Users: {num_users}")
    print(f"Days of watering history: {num_days}")
    print()

    if clear_existing:
        print("Clearing existing data...")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        print("  Done clearing tables")
    await init_db()

    async with async_session_maker() as db:
        # ============================================
        # 1. Staff
        # ============================================
        print("\n1. Seeding staff accounts...")
        admin = await UserService.create_user(db, {
            "full_name": "Site Admin", "username": "admin", "email": "admin@ecoplay.local",
        })
        educator = await UserService.create_user(db, {
            "full_name": "Green Teacher", "username": "educator", "email": "educator@ecoplay.local",
            "school": SCHOOLS[0],
        })
        admin.role = "admin"
        educator.role = "educator"
        await db.commit()
        print(f"  Admin id={admin.id}, educator id={educator.id}")

        # ============================================
        # 2. Content
        # ============================================
        print("\n2. Seeding quizzes and lessons...")
        quizzes = []
        for data in QUIZZES:
            quizzes.append(await QuizService.create_quiz(
                db,
                title=data["title"],
                description=data["description"],
                questions=data["questions"],
                created_by=educator.id,
            ))
        lessons = []
        for data in LESSONS:
            lessons.append(await LessonService.create_lesson(db, data, created_by=educator.id))
        print(f"  Created {len(quizzes)} quizzes, {len(lessons)} lessons")

        # ============================================
        # 3. Students and activity
        # ============================================
        print(f"\n3. Seeding {num_users} students...")
        today = today_utc()
        student_ids = []
        for i in range(num_users):
            first = random.choice(FIRST_NAMES)
            last = random.choice(LAST_NAMES)
            user = await UserService.create_user(db, {
                "full_name": f"{first} {last}",
                "username": f"{first.lower()}.{last.lower()}{i}",
                "email": f"{first.lower()}.{last.lower()}{i}@students.ecoplay.local",
                "school": random.choice(SCHOOLS),
                "grade": str(random.randint(3, 8)),
            })
            student_ids.append(user.id)

        watered = 0
        activities = 0
        for user_id in student_ids:
            # Oldest day first so the stored streak builds up
            for offset in range(num_days - 1, -1, -1):
                if random.random() < 0.25:
                    continue
                try:
                    await LedgerService.submit_watering(
                        db, user_id, evidence="seed://photo.jpg",
                        day=today - timedelta(days=offset),
                    )
                    watered += 1
                except LedgerError as e:
                    print(f"    Skipped watering for {user_id}: {e.message}")

            for activity_type in random.sample(list(ACTIVITY_NOTES), k=2):
                await LedgerService.submit_activity(
                    db, user_id,
                    type=activity_type,
                    note=ACTIVITY_NOTES[activity_type],
                    evidence="seed://evidence.jpg",
                )
                activities += 1

            quiz = random.choice(quizzes)
            answers = [random.randrange(len(q.options)) for q in quiz.questions]
            await LedgerService.credit_quiz(db, user_id, quiz.id, answers)

            await LedgerService.complete_lesson(db, user_id, random.choice(lessons).id)

        print(f"  Created {watered} watering records, {activities} activity submissions")

    print("\n" + "=" * 60)
    print("✅ Database seeding complete!")
    print("=" * 60)
    print(f"""
Send requests as a seeded user with the X-User-Id header:
  Admin:    X-User-Id: {admin.id}
  Educator: X-User-Id: {educator.id}
  Students: X-User-Id: {student_ids[0] if student_ids else '-'} .. {student_ids[-1] if student_ids else '-'}
""")


def main():
    parser = argparse.ArgumentParser(
        description="Seed EcoPlay database with demo data"
    )
    parser.add_argument(
        "--users", "-u",
        type=int,
        default=DEFAULT_NUM_USERS,
        help=f"Number of students (default: {DEFAULT_NUM_USERS})"
    )
    parser.add_argument(
        "--days", "-d",
        type=int,
        default=DEFAULT_NUM_DAYS,
        help=f"Days of watering history (default: {DEFAULT_NUM_DAYS})"
    )
    parser.add_argument(
        "--clear", "-c",
        action="store_true",
        help="Drop and recreate all tables before seeding"
    )

    args = parser.parse_args()

    asyncio.run(seed_database(
        num_users=args.users,
        num_days=args.days,
        clear_existing=args.clear
    ))


if __name__ == "__main__":
    main()
