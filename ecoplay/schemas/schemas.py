"""
Pydantic Schemas for the EcoPlay Backend APIs.
Request and Response models for all endpoints.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any
from datetime import date, datetime
from enum import Enum


# ============================================
# ENUMS
# ============================================
class ActivityType(str, Enum):
    planting = "Planting"
    cleanup = "Cleanup"
    recycling = "Recycling"
    conservation = "Conservation"


class LessonType(str, Enum):
    video = "video"
    text = "text"
    interactive = "interactive"


class UserRole(str, Enum):
    user = "user"
    admin = "admin"
    educator = "educator"


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============================================
# USER SCHEMAS
# ============================================
class UserCreateRequest(BaseModel):
    """Register a profile. Credentials are handled by the auth provider."""
    full_name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    school: Optional[str] = None
    grade: Optional[str] = None


class UserUpdateRequest(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    school: Optional[str] = None
    grade: Optional[str] = None


class UserProfile(ORMModel):
    id: int
    full_name: str
    username: str
    email: str
    school: Optional[str] = None
    grade: Optional[str] = None
    role: str
    points: int
    watering_streak: int
    last_watering_date: Optional[date] = None
    created_at: Optional[datetime] = None


class MyProfile(UserProfile):
    badges: List[str] = []


class StreakMilestone(BaseModel):
    name: str
    days: int
    unlocked: bool
    days_to_go: int


class DashboardResponse(BaseModel):
    user_id: int
    full_name: str
    points: int
    stored_streak: int
    computed_streak: int
    watered_today: bool
    plants_watered: int
    last_watering_date: Optional[date] = None
    badges: List[str] = []
    streak_milestones: List[StreakMilestone] = []


class LedgerEntryResponse(ORMModel):
    id: int
    kind: str
    delta: int
    balance_after: int
    reference: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None


# ============================================
# WATERING SCHEMAS
# ============================================
class WateringSubmitRequest(BaseModel):
    evidence: Optional[str] = Field(None, description="Photo evidence (base64 or URL)")
    note: Optional[str] = Field(None, max_length=2000)


class WateringRecordResponse(ORMModel):
    id: int
    user_id: int
    date: date
    note: Optional[str] = None
    verified: bool
    points: int
    admin_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class WateringSubmitResponse(BaseModel):
    message: str
    record: WateringRecordResponse
    new_points: int
    new_streak: int


# ============================================
# ACTIVITY SUBMISSION SCHEMAS
# ============================================
class ActivitySubmitRequest(BaseModel):
    type: Optional[ActivityType] = None
    note: Optional[str] = Field(None, max_length=2000)
    evidence: Optional[str] = None


class SubmissionResponse(ORMModel):
    id: int
    user_id: int
    type: str
    note: Optional[str] = None
    verified: bool
    points: int
    admin_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ActivitySubmitResponse(BaseModel):
    message: str
    submission: SubmissionResponse
    new_points: int


# ============================================
# RECONCILIATION SCHEMAS
# ============================================
class VerifyRequest(BaseModel):
    """Admin verification decision."""
    verified: bool
    points: Optional[int] = Field(None, ge=0, description="Adjusted points, applied on approval")
    admin_notes: Optional[str] = Field(None, max_length=2000)


class SubmissionReviewResponse(BaseModel):
    message: str
    submission: SubmissionResponse
    points_delta: int
    user_points: int


class WateringReviewResponse(BaseModel):
    message: str
    record: WateringRecordResponse
    points_delta: int
    user_points: int


class ReviewUser(BaseModel):
    id: int
    full_name: str
    username: str
    email: str


class PendingSubmission(BaseModel):
    submission: SubmissionResponse
    user: ReviewUser


class PendingWatering(BaseModel):
    record: WateringRecordResponse
    user: ReviewUser


# ============================================
# QUIZ SCHEMAS
# ============================================
class QuizQuestionCreate(BaseModel):
    prompt: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_index: int = Field(..., ge=0)
    points: Optional[int] = Field(None, ge=0)


class QuizCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    questions: List[QuizQuestionCreate] = Field(..., min_length=1)


class QuizQuestionPublic(ORMModel):
    """Question as shown to players; the correct option is not exposed."""
    position: int
    prompt: str
    options: List[str]
    points: int


class QuizPublic(ORMModel):
    id: int
    title: str
    description: Optional[str] = None
    questions: List[QuizQuestionPublic]
    created_at: Optional[datetime] = None


class QuizSubmitRequest(BaseModel):
    quiz_id: int
    answers: List[Optional[int]] = Field(default_factory=list)


class QuizSubmitResponse(BaseModel):
    message: str
    total_points: int
    correct_answers: int
    total_questions: int
    new_points: int


class QuizAttemptSummary(BaseModel):
    quiz_id: int
    quiz_title: str
    earned: int
    correct_answers: int
    total_questions: int
    taken_at: Optional[datetime] = None


# ============================================
# REDEMPTION SCHEMAS
# ============================================
class RedeemRequest(BaseModel):
    reward_name: Optional[str] = None
    cost: Optional[int] = None


class RedemptionResponse(ORMModel):
    id: int
    user_id: int
    reward: str
    cost: int
    created_at: Optional[datetime] = None


class RedeemResponse(BaseModel):
    message: str
    redemption: RedemptionResponse
    new_points: int


# ============================================
# LESSON SCHEMAS
# ============================================
class LessonCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: LessonType
    content: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    points_reward: int = Field(0, ge=0)


class LessonUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[LessonType] = None
    content: Optional[str] = None
    thumbnail: Optional[str] = None
    points_reward: Optional[int] = Field(None, ge=0)


class LessonResponse(ORMModel):
    id: int
    title: str
    description: Optional[str] = None
    type: str
    content: str
    thumbnail: Optional[str] = None
    points_reward: int
    created_at: Optional[datetime] = None


class LessonCompleteResponse(BaseModel):
    message: str
    points_earned: int
    new_points: int


# ============================================
# ADMIN SCHEMAS
# ============================================
class RoleUpdateRequest(BaseModel):
    role: UserRole


class UserDetailResponse(BaseModel):
    user: UserProfile
    quiz_attempts: List[QuizAttemptSummary]
    submissions: List[SubmissionResponse]
    completed_lessons: List[int]
    computed_streak: int


class AnalyticsResponse(BaseModel):
    total_users: int
    total_quizzes: int
    total_submissions: int
    verified_submissions: int
    total_watering_records: int
    verified_watering_records: int
    total_points_awarded: int
    computed_at: str


class AuditFinding(BaseModel):
    user_id: int
    stored_points: int
    ledger_points: int
    stored_streak: int
    computed_streak: int
    issues: List[str]


class AuditResponse(BaseModel):
    checked: int
    anomalies: int
    findings: List[AuditFinding]
    audited_at: str


class MessageResponse(BaseModel):
    message: str
    detail: Optional[Any] = None
