"""
SQLAlchemy Database Models for the EcoPlay Backend.

Points are owned by the ledger: `users.points` is only ever changed together
with a `points_ledger` row, inside one transaction.
"""
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, BigInteger, Text, Boolean,
    ForeignKey, DateTime, Date, JSON,
    CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from ecoplay.database import Base


# ============================================
# USERS
# ============================================
class User(Base):
    __tablename__ = "users"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    full_name = Column(Text, nullable=False)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    school = Column(Text)
    grade = Column(Text)
    role = Column(String(20), nullable=False, default="user")

    # Ledger-owned fields
    points = Column(Integer, nullable=False, default=0)
    watering_streak = Column(Integer, nullable=False, default=0)
    last_watering_date = Column(Date)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin', 'educator')", name="ck_users_role"),
        CheckConstraint("watering_streak >= 0", name="ck_users_streak"),
    )


# ============================================
# WATERING RECORDS (one per user per day)
# ============================================
class WateringRecord(Base):
    __tablename__ = "watering_records"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    evidence = Column(Text, nullable=False)
    note = Column(Text)
    verified = Column(Boolean, nullable=False, default=False)
    points = Column(Integer, nullable=False, default=15)
    points_credited = Column(Boolean, nullable=False, default=False)
    admin_notes = Column(Text)
    reviewed_by = Column(BigInteger)
    reviewed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_watering_user_day"),
        Index("idx_watering_user_date", "user_id", "date"),
    )


# ============================================
# ACTIVITY SUBMISSIONS
# ============================================
class Submission(Base):
    __tablename__ = "submissions"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(32), nullable=False)
    note = Column(Text)
    evidence = Column(Text, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
    points = Column(Integer, nullable=False, default=10)
    points_credited = Column(Boolean, nullable=False, default=False)
    admin_notes = Column(Text)
    reviewed_by = Column(BigInteger)
    reviewed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "type IN ('Planting', 'Cleanup', 'Recycling', 'Conservation')",
            name="ck_submissions_type"
        ),
        Index("idx_submissions_user", "user_id"),
        Index("idx_submissions_verified", "verified"),
    )


# ============================================
# QUIZZES
# ============================================
class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    created_by = Column(BigInteger, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow)

    questions = relationship(
        "QuizQuestion",
        order_by="QuizQuestion.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    quiz_id = Column(BigInteger, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    prompt = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    correct_index = Column(Integer, nullable=False)
    points = Column(Integer, nullable=False, default=10)

    __table_args__ = (
        UniqueConstraint("quiz_id", "position", name="uq_quiz_question_position"),
        CheckConstraint("correct_index >= 0", name="ck_quiz_question_correct_index"),
    )


# ============================================
# QUIZ ATTEMPTS (append-only)
# ============================================
class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    quiz_id = Column(BigInteger, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    earned = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False, default=0)
    taken_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_quiz_attempts_user", "user_id"),
    )


# ============================================
# REDEMPTIONS
# ============================================
class Redemption(Base):
    __tablename__ = "redemptions"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reward = Column(Text, nullable=False)
    cost = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("cost > 0", name="ck_redemptions_cost"),
    )


# ============================================
# LESSONS
# ============================================
class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    type = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    thumbnail = Column(Text)
    points_reward = Column(Integer, nullable=False, default=0)
    created_by = Column(BigInteger, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("type IN ('video', 'text', 'interactive')", name="ck_lessons_type"),
    )


class LessonCompletion(Base):
    __tablename__ = "lesson_completions"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    lesson_id = Column(BigInteger, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    completed_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_completion"),
    )


# ============================================
# POINTS LEDGER (one row per applied delta)
# ============================================
class PointsLedgerEntry(Base):
    __tablename__ = "points_ledger"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String(32), nullable=False)
    delta = Column(Integer, nullable=False)
    balance_after = Column(Integer, nullable=False)
    reference = Column(String(80))
    note = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "kind IN ('watering', 'activity', 'quiz', 'lesson', 'redemption', 'reconciliation')",
            name="ck_points_ledger_kind"
        ),
        Index("idx_points_ledger_user", "user_id", "id"),
    )


# ============================================
# AUDIT LOG
# ============================================
class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    actor_user_id = Column(BigInteger)
    action = Column(String(64), nullable=False)
    target_type = Column(String(32), nullable=False)
    target_id = Column(BigInteger)
    meta = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_audit_logs_action", "action"),
    )
