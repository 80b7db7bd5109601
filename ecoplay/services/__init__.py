"""
Services module initialization.
"""
from ecoplay.services.ledger_service import LedgerService
from ecoplay.services.quiz_service import QuizService
from ecoplay.services.verification_service import VerificationService
from ecoplay.services.admin_service import AdminService
from ecoplay.services.audit_service import AuditService
from ecoplay.services.lesson_service import LessonService
from ecoplay.services.user_service import UserService
from ecoplay.services.streak_service import compute_streak, next_stored_streak

__all__ = [
    "LedgerService",
    "QuizService",
    "VerificationService",
    "AdminService",
    "AuditService",
    "LessonService",
    "UserService",
    "compute_streak",
    "next_stored_streak",
]
