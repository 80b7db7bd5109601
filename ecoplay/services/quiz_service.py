"""
Quiz Service: grading and quiz authoring.

Grading is a pure function of the quiz definition and the answer vector.
Crediting the result happens in LedgerService.credit_quiz.
"""
from typing import Optional, List, Dict, Any, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from ecoplay.models.database_models import Quiz, QuizQuestion
from ecoplay.services.errors import NotFound, ValidationError
from ecoplay.config import settings

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj[name]
    return getattr(obj, name)


class QuizService:
    """Quiz grading and management."""

    @staticmethod
    def grade(quiz: Any, answers: Sequence[Optional[int]]) -> Dict[str, int]:
        """
        Score an answer vector against a quiz.

        answers[i] is the chosen option index for question i, or None.
        Missing trailing answers count as incorrect; extra answers are ignored.
        """
        total_points = 0
        correct_count = 0
        answers = list(answers or [])

        for index, question in enumerate(_field(quiz, "questions")):
            if index >= len(answers):
                break
            answer = answers[index]
            if answer is not None and answer == _field(question, "correct_index"):
                total_points += _field(question, "points")
                correct_count += 1

        return {
            "total_points": total_points,
            "correct_count": correct_count,
        }

    @staticmethod
    async def get_quiz(db: AsyncSession, quiz_id: int) -> Quiz:
        result = await db.execute(select(Quiz).where(Quiz.id == quiz_id))
        quiz = result.scalar_one_or_none()
        if quiz is None:
            raise NotFound("Quiz not found")
        return quiz

    @staticmethod
    async def list_quizzes(db: AsyncSession) -> List[Quiz]:
        result = await db.execute(select(Quiz).order_by(Quiz.id))
        return list(result.scalars().all())

    @staticmethod
    async def create_quiz(
        db: AsyncSession,
        title: str,
        questions: List[Dict[str, Any]],
        description: Optional[str] = None,
        created_by: Optional[int] = None
    ) -> Quiz:
        """Create a quiz with ordered questions."""
        if not title:
            raise ValidationError("Quiz title is required")
        if not questions:
            raise ValidationError("A quiz needs at least one question")

        quiz = Quiz(title=title, description=description, created_by=created_by)
        for position, q in enumerate(questions):
            options = list(q.get("options") or [])
            correct_index = q.get("correct_index")
            if not q.get("prompt") or not options:
                raise ValidationError(f"Question {position + 1} needs a prompt and options")
            if correct_index is None or not 0 <= correct_index < len(options):
                raise ValidationError(f"Question {position + 1} has an invalid correct option")

            points = q.get("points")
            quiz.questions.append(QuizQuestion(
                position=position,
                prompt=q["prompt"],
                options=options,
                correct_index=correct_index,
                points=settings.QUIZ_QUESTION_POINTS if points is None else points,
            ))

        db.add(quiz)
        await db.commit()
        logger.info(f"Quiz {quiz.id} created with {len(questions)} questions")
        return quiz
