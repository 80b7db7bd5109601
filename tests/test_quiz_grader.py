"""Tests for quiz grading (pure function, no DB)."""
from ecoplay.services.quiz_service import QuizService

QUIZ = {
    "questions": [
        {"correct_index": 0, "points": 10},
        {"correct_index": 1, "points": 20},
    ]
}


class TestGrade:

    def test_all_correct(self):
        assert QuizService.grade(QUIZ, [0, 1]) == {"total_points": 30, "correct_count": 2}

    def test_one_correct(self):
        assert QuizService.grade(QUIZ, [1, 1]) == {"total_points": 20, "correct_count": 1}

    def test_no_answers(self):
        assert QuizService.grade(QUIZ, []) == {"total_points": 0, "correct_count": 0}

    def test_skipped_answer_never_matches(self):
        assert QuizService.grade(QUIZ, [None, 1]) == {"total_points": 20, "correct_count": 1}

    def test_short_answer_list(self):
        assert QuizService.grade(QUIZ, [0]) == {"total_points": 10, "correct_count": 1}

    def test_extra_answers_ignored(self):
        assert QuizService.grade(QUIZ, [0, 1, 1, 0]) == {"total_points": 30, "correct_count": 2}

    def test_zero_point_question(self):
        quiz = {"questions": [{"correct_index": 2, "points": 0}]}
        assert QuizService.grade(quiz, [2]) == {"total_points": 0, "correct_count": 1}

    def test_row_objects(self):
        class Question:
            def __init__(self, correct_index, points):
                self.correct_index = correct_index
                self.points = points

        class Quiz:
            questions = [Question(1, 10), Question(0, 10)]

        assert QuizService.grade(Quiz(), [1, 0]) == {"total_points": 20, "correct_count": 2}
