"""
Quiz runner: one question at a time, two-phase "select, check, advance" flow.

The single advance button first checks the selected answer (recording it and
revealing the explanation), then moves on to the next question or finishes
the quiz. The score is recomputed from every recorded answer at completion.
"""

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from learning.content import DEFAULT_PASSING_SCORE, ContentId, Question, Quiz
from learning.errors import AnswerRequiredError, InvalidAnswerError

logger = logging.getLogger(__name__)


class QuizStep(str, Enum):
    CHECKED = "checked"
    NEXT_QUESTION = "next_question"
    COMPLETED = "completed"


@dataclass(frozen=True)
class QuizResult:
    quiz_id: ContentId
    score: int
    total: int
    percentage: int
    passed: bool
    passing_score: float
    time_spent_seconds: int = 0


def percentage_of(score: int, total: int) -> int:
    """Whole-number percentage, halves rounded up."""
    if total <= 0:
        return 0
    return int(math.floor(score / total * 100 + 0.5))


class QuizRunner:
    def __init__(
        self,
        quiz: Quiz,
        default_passing_score: float = DEFAULT_PASSING_SCORE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.quiz = quiz
        self.default_passing_score = default_passing_score
        self._clock = clock
        self.result: Optional[QuizResult] = None
        self.reset()

    # ----- state -----

    def reset(self) -> None:
        """Back to the first question with nothing answered. Safe to call repeatedly."""
        self.current_question_index = 0
        self.selected_answer: Optional[int] = None
        self.answers: Dict[ContentId, int] = {}
        self.show_explanation = False
        self.is_correct = False
        self.completed = False
        self.score = 0
        self.result = None
        self._started_at = self._clock()

    @property
    def total_questions(self) -> int:
        return len(self.quiz.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if not self.quiz.questions:
            return None
        return self.quiz.questions[self.current_question_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index >= self.total_questions - 1

    @property
    def passing_score(self) -> float:
        return self.quiz.effective_passing_score(self.default_passing_score)

    @property
    def elapsed_seconds(self) -> int:
        return int(self._clock() - self._started_at)

    @property
    def action_label(self) -> str:
        if not self.show_explanation:
            return "Check Answer"
        return "Finish Quiz" if self.is_last_question else "Next Question"

    # ----- interaction -----

    def select(self, index: int) -> bool:
        """Pick an option. Ignored once the answer has been checked."""
        if self.show_explanation:
            return False
        question = self.current_question
        if question is None or not 0 <= index < len(question.options):
            raise InvalidAnswerError(f"Option {index} does not exist on this question")
        self.selected_answer = index
        return True

    def advance(self) -> QuizStep:
        if not self.quiz.questions:
            self.complete()
            return QuizStep.COMPLETED
        if not self.show_explanation:
            self._check()
            return QuizStep.CHECKED
        if not self.is_last_question:
            self.current_question_index += 1
            self._clear_cursor()
            return QuizStep.NEXT_QUESTION
        self.complete()
        return QuizStep.COMPLETED

    def back(self) -> bool:
        """
        Previous question. The cursor is cleared but the answer already recorded
        for that question stays until it is re-checked.
        """
        if self.current_question_index <= 0:
            return False
        self.current_question_index -= 1
        self._clear_cursor()
        return True

    def complete(self) -> QuizResult:
        score = sum(
            1 for q in self.quiz.questions
            if self.answers.get(q.id) == q.correct_answer_index
        )
        total = self.total_questions
        percentage = percentage_of(score, total)
        self.score = score
        self.completed = True
        self.result = QuizResult(
            quiz_id=self.quiz.id,
            score=score,
            total=total,
            percentage=percentage,
            passed=percentage >= self.passing_score,
            passing_score=self.passing_score,
            time_spent_seconds=self.elapsed_seconds,
        )
        logger.info(
            "quiz completed quiz_id=%s score=%s/%s percentage=%s passed=%s",
            self.quiz.id, score, total, percentage, self.result.passed,
        )
        return self.result

    # ----- helpers -----

    def _check(self) -> None:
        if self.selected_answer is None:
            raise AnswerRequiredError()
        question = self.current_question
        self.is_correct = self.selected_answer == question.correct_answer_index
        self.answers[question.id] = self.selected_answer
        self.show_explanation = True

    def _clear_cursor(self) -> None:
        self.selected_answer = None
        self.show_explanation = False
        self.is_correct = False
