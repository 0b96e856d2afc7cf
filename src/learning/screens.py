"""
Screen states of the learning engine.

Each screen is its own dataclass carrying only the selection it needs, so a
Home screen has no lesson and a Lesson screen always has one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from learning.challenges import Challenge
from learning.content import Module
from learning.lesson_player import LessonPlayer
from learning.quiz_runner import QuizRunner


class ScreenName(str, Enum):
    HOME = "home"
    BROWSE = "browse"
    MODULE_DETAIL = "module"
    LESSON = "lesson"
    QUIZ = "quiz"
    QUIZ_RESULT = "quiz_result"
    CHALLENGES = "challenges"
    CHALLENGE_DETAIL = "challenge"


@dataclass(eq=False)
class Home:
    @property
    def name(self) -> ScreenName:
        return ScreenName.HOME

    def describe(self) -> Dict[str, Any]:
        return {}


@dataclass(eq=False)
class Browse:
    @property
    def name(self) -> ScreenName:
        return ScreenName.BROWSE

    def describe(self) -> Dict[str, Any]:
        return {}


@dataclass(eq=False)
class ModuleDetail:
    """
    ``topic`` is the catalog entry the user picked; ``module`` is the full detail
    (lessons and quizzes) once it has been fetched.
    """
    topic: Module
    module: Optional[Module] = None
    loading: bool = False
    error: Optional[str] = None

    @property
    def name(self) -> ScreenName:
        return ScreenName.MODULE_DETAIL

    @property
    def display_module(self) -> Module:
        return self.module or self.topic

    def describe(self) -> Dict[str, Any]:
        return {
            "module": self.display_module.model_dump(mode="json"),
            "loading": self.loading,
            "loaded": self.module is not None,
            "error": self.error,
        }


@dataclass(eq=False)
class LessonView:
    module: Module
    player: LessonPlayer
    error: Optional[str] = None

    @property
    def name(self) -> ScreenName:
        return ScreenName.LESSON

    @property
    def lesson(self):
        return self.player.lesson

    def describe(self) -> Dict[str, Any]:
        section = self.player.current_section
        return {
            "module_id": self.module.id,
            "lesson": self.lesson.model_dump(mode="json", exclude={"sections"}),
            "section_index": self.player.section_index,
            "section_count": self.player.section_count,
            "section": section.model_dump(mode="json") if section else None,
            "can_go_previous": self.player.can_go_previous,
            "can_go_next": self.player.can_go_next,
            "forward_label": self.player.forward_label(self.module),
            "error": self.error,
        }


@dataclass(eq=False)
class QuizView:
    """Quiz screen; once the runner has completed it renders as the result screen."""
    module: Module
    runner: QuizRunner
    reward_error: Optional[str] = None

    @property
    def name(self) -> ScreenName:
        return ScreenName.QUIZ_RESULT if self.runner.completed else ScreenName.QUIZ

    @property
    def quiz(self):
        return self.runner.quiz

    def describe(self) -> Dict[str, Any]:
        runner = self.runner
        data: Dict[str, Any] = {
            "module_id": self.module.id,
            "quiz": self.quiz.model_dump(mode="json", exclude={"questions"}),
            "total_questions": runner.total_questions,
        }
        if runner.completed and runner.result is not None:
            result = runner.result
            data["result"] = {
                "score": result.score,
                "total": result.total,
                "percentage": result.percentage,
                "passed": result.passed,
                "passing_score": result.passing_score,
                "time_spent_seconds": result.time_spent_seconds,
            }
            data["reward_error"] = self.reward_error
            return data
        question = runner.current_question
        data.update({
            "question_index": runner.current_question_index,
            "question": question.model_dump(mode="json", exclude={"correct_answer_index", "explanation"})
            if question else None,
            "selected_answer": runner.selected_answer,
            "show_explanation": runner.show_explanation,
            "action_label": runner.action_label,
        })
        if runner.show_explanation and question is not None:
            data["is_correct"] = runner.is_correct
            data["correct_answer_index"] = question.correct_answer_index
            data["explanation"] = question.explanation
        return data


@dataclass(eq=False)
class Challenges:
    @property
    def name(self) -> ScreenName:
        return ScreenName.CHALLENGES

    def describe(self) -> Dict[str, Any]:
        return {}


@dataclass(eq=False)
class ChallengeDetail:
    challenge: Challenge

    @property
    def name(self) -> ScreenName:
        return ScreenName.CHALLENGE_DETAIL

    def describe(self) -> Dict[str, Any]:
        return {"challenge": self.challenge.model_dump(mode="json")}


Screen = Union[Home, Browse, ModuleDetail, LessonView, QuizView, Challenges, ChallengeDetail]
