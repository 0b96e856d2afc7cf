"""
Civic learning progression engine.

- ScreenRouter: screen state machine (home, browse, module, lesson, quiz, challenges)
- LessonPlayer: section pager and auto-chain decision
- QuizRunner: two-phase question flow and scoring
- CatalogBrowser: module search and filters
"""

from .catalog import CatalogBrowser
from .content import Difficulty, Lesson, LessonType, Module, Question, Quiz, Section
from .context import LearnerContext, Role
from .lesson_player import LessonPlayer, NextLesson, ReturnToModule, TakeQuiz
from .quiz_runner import QuizResult, QuizRunner, QuizStep
from .router import ContentSource, RewardHook, ScreenRouter
from .screens import ScreenName

__all__ = [
    "CatalogBrowser",
    "ContentSource",
    "Difficulty",
    "LearnerContext",
    "Lesson",
    "LessonPlayer",
    "LessonType",
    "Module",
    "NextLesson",
    "Question",
    "Quiz",
    "QuizResult",
    "QuizRunner",
    "QuizStep",
    "ReturnToModule",
    "RewardHook",
    "Role",
    "ScreenName",
    "ScreenRouter",
    "Section",
    "TakeQuiz",
]
