"""
Content model for civic learning: modules, lessons, sections, quizzes, questions.

Entities are frozen pydantic models. They are built from the PoliHub backend's
JSON payloads, so validation accepts the backend field names (``lesson_type``,
``duration_minutes``, ``estimated_duration``, ...) next to the canonical ones.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

ContentId = Union[int, str]

DEFAULT_PASSING_SCORE = 70
EMPTY_LESSON_TEXT = "No content available for this lesson yet."


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class LessonType(str, Enum):
    TEXT = "text"
    VIDEO = "video"
    INTERACTIVE = "interactive"


def _lesson_type(value: Any) -> Any:
    if value is None or value == "":
        return LessonType.TEXT
    return value.lower() if isinstance(value, str) else value


class _Content(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Section(_Content):
    """One page of lesson content."""
    type: LessonType = LessonType.TEXT
    title: str = ""
    content: str = ""
    video_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("video_url", "videoUrl"))

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> Any:
        return _lesson_type(value)


class Lesson(_Content):
    """
    Ordered sequence of sections inside a module.

    The backend stores a single body per lesson (``content`` / ``video_url``); when
    no explicit ``sections`` are sent, one section is derived from those fields.
    """
    id: ContentId
    module_id: Optional[ContentId] = None
    title: str
    type: LessonType = Field(default=LessonType.TEXT, validation_alias=AliasChoices("type", "lesson_type"))
    duration: Optional[int] = Field(default=None, validation_alias=AliasChoices("duration", "duration_minutes"))
    xp_reward: int = 0
    description: Optional[str] = None
    content: str = ""
    video_url: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> Any:
        return _lesson_type(value)

    @field_validator("content", mode="before")
    @classmethod
    def _none_content(cls, value: Any) -> Any:
        return value or ""

    @model_validator(mode="before")
    @classmethod
    def _derive_sections(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("sections"):
            return data
        title = data.get("title") or ""
        if data.get("content"):
            section = {
                "type": data.get("type") or data.get("lesson_type"),
                "title": title,
                "content": data["content"],
                "video_url": data.get("video_url"),
            }
        else:
            section = {
                "type": LessonType.TEXT,
                "title": title,
                "content": data.get("description") or EMPTY_LESSON_TEXT,
            }
        return {**data, "sections": [section]}


class Question(_Content):
    id: ContentId
    question_text: str = Field(validation_alias=AliasChoices("question_text", "question"))
    options: List[str] = Field(default_factory=list)
    correct_answer_index: int = Field(validation_alias=AliasChoices("correct_answer_index", "correct"))
    explanation: str = ""

    @field_validator("options", mode="before")
    @classmethod
    def _decode_options(cls, value: Any) -> Any:
        # MySQL JSON columns sometimes come back as strings
        if isinstance(value, str):
            return json.loads(value)
        return value

    @field_validator("explanation", mode="before")
    @classmethod
    def _none_explanation(cls, value: Any) -> Any:
        return value or ""


class Quiz(_Content):
    """
    Assessment attached to a module.

    Summaries returned by the module quiz listing carry ``question_count`` and no
    ``questions``; the full quiz carries the ordered questions.
    """
    id: ContentId
    module_id: Optional[ContentId] = None
    title: str
    description: str = ""
    time_limit: Optional[int] = None
    passing_score: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("passing_score", "passing_score_percentage")
    )
    xp_reward: int = 0
    question_count: Optional[int] = None
    questions: List[Question] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return value or ""

    def effective_passing_score(self, default: float = DEFAULT_PASSING_SCORE) -> float:
        # 0 falls back too, matching `passing_score || 70` on the web client
        return self.passing_score or default

    @property
    def total_questions(self) -> int:
        if self.questions:
            return len(self.questions)
        return self.question_count or 0


class Module(_Content):
    """Top-level learning unit. Lesson order defines the auto-chain order."""
    id: ContentId
    title: str
    subtitle: str = Field(default="", validation_alias=AliasChoices("subtitle", "description"))
    category: str = ""
    difficulty: Difficulty = Difficulty.BEGINNER
    duration: Optional[Union[int, str]] = Field(
        default=None, validation_alias=AliasChoices("duration", "estimated_duration")
    )
    xp_reward: int = 0
    lessons: List[Lesson] = Field(default_factory=list)
    quizzes: List[Quiz] = Field(default_factory=list)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> Any:
        if value is None or value == "":
            return Difficulty.BEGINNER
        return value.strip().capitalize() if isinstance(value, str) else value

    @field_validator("subtitle", "category", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return value or ""

    @model_validator(mode="before")
    @classmethod
    def _attach_module_id(cls, data: Any) -> Any:
        """Lessons and quizzes in the module payload don't repeat the module id."""
        if not isinstance(data, dict) or data.get("id") is None:
            return data
        data = dict(data)
        for key in ("lessons", "quizzes"):
            children = data.get(key)
            if isinstance(children, list):
                data[key] = [
                    {**child, "module_id": child.get("module_id") or data["id"]}
                    if isinstance(child, dict) else child
                    for child in children
                ]
        return data

    def lesson_index(self, lesson_id: ContentId) -> Optional[int]:
        for i, lesson in enumerate(self.lessons):
            if lesson.id == lesson_id:
                return i
        return None

    def lesson_after(self, lesson_id: ContentId) -> Optional[Lesson]:
        """Next lesson in module order, or None for the last (or an unknown) lesson."""
        index = self.lesson_index(lesson_id)
        if index is None or index + 1 >= len(self.lessons):
            return None
        return self.lessons[index + 1]

    @property
    def first_quiz(self) -> Optional[Quiz]:
        return self.quizzes[0] if self.quizzes else None

    def with_quizzes(self, quizzes: List[Quiz]) -> "Module":
        return self.model_copy(update={"quizzes": list(quizzes)})
