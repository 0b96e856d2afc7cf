"""
Learning session request/response schemas.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from learning.context import Role


class LearningAction(str, Enum):
    GO_HOME = "go_home"
    BROWSE = "browse"
    BACK = "back"
    OPEN_MODULE = "open_module"
    RETRY_MODULE = "retry_module"
    OPEN_LESSON = "open_lesson"
    OPEN_QUIZ = "open_quiz"
    NEXT_SECTION = "next_section"
    PREVIOUS_SECTION = "previous_section"
    LESSON_FORWARD = "lesson_forward"
    SELECT_ANSWER = "select_answer"
    ADVANCE_QUIZ = "advance_quiz"
    PREVIOUS_QUESTION = "previous_question"
    TRY_AGAIN = "try_again"
    CONTINUE_LEARNING = "continue_learning"
    OPEN_CHALLENGES = "open_challenges"
    OPEN_CHALLENGE = "open_challenge"


class CreateLearningSessionRequest(BaseModel):
    """Learner context for the new session. Read-only for the engine."""
    user_id: str = ""
    nickname: str = ""
    role: Role = Role.ANONYMOUS
    xp: int = 0
    trust_score: float = 0.0


class LearningActionRequest(BaseModel):
    action: LearningAction
    module_id: Optional[Union[int, str]] = None
    lesson_id: Optional[Union[int, str]] = None
    quiz_id: Optional[Union[int, str]] = None
    challenge_id: Optional[int] = None
    answer_index: Optional[int] = None


class LearningSessionResponse(BaseModel):
    session_id: str
    state: dict[str, Any]


class LearningActionResponse(LearningSessionResponse):
    """``outcome`` names what the action led to (e.g. "checked", "TakeQuiz"), when it has one."""
    action: LearningAction
    outcome: Optional[str] = None


class CatalogFilterRequest(BaseModel):
    query: str = ""
    category: str = "All"
    difficulty: str = "All"


class CatalogResponse(BaseModel):
    session_id: str
    query: str
    category: str
    difficulty: str
    categories: list[str]
    difficulties: list[str]
    total: int
    has_more: bool
    modules: list[dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None


class EndLearningSessionResponse(BaseModel):
    session_id: str
    ended: bool
