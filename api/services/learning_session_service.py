"""
Learning session service: one in-memory screen router per learning session.
"""

import inspect
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from api.config import Settings, get_settings
from api.schemas.learning_schemas import LearningAction, LearningActionRequest
from api.utils.logger import configure_logging, log_operation
from learning.context import LearnerContext
from learning.router import ContentSource, RewardHook, ScreenRouter

logger = configure_logging()

ContentFactory = Callable[[], ContentSource]
RewardFactory = Callable[[LearnerContext], Optional[RewardHook]]


class SessionNotFoundError(KeyError):
    pass


@dataclass
class LearningSession:
    id: str
    context: LearnerContext
    router: ScreenRouter
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_activity_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resources: List[Any] = field(default_factory=list)

    def touch(self) -> None:
        self.last_activity_at = datetime.now(timezone.utc)


class LearningSessionService:
    """Creates, looks up, drives and ends learning sessions."""

    def __init__(
        self,
        content_factory: ContentFactory,
        reward_factory: Optional[RewardFactory] = None,
        settings: Optional[Settings] = None,
    ):
        self.content_factory = content_factory
        self.reward_factory = reward_factory
        self.settings = settings or get_settings()
        self._active_sessions: Dict[str, LearningSession] = {}

    async def create_session(self, context: LearnerContext) -> LearningSession:
        content = self.content_factory()
        award_xp = self.reward_factory(context) if self.reward_factory else None
        router = ScreenRouter(
            content,
            context,
            award_xp,
            page_size=self.settings.catalog_page_size,
            default_passing_score=self.settings.default_passing_score,
            quiz_xp_action=self.settings.quiz_xp_action,
        )
        session = LearningSession(
            id=str(uuid4()),
            context=context,
            router=router,
            resources=[r for r in (content, award_xp) if hasattr(r, "close")],
        )
        self._active_sessions[session.id] = session
        logger.info("learning session created session_id=%s user_id=%s role=%s", session.id, context.user_id, context.role)
        await router.refresh_catalog()
        return session

    def get_session(self, session_id: str) -> LearningSession:
        session = self._active_sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def list_sessions(self) -> List[LearningSession]:
        return list(self._active_sessions.values())

    async def end_session(self, session_id: str) -> LearningSession:
        session = self._active_sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        for resource in session.resources:
            result = resource.close()
            if inspect.isawaitable(result):
                await result
        logger.info("learning session ended session_id=%s", session_id)
        return session

    async def close(self) -> None:
        for session_id in list(self._active_sessions):
            await self.end_session(session_id)

    async def perform(self, session_id: str, req: LearningActionRequest) -> Optional[str]:
        """Run one action against the session's router. Returns a short outcome label, if any."""
        session = self.get_session(session_id)
        session.touch()
        router = session.router
        with log_operation(logger, f"action {req.action.value}"):
            return await self._dispatch(router, req)

    async def _dispatch(self, router: ScreenRouter, req: LearningActionRequest) -> Optional[str]:
        action = req.action
        if action is LearningAction.GO_HOME:
            router.go_home()
        elif action is LearningAction.BROWSE:
            router.browse()
        elif action is LearningAction.BACK:
            router.back()
        elif action is LearningAction.OPEN_MODULE:
            applied = await router.open_module(_required(req.module_id, "module_id"))
            return "loaded" if applied else "not_loaded"
        elif action is LearningAction.RETRY_MODULE:
            applied = await router.retry_module()
            return "loaded" if applied else "not_loaded"
        elif action is LearningAction.OPEN_LESSON:
            router.open_lesson(_required(req.lesson_id, "lesson_id"))
        elif action is LearningAction.OPEN_QUIZ:
            applied = await router.open_quiz(_required(req.quiz_id, "quiz_id"))
            return "loaded" if applied else "not_loaded"
        elif action is LearningAction.NEXT_SECTION:
            return _moved(router.next_section())
        elif action is LearningAction.PREVIOUS_SECTION:
            return _moved(router.previous_section())
        elif action is LearningAction.LESSON_FORWARD:
            step = await router.lesson_forward()
            return "moved" if step is None else type(step).__name__
        elif action is LearningAction.SELECT_ANSWER:
            return _moved(router.select_answer(_required(req.answer_index, "answer_index")))
        elif action is LearningAction.ADVANCE_QUIZ:
            return (await router.advance_quiz()).value
        elif action is LearningAction.PREVIOUS_QUESTION:
            return _moved(router.previous_question())
        elif action is LearningAction.TRY_AGAIN:
            router.try_again()
        elif action is LearningAction.CONTINUE_LEARNING:
            router.continue_learning()
        elif action is LearningAction.OPEN_CHALLENGES:
            router.open_challenges()
        elif action is LearningAction.OPEN_CHALLENGE:
            router.open_challenge(_required(req.challenge_id, "challenge_id"))
        return None


class MissingFieldError(ValueError):
    pass


def _required(value, name: str):
    if value is None:
        raise MissingFieldError(f"{name} is required for this action")
    return value


def _moved(moved: bool) -> str:
    return "moved" if moved else "unchanged"
