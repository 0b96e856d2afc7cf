"""
Screen router: the state machine of the civic learning screen.

Owns which screen is active (home, browse, module detail, lesson, quiz, quiz
result, challenges, challenge detail) and drives the lesson player and quiz
runner. Content arrives through an injected ``ContentSource``; the only
outbound effect is the XP reward hook called when a quiz completes.

Fetches are tagged with a request token. A response is applied only if its
token is still the latest of its kind and the screen that issued it is still
active; anything else is a stale response and is dropped.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Type, Union

from learning.catalog import DEFAULT_PAGE_SIZE, CatalogBrowser
from learning.challenges import get_challenge, list_challenges
from learning.content import DEFAULT_PASSING_SCORE, ContentId, Module, Quiz
from learning.context import LearnerContext
from learning.errors import ContentFetchError, InvalidTransitionError
from learning.lesson_player import AutoChain, LessonPlayer, NextLesson, ReturnToModule, TakeQuiz
from learning.quiz_runner import QuizRunner, QuizStep
from learning.screens import (
    Browse,
    ChallengeDetail,
    Challenges,
    Home,
    LessonView,
    ModuleDetail,
    QuizView,
    Screen,
    ScreenName,
)

logger = logging.getLogger(__name__)

QUIZ_REF_TYPE = "quiz"
DEFAULT_QUIZ_XP_ACTION = "quiz_completion"

RewardHook = Callable[[str, int, ContentId, str], Awaitable[None]]


class ContentSource(Protocol):
    async def list_modules(self) -> List[Module]: ...

    async def get_module(self, module_id: ContentId) -> Module: ...

    async def get_module_quizzes(self, module_id: ContentId) -> List[Quiz]: ...

    async def get_quiz(self, quiz_id: ContentId) -> Quiz: ...


class ScreenRouter:
    def __init__(
        self,
        content: ContentSource,
        context: LearnerContext,
        award_xp: Optional[RewardHook] = None,
        *,
        modules: Sequence[Module] = (),
        page_size: int = DEFAULT_PAGE_SIZE,
        default_passing_score: float = DEFAULT_PASSING_SCORE,
        quiz_xp_action: str = DEFAULT_QUIZ_XP_ACTION,
    ):
        self.content = content
        self.context = context
        self.award_xp = award_xp
        self.catalog = CatalogBrowser(modules, page_size=page_size)
        self.catalog_error: Optional[str] = None
        self.default_passing_score = default_passing_score
        self.quiz_xp_action = quiz_xp_action
        self.state: Screen = Home()
        self._request_seq = 0
        self._latest: Dict[str, int] = {"module": 0, "quiz": 0}

    # ----- inspection -----

    @property
    def screen(self) -> ScreenName:
        return self.state.name

    def snapshot(self) -> Dict[str, Any]:
        data = {"screen": self.screen.value}
        data.update(self.state.describe())
        return data

    # ----- catalog -----

    async def refresh_catalog(self) -> bool:
        """Replace the catalog's modules. Filters and the show-more cap are kept."""
        try:
            modules = await self.content.list_modules()
        except ContentFetchError as exc:
            logger.warning("catalog fetch failed: %s", exc)
            self.catalog_error = str(exc)
            return False
        self.catalog = self._rebuild_catalog(modules)
        self.catalog_error = None
        logger.info("catalog loaded modules=%s", len(modules))
        return True

    def _rebuild_catalog(self, modules: Sequence[Module]) -> CatalogBrowser:
        old = self.catalog
        catalog = CatalogBrowser(modules, page_size=old.page_size)
        catalog.query, catalog.category, catalog.difficulty = old.query, old.category, old.difficulty
        catalog.limit = old.limit
        return catalog

    # ----- navigation -----

    def go_home(self) -> None:
        self._enter(Home())

    def browse(self) -> None:
        self._require((Home, Challenges, ChallengeDetail), "browse")
        self._enter(Browse())

    def open_challenges(self) -> None:
        self._require((Home, Browse), "open challenges")
        self._enter(Challenges())

    def open_challenge(self, challenge_id: int) -> None:
        self._require(Challenges, "open challenge")
        self._enter(ChallengeDetail(get_challenge(challenge_id)))

    def list_challenges(self):
        return list_challenges()

    def back(self) -> None:
        state = self.state
        if isinstance(state, (LessonView, QuizView)):
            self._enter(ModuleDetail(topic=state.module, module=state.module))
        elif isinstance(state, ModuleDetail):
            self._enter(Browse())
        elif isinstance(state, ChallengeDetail):
            self._enter(Challenges())
        elif isinstance(state, (Browse, Challenges)):
            self._enter(Home())

    async def open_module(self, module: Union[Module, ContentId]) -> bool:
        """
        Show a module. The screen switches immediately (in a loading state) and the
        full detail is applied when the fetch resolves. Returns whether it was applied.
        """
        self._require((Home, Browse), "open module")
        if not isinstance(module, Module):
            module = self.catalog.find(module)
        screen = ModuleDetail(topic=module, loading=True)
        self._enter(screen)
        return await self._load_module(screen)

    async def retry_module(self) -> bool:
        screen = self._require(ModuleDetail, "retry module")
        screen.loading = True
        screen.error = None
        return await self._load_module(screen)

    def open_lesson(self, lesson_id: ContentId) -> None:
        screen = self._require(ModuleDetail, "open lesson")
        module = self._loaded_module(screen, "open lesson")
        index = module.lesson_index(lesson_id)
        if index is None:
            raise InvalidTransitionError(f"open lesson {lesson_id}", self.screen.value)
        self._enter(LessonView(module=module, player=LessonPlayer(module.lessons[index])))

    async def open_quiz(self, quiz_id: ContentId) -> bool:
        screen = self._require(ModuleDetail, "open quiz")
        module = self._loaded_module(screen, "open quiz")
        summary = next((q for q in module.quizzes if q.id == quiz_id), None)
        if summary is None:
            raise InvalidTransitionError(f"open quiz {quiz_id}", self.screen.value)
        return await self._start_quiz(screen, module, summary)

    # ----- lesson player -----

    def next_section(self) -> bool:
        return self._require(LessonView, "go to next section").player.next()

    def previous_section(self) -> bool:
        return self._require(LessonView, "go to previous section").player.previous()

    async def lesson_forward(self) -> Optional[AutoChain]:
        """The single forward button: next section, or complete on the last one."""
        screen = self._require(LessonView, "go forward")
        if screen.player.next():
            return None
        return await self.complete_lesson()

    async def complete_lesson(self) -> AutoChain:
        screen = self._require(LessonView, "complete lesson")
        if not screen.player.is_last:
            raise InvalidTransitionError("complete lesson before its last section", self.screen.value)
        step = screen.player.auto_chain(screen.module)
        logger.info("lesson completed lesson_id=%s next=%s", screen.lesson.id, type(step).__name__)
        if isinstance(step, NextLesson):
            screen.player = LessonPlayer(step.lesson)
            screen.error = None
        elif isinstance(step, TakeQuiz):
            await self._start_quiz(screen, screen.module, step.quiz)
        elif isinstance(step, ReturnToModule):
            self._enter(ModuleDetail(topic=screen.module, module=screen.module))
        return step

    # ----- quiz runner -----

    def select_answer(self, index: int) -> bool:
        return self._active_runner("select an answer").select(index)

    async def advance_quiz(self) -> QuizStep:
        screen = self._require(QuizView, "advance quiz")
        step = self._active_runner("advance quiz").advance()
        if step is QuizStep.COMPLETED:
            await self._reward(screen)
        return step

    def previous_question(self) -> bool:
        return self._active_runner("go to previous question").back()

    def try_again(self) -> None:
        screen = self._completed_quiz("try again")
        screen.runner.reset()
        screen.reward_error = None

    def continue_learning(self) -> None:
        screen = self._completed_quiz("continue learning")
        self._enter(ModuleDetail(topic=screen.module, module=screen.module))

    # ----- internals -----

    def _require(self, kinds: Union[Type, Tuple[Type, ...]], operation: str):
        if not isinstance(self.state, kinds):
            raise InvalidTransitionError(operation, self.screen.value)
        return self.state

    def _loaded_module(self, screen: ModuleDetail, operation: str) -> Module:
        if screen.module is None:
            raise InvalidTransitionError(f"{operation} before the module has loaded", self.screen.value)
        return screen.module

    def _active_runner(self, operation: str) -> QuizRunner:
        screen = self._require(QuizView, operation)
        if screen.runner.completed:
            raise InvalidTransitionError(operation, self.screen.value)
        return screen.runner

    def _completed_quiz(self, operation: str) -> QuizView:
        screen = self._require(QuizView, operation)
        if not screen.runner.completed:
            raise InvalidTransitionError(operation, self.screen.value)
        return screen

    def _enter(self, state: Screen) -> None:
        previous = self.state
        if isinstance(previous, QuizView) and previous is not state:
            previous.runner.reset()
        self.state = state
        logger.debug("screen %s -> %s", previous.name.value, state.name.value)

    def _issue(self, kind: str) -> int:
        self._request_seq += 1
        self._latest[kind] = self._request_seq
        return self._request_seq

    def _is_current(self, kind: str, token: int, origin: Screen) -> bool:
        return self._latest[kind] == token and self.state is origin

    async def _load_module(self, screen: ModuleDetail) -> bool:
        token = self._issue("module")
        module_id = screen.topic.id
        try:
            module = await self.content.get_module(module_id)
            quizzes = await self.content.get_module_quizzes(module_id)
        except ContentFetchError as exc:
            logger.warning("module fetch failed module_id=%s: %s", module_id, exc)
            if self._is_current("module", token, screen):
                screen.loading = False
                screen.error = str(exc)
            return False
        if not self._is_current("module", token, screen):
            logger.info("discarding stale module detail module_id=%s token=%s", module_id, token)
            return False
        screen.module = module.with_quizzes(quizzes)
        screen.loading = False
        screen.error = None
        logger.info(
            "module loaded module_id=%s lessons=%s quizzes=%s",
            module_id, len(module.lessons), len(quizzes),
        )
        return True

    async def _start_quiz(self, origin: Union[ModuleDetail, LessonView], module: Module, summary: Quiz) -> bool:
        """Fetch the full quiz, then switch to it with fresh quiz state. Failure leaves ``origin`` active."""
        token = self._issue("quiz")
        try:
            quiz = await self.content.get_quiz(summary.id)
        except ContentFetchError as exc:
            logger.warning("quiz fetch failed quiz_id=%s: %s", summary.id, exc)
            if self._is_current("quiz", token, origin):
                origin.error = str(exc)
            return False
        if not self._is_current("quiz", token, origin):
            logger.info("discarding stale quiz detail quiz_id=%s token=%s", summary.id, token)
            return False
        runner = QuizRunner(quiz, default_passing_score=self.default_passing_score)
        self._enter(QuizView(module=module, runner=runner))
        return True

    async def _reward(self, screen: QuizView) -> None:
        quiz = screen.quiz
        if self.award_xp is None:
            return
        if not screen.runner.result.passed:
            logger.info("xp not awarded quiz_id=%s attempt did not pass", quiz.id)
            return
        if not self.context.can_earn_xp:
            logger.info("xp not awarded user_id=%s lacks earn_xp permission", self.context.user_id)
            return
        try:
            await self.award_xp(self.quiz_xp_action, quiz.xp_reward, quiz.id, QUIZ_REF_TYPE)
        except Exception as exc:
            # The reward service is external; the recorded score stands regardless.
            logger.exception("xp award failed quiz_id=%s", quiz.id)
            screen.reward_error = str(exc) or exc.__class__.__name__
