"""
Learning session endpoints: create a session, drive its screen router, read its state.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from api.schemas.learning_schemas import (
    CatalogFilterRequest,
    CatalogResponse,
    CreateLearningSessionRequest,
    EndLearningSessionResponse,
    LearningActionRequest,
    LearningActionResponse,
    LearningSessionResponse,
)
from api.services.learning_session_service import (
    LearningSession,
    LearningSessionService,
    MissingFieldError,
    SessionNotFoundError,
)
from api.utils.logger import configure_logging, set_session_id
from infra.polihub.client import PoliHubClient, RewardClient
from learning.catalog import CatalogBrowser
from learning.challenges import list_challenges as all_challenges
from learning.context import LearnerContext
from learning.errors import (
    AnswerRequiredError,
    ChallengeNotFoundError,
    InvalidAnswerError,
    InvalidTransitionError,
    UnknownModuleError,
)

learning_routes = APIRouter()
logger = configure_logging()


@lru_cache
def get_session_service() -> LearningSessionService:
    return LearningSessionService(
        content_factory=PoliHubClient.from_settings,
        reward_factory=lambda context: RewardClient.from_settings(context.user_id),
    )


def _session_or_404(service: LearningSessionService, session_id: str) -> LearningSession:
    try:
        session = service.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Learning session not found")
    set_session_id(session_id)
    return session


def _catalog_response(session_id: str, catalog: CatalogBrowser, error=None) -> CatalogResponse:
    return CatalogResponse(
        session_id=session_id,
        query=catalog.query,
        category=catalog.category,
        difficulty=catalog.difficulty,
        categories=list(catalog.categories),
        difficulties=list(catalog.difficulties),
        total=len(catalog.results),
        has_more=catalog.has_more,
        modules=[m.model_dump(mode="json", exclude={"lessons", "quizzes"}) for m in catalog.visible],
        error=error,
    )


@learning_routes.post("/sessions", response_model=LearningSessionResponse)
async def create_learning_session(
    req: CreateLearningSessionRequest,
    service: LearningSessionService = Depends(get_session_service),
) -> LearningSessionResponse:
    """Start a learning session on the home screen with the catalog loaded."""
    context = LearnerContext(
        user_id=req.user_id,
        nickname=req.nickname,
        role=req.role,
        xp=req.xp,
        trust_score=req.trust_score,
    )
    session = await service.create_session(context)
    set_session_id(session.id)
    return LearningSessionResponse(session_id=session.id, state=session.router.snapshot())


@learning_routes.get("/sessions/{session_id}", response_model=LearningSessionResponse)
async def get_learning_session(
    session_id: str,
    service: LearningSessionService = Depends(get_session_service),
) -> LearningSessionResponse:
    session = _session_or_404(service, session_id)
    return LearningSessionResponse(session_id=session.id, state=session.router.snapshot())


@learning_routes.delete("/sessions/{session_id}", response_model=EndLearningSessionResponse)
async def end_learning_session(
    session_id: str,
    service: LearningSessionService = Depends(get_session_service),
) -> EndLearningSessionResponse:
    _session_or_404(service, session_id)
    await service.end_session(session_id)
    return EndLearningSessionResponse(session_id=session_id, ended=True)


@learning_routes.post("/sessions/{session_id}/actions", response_model=LearningActionResponse)
async def perform_learning_action(
    session_id: str,
    req: LearningActionRequest,
    service: LearningSessionService = Depends(get_session_service),
) -> LearningActionResponse:
    """
    Apply one user action (open module, next section, select answer, ...).

    A rejected action leaves the session untouched: 400 for input problems
    (no answer selected, bad option), 404 for unknown content ids, 409 when the
    action is not available on the current screen.
    """
    session = _session_or_404(service, session_id)
    try:
        outcome = await service.perform(session_id, req)
    except (AnswerRequiredError, InvalidAnswerError, MissingFieldError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except (ChallengeNotFoundError, UnknownModuleError) as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return LearningActionResponse(
        session_id=session.id,
        action=req.action,
        outcome=outcome,
        state=session.router.snapshot(),
    )


@learning_routes.get("/sessions/{session_id}/catalog", response_model=CatalogResponse)
async def get_catalog(
    session_id: str,
    service: LearningSessionService = Depends(get_session_service),
) -> CatalogResponse:
    router = _session_or_404(service, session_id).router
    return _catalog_response(session_id, router.catalog, router.catalog_error)


@learning_routes.put("/sessions/{session_id}/catalog/filters", response_model=CatalogResponse)
async def filter_catalog(
    session_id: str,
    req: CatalogFilterRequest,
    service: LearningSessionService = Depends(get_session_service),
) -> CatalogResponse:
    router = _session_or_404(service, session_id).router
    catalog = router.catalog
    if req.category not in catalog.categories:
        raise HTTPException(status_code=400, detail=f"Unknown category: {req.category}")
    if req.difficulty not in catalog.difficulties:
        raise HTTPException(status_code=400, detail=f"Unknown difficulty: {req.difficulty}")
    catalog.set_category(req.category)
    catalog.set_difficulty(req.difficulty)
    catalog.set_query(req.query)
    return _catalog_response(session_id, catalog, router.catalog_error)


@learning_routes.post("/sessions/{session_id}/catalog/more", response_model=CatalogResponse)
async def show_more_catalog(
    session_id: str,
    service: LearningSessionService = Depends(get_session_service),
) -> CatalogResponse:
    router = _session_or_404(service, session_id).router
    router.catalog.show_more()
    return _catalog_response(session_id, router.catalog, router.catalog_error)


@learning_routes.post("/sessions/{session_id}/catalog/refresh", response_model=CatalogResponse)
async def refresh_catalog(
    session_id: str,
    service: LearningSessionService = Depends(get_session_service),
) -> CatalogResponse:
    router = _session_or_404(service, session_id).router
    await router.refresh_catalog()
    return _catalog_response(session_id, router.catalog, router.catalog_error)


@learning_routes.get("/challenges")
async def get_challenges() -> dict:
    return {"challenges": [c.model_dump(mode="json") for c in all_challenges()]}
