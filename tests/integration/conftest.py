"""
Integration test fixtures. Overrides the learning session service for API tests
with one backed by the in-memory content source.
"""
import pytest


@pytest.fixture
def session_service(content_source, award_xp):
    from api.services.learning_session_service import LearningSessionService
    from api.config import Settings

    return LearningSessionService(
        content_factory=lambda: content_source,
        reward_factory=lambda context: award_xp,
        settings=Settings(catalog_page_size=2),
    )


@pytest.fixture
def api_client(session_service):
    """FastAPI TestClient with the in-memory session service."""
    from fastapi.testclient import TestClient
    from api.api import app
    from api.routes.learning_routes import get_session_service

    app.dependency_overrides[get_session_service] = lambda: session_service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
