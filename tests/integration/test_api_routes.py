"""
API route tests for the learning session endpoints.
Uses the in-memory content source; no PoliHub backend is needed.
"""
import pytest


def _create(api_client, **body):
    response = api_client.post("/learning/sessions", json=body)
    assert response.status_code == 200
    return response.json()["session_id"]


def _act(api_client, session_id, action, **fields):
    return api_client.post(f"/learning/sessions/{session_id}/actions", json={"action": action, **fields})


@pytest.mark.integration
class TestHealth:
    def test_root_returns_healthy(self, api_client):
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.json() == {"message": "Civic Learning is Healthy"}


@pytest.mark.integration
class TestLearningSessions:
    def test_create_and_get(self, api_client):
        response = api_client.post("/learning/sessions", json={"user_id": "u-9", "nickname": "Amani"})
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == {"screen": "home"}

        fetched = api_client.get(f"/learning/sessions/{data['session_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["session_id"] == data["session_id"]

    def test_unknown_session_404(self, api_client):
        assert api_client.get("/learning/sessions/missing").status_code == 404
        assert _act(api_client, "missing", "browse").status_code == 404

    def test_end_session(self, api_client):
        session_id = _create(api_client)
        response = api_client.delete(f"/learning/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json() == {"session_id": session_id, "ended": True}
        assert api_client.get(f"/learning/sessions/{session_id}").status_code == 404

    def test_full_quiz_flow(self, api_client, award_xp):
        session_id = _create(api_client, user_id="u-1")
        assert _act(api_client, session_id, "browse").json()["state"]["screen"] == "browse"

        opened = _act(api_client, session_id, "open_module", module_id=3).json()
        assert opened["outcome"] == "loaded"
        assert opened["state"]["screen"] == "module"
        assert opened["state"]["module"]["quizzes"][0]["id"] == 301

        lesson = _act(api_client, session_id, "open_lesson", lesson_id=31).json()
        assert lesson["state"]["forward_label"] == "Complete & Take Quiz"

        chained = _act(api_client, session_id, "lesson_forward").json()
        assert chained["outcome"] == "TakeQuiz"
        assert chained["state"]["screen"] == "quiz"
        assert chained["state"]["action_label"] == "Check Answer"

        for index in (0, 1):
            _act(api_client, session_id, "select_answer", answer_index=index)
            checked = _act(api_client, session_id, "advance_quiz").json()
            assert checked["outcome"] == "checked"
            assert checked["state"]["is_correct"] is True
            final = _act(api_client, session_id, "advance_quiz").json()

        assert final["outcome"] == "completed"
        assert final["state"]["screen"] == "quiz_result"
        assert final["state"]["result"]["percentage"] == 100
        assert final["state"]["result"]["passed"] is True
        award_xp.assert_awaited_once_with("quiz_completion", 40, 301, "quiz")

        back = _act(api_client, session_id, "continue_learning").json()
        assert back["state"]["screen"] == "module"

    def test_advance_without_answer_is_400(self, api_client):
        session_id = _create(api_client)
        _act(api_client, session_id, "browse")
        _act(api_client, session_id, "open_module", module_id=1)
        _act(api_client, session_id, "open_quiz", quiz_id=101)
        response = _act(api_client, session_id, "advance_quiz")
        assert response.status_code == 400
        assert response.json()["detail"] == "Please select an answer before checking."
        state = api_client.get(f"/learning/sessions/{session_id}").json()["state"]
        assert state["question_index"] == 0

    def test_bad_option_is_400(self, api_client):
        session_id = _create(api_client)
        _act(api_client, session_id, "browse")
        _act(api_client, session_id, "open_module", module_id=1)
        _act(api_client, session_id, "open_quiz", quiz_id=101)
        assert _act(api_client, session_id, "select_answer", answer_index=9).status_code == 400
        assert _act(api_client, session_id, "select_answer").status_code == 400

    def test_wrong_screen_is_409(self, api_client):
        session_id = _create(api_client)
        response = _act(api_client, session_id, "open_lesson", lesson_id=11)
        assert response.status_code == 409
        assert response.json()["detail"] == "Cannot open lesson from screen home"

    def test_unknown_module_is_404(self, api_client):
        session_id = _create(api_client)
        _act(api_client, session_id, "browse")
        response = _act(api_client, session_id, "open_module", module_id=77)
        assert response.status_code == 404
        assert response.json()["detail"] == "Module 77 not found"

    def test_unknown_challenge_is_404(self, api_client):
        session_id = _create(api_client)
        _act(api_client, session_id, "open_challenges")
        response = _act(api_client, session_id, "open_challenge", challenge_id=12)
        assert response.status_code == 404

    def test_unknown_action_is_422(self, api_client):
        session_id = _create(api_client)
        assert _act(api_client, session_id, "teleport").status_code == 422

    def test_module_fetch_failure_shows_error(self, api_client, content_source):
        content_source.fail.add(("module", 2))
        session_id = _create(api_client)
        _act(api_client, session_id, "browse")
        response = _act(api_client, session_id, "open_module", module_id=2).json()
        assert response["outcome"] == "not_loaded"
        assert response["state"]["error"] == "module 2 unavailable"
        content_source.fail.clear()
        retried = _act(api_client, session_id, "retry_module").json()
        assert retried["outcome"] == "loaded"
        assert retried["state"]["error"] is None


@pytest.mark.integration
class TestCatalog:
    def test_catalog_pages(self, api_client):
        session_id = _create(api_client)
        catalog = api_client.get(f"/learning/sessions/{session_id}/catalog").json()
        assert catalog["total"] == 3
        assert len(catalog["modules"]) == 2
        assert catalog["has_more"] is True

        more = api_client.post(f"/learning/sessions/{session_id}/catalog/more").json()
        assert len(more["modules"]) == 3
        assert more["has_more"] is False

    def test_filters(self, api_client):
        session_id = _create(api_client)
        response = api_client.put(
            f"/learning/sessions/{session_id}/catalog/filters",
            json={"query": "vot", "category": "Rights", "difficulty": "Advanced"},
        )
        assert response.status_code == 200
        assert [m["id"] for m in response.json()["modules"]] == [3]

    def test_invalid_filter_is_400_and_keeps_state(self, api_client):
        session_id = _create(api_client)
        response = api_client.put(
            f"/learning/sessions/{session_id}/catalog/filters",
            json={"category": "Rights", "difficulty": "Expert"},
        )
        assert response.status_code == 400
        catalog = api_client.get(f"/learning/sessions/{session_id}/catalog").json()
        assert catalog["category"] == "All"

    def test_refresh(self, api_client, content_source):
        session_id = _create(api_client)
        content_source.fail.add(("catalog", None))
        failed = api_client.post(f"/learning/sessions/{session_id}/catalog/refresh").json()
        assert failed["error"] == "catalog unavailable"
        assert failed["total"] == 3


@pytest.mark.integration
class TestChallenges:
    def test_list(self, api_client):
        response = api_client.get("/learning/challenges")
        assert response.status_code == 200
        assert [c["title"] for c in response.json()["challenges"]] == [
            "Democracy Basics Challenge",
            "Election Expert",
            "Policy Pro",
        ]


@pytest.mark.integration
class TestSessionLogging:
    def test_session_id_read_from_path(self):
        from api.api import session_id_from_path

        assert session_id_from_path("/learning/sessions/abc-123/actions") == "abc-123"
        assert session_id_from_path("/learning/sessions/abc-123") == "abc-123"
        assert session_id_from_path("/learning/sessions") is None
        assert session_id_from_path("/learning/challenges") is None

    def test_session_requests_carry_session_id(self, api_client):
        session_id = _create(api_client)
        response = _act(api_client, session_id, "browse")
        assert response.headers["x-session-id"] == session_id
        assert "x-session-id" not in api_client.get("/").headers


@pytest.mark.integration
class TestErrorMapping:
    def test_stray_key_error_is_a_server_error(self, session_service, monkeypatch):
        from fastapi.testclient import TestClient
        from api.api import app
        from api.routes.learning_routes import get_session_service

        async def broken(session_id, req):
            raise KeyError("lessons")

        monkeypatch.setattr(session_service, "perform", broken)
        app.dependency_overrides[get_session_service] = lambda: session_service
        with TestClient(app, raise_server_exceptions=False) as client:
            session_id = client.post("/learning/sessions", json={}).json()["session_id"]
            response = _act(client, session_id, "browse")
        app.dependency_overrides.clear()
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error"}
