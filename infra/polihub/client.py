"""
Async HTTP adapters for the PoliHub backend.

Every PoliHub endpoint answers with a ``{"success": bool, "data": ...}``
envelope. Transport errors, non-2xx statuses, ``success: false`` and payloads
that don't validate are all reported as ``ContentFetchError`` so the engine
has a single failure to handle.
"""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from api.config import Settings, get_settings
from api.utils.logger import configure_logging
from learning.content import ContentId, Module, Quiz
from learning.errors import ContentFetchError, RewardError

logger = configure_logging()


class PoliHubClient:
    """Content source for the learning engine, backed by the PoliHub REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PoliHubClient":
        settings = settings or get_settings()
        return cls(settings.polihub_api_url, timeout=settings.http_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def list_modules(self, category: Optional[str] = None, difficulty: Optional[str] = None) -> List[Module]:
        params = {"status": "published"}
        if category:
            params["category"] = category
        if difficulty:
            params["difficulty"] = difficulty
        data = await self._get_data("/api/polihub/civic-modules", params=params)
        return [self._parse(Module, item, "module") for item in data or []]

    async def get_module(self, module_id: ContentId) -> Module:
        data = await self._get_data(f"/api/polihub/civic-modules/{module_id}")
        if data is None:
            raise ContentFetchError(f"Module {module_id} not found")
        return self._parse(Module, data, "module")

    async def get_module_quizzes(self, module_id: ContentId) -> List[Quiz]:
        data = await self._get_data(f"/api/polihub/civic-modules/{module_id}/quizzes")
        return [self._parse(Quiz, {**item, "module_id": item.get("module_id", module_id)}, "quiz") for item in data or []]

    async def get_quiz(self, quiz_id: ContentId) -> Quiz:
        data = await self._get_data(f"/api/polihub/quizzes/{quiz_id}")
        if data is None:
            raise ContentFetchError(f"Quiz {quiz_id} not found")
        return self._parse(Quiz, data, "quiz")

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.error("polihub request failed path=%s error=%s", path, exc)
            raise ContentFetchError(f"Could not reach content service: {exc}") from exc
        if response.status_code >= 400:
            logger.warning("polihub error status=%s path=%s", response.status_code, path)
            raise ContentFetchError(f"Content service returned {response.status_code} for {path}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise ContentFetchError(f"Content service returned invalid JSON for {path}") from exc
        if not isinstance(payload, dict) or not payload.get("success"):
            error = payload.get("error") if isinstance(payload, dict) else None
            raise ContentFetchError(error or f"Content service rejected {path}")
        return payload.get("data")

    @staticmethod
    def _parse(model, data: Any, kind: str):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.warning("malformed %s payload: %s", kind, exc.errors())
            raise ContentFetchError(f"Malformed {kind} payload") from exc


class RewardClient:
    """
    XP reward hook. Call it like ``await hook(action, amount, ref_id, ref_type)``.
    """

    def __init__(
        self,
        base_url: str,
        user_id: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.user_id = user_id
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, user_id: str, settings: Optional[Settings] = None) -> "RewardClient":
        settings = settings or get_settings()
        return cls(settings.polihub_api_url, user_id, timeout=settings.http_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def __call__(self, action: str, amount: int, ref_id: ContentId, ref_type: str) -> None:
        body = {
            "action": action,
            "xp": amount,
            "referenceId": ref_id,
            "referenceType": ref_type,
        }
        try:
            response = await self._client.post(f"/api/users/{self.user_id}/xp", json=body)
        except httpx.HTTPError as exc:
            raise RewardError(f"Could not reach reward service: {exc}") from exc
        if response.status_code >= 400:
            raise RewardError(f"Reward service returned {response.status_code}")
        logger.info("xp awarded user_id=%s action=%s amount=%s ref=%s:%s", self.user_id, action, amount, ref_type, ref_id)
