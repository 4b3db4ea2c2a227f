"""Async client for the quiz and translation REST endpoints."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from quizdesk.models import Quiz

if TYPE_CHECKING:
    from quizdesk.config import Settings

log = logging.getLogger("quizdesk.api")


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    def server_message(self) -> str | None:
        """Message supplied by the server, if any."""
        if not isinstance(self.payload, dict):
            return None
        message = self.payload.get("message")
        if isinstance(message, str) and message:
            return message
        errors = self.payload.get("errors")
        if isinstance(errors, list) and errors:
            return ". ".join(str(e) for e in errors)
        return None


def unwrap(body: Any) -> Any:
    """Accept both ``{"data": ...}`` envelopes and bare bodies."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def create_client(settings: Settings, **kwargs: Any) -> httpx.AsyncClient:
    headers = {"Content-Type": "application/json"}
    if settings.api_token:
        headers["Authorization"] = f"Bearer {settings.api_token}"
    return httpx.AsyncClient(
        base_url=settings.api_url,
        headers=headers,
        timeout=settings.request_timeout,
        **kwargs,
    )


class _Endpoint:
    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        t0 = time.monotonic()
        try:
            resp = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"Request failed: {e}") from e
        elapsed = time.monotonic() - t0
        log.info("%s %s -> %d (%.2fs)", method, path, resp.status_code, elapsed)

        try:
            body = resp.json() if resp.content else None
        except ValueError:
            body = None

        if resp.is_error:
            err = ApiError(f"HTTP {resp.status_code} for {method} {path}", resp.status_code, body)
            log.warning("%s", err.server_message() or err)
            raise err
        return unwrap(body)


class QuizzesAPI(_Endpoint):
    async def get_all(self, params: dict | None = None) -> list[Quiz]:
        data = await self._request("GET", "/quizzes", params=params)
        return _quiz_list(data)

    async def get_by_chapter(self, chapter_id: str, params: dict | None = None) -> list[Quiz]:
        data = await self._request("GET", f"/quizzes/chapter/{chapter_id}", params=params)
        return _quiz_list(data)

    async def get_by_id(self, quiz_id: str, params: dict | None = None) -> Quiz | None:
        data = await self._request("GET", f"/quizzes/{quiz_id}", params=params)
        return Quiz.from_dict(data) if isinstance(data, dict) else None

    async def create(self, payload: dict) -> Quiz | None:
        data = await self._request("POST", "/quizzes", json=payload)
        return Quiz.from_dict(data) if isinstance(data, dict) else None

    async def update(self, quiz_id: str, payload: dict) -> Quiz | None:
        data = await self._request("PUT", f"/quizzes/{quiz_id}", json=payload)
        return Quiz.from_dict(data) if isinstance(data, dict) else None

    async def update_status(self, quiz_id: str, is_active: bool) -> Quiz | None:
        data = await self._request("PATCH", f"/quizzes/{quiz_id}/status", json={"isActive": is_active})
        return Quiz.from_dict(data) if isinstance(data, dict) else None

    async def delete(self, quiz_id: str) -> None:
        await self._request("DELETE", f"/quizzes/{quiz_id}")


class TranslationsAPI(_Endpoint):
    async def get_all(self, language: str) -> Any:
        return await self._request("GET", "/translations", params={"language": language})


def _quiz_list(data: Any) -> list[Quiz]:
    if not isinstance(data, list):
        return []
    return [Quiz.from_dict(item) for item in data if isinstance(item, dict)]
