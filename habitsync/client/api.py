from __future__ import annotations

import logging
from typing import Any

import httpx

from habitsync.settings import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response, carrying the server's `{error: {code, message}}` envelope."""

    def __init__(self, status: int, code: str, message: str, details: Any = None):
        self.status = status
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        err = body.get("error") if isinstance(body, dict) else None
        if not isinstance(err, dict):
            # FastAPI's HTTPException uses {"detail": ...}
            detail = body.get("detail") if isinstance(body, dict) else None
            err = {"message": detail} if isinstance(detail, str) else {}
        return cls(
            response.status_code,
            err.get("code") or "UNKNOWN_ERROR",
            err.get("message") or f"Request failed with status {response.status_code}",
            err.get("details"),
        )


class ApiClient:
    """Thin JSON client; the credential is forwarded as-is, never inspected."""

    def __init__(self, http: httpx.Client | None = None, base_url: str | None = None) -> None:
        self._owns_http = http is None
        self.http = http or httpx.Client(
            base_url=base_url or settings.API_BASE_URL,
            timeout=settings.SYNC_TIMEOUT_SEC,
        )

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def request(self, method: str, path: str, *, token: str | None = None, **kwargs) -> Any:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if settings.API_KEY:
            headers["X-API-Key"] = settings.API_KEY
        response = self.http.request(method, path, headers=headers, **kwargs)
        if response.status_code >= 400:
            raise ApiError.from_response(response)
        return response.json() if response.content else {}

    def post_sync(self, token: str, ops: list[dict[str, Any]]) -> Any:
        return self.request("POST", "/sync", token=token, json={"ops": ops})

    def get_habits(self, token: str, include_archived: bool = True) -> Any:
        params = {"includeArchived": "true" if include_archived else "false"}
        return self.request("GET", "/habits", token=token, params=params)
