"""
ApiClient - HTTP access to the platform's JSON API.

Provides:
- Curriculum and progress reads
- Lesson completion and watch-position writes
- Assessment attempt start/submit
- Read-through cache for dashboard lookups keyed by (resource, parent id)

Every endpoint answers with an envelope ``{success, data, error}``; failures of
any kind surface as ``ApiError``.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import httpx

from learnpath.config import Settings, get_settings
from learnpath.errors import ApiError

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time in the ISO format the backend stores."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ResourceCache:
    """
    Read-through cache for lookup lists shared across dashboard views.

    Entries are keyed by ``(resource, parent_id)`` and live until invalidated.
    """

    def __init__(self):
        self._entries: dict[tuple[str, Optional[str]], Any] = {}
        self._lock = threading.Lock()

    def get_or_load(self, resource: str, parent_id: Optional[str], load: Callable[[], Any]) -> Any:
        key = (resource, parent_id)
        with self._lock:
            if key in self._entries:
                return self._entries[key]
        value = load()
        with self._lock:
            self._entries.setdefault(key, value)
            return self._entries[key]

    def invalidate(self, resource: str, parent_id: Optional[str] = None):
        """Drop one entry, or every entry of ``resource`` when no parent is given."""
        with self._lock:
            if parent_id is not None:
                self._entries.pop((resource, parent_id), None)
                return
            for key in [k for k in self._entries if k[0] == resource]:
                del self._entries[key]

    def __contains__(self, key: tuple[str, Optional[str]]) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ApiClient:
    """Thin synchronous client over the platform's ``/api`` routes."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        cache: Optional[ResourceCache] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Platform origin (default: settings.api_base_url)
            token: Optional bearer token
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
            cache: Shared lookup cache (default: a private one)
        """
        settings = get_settings()
        headers = {"Accept": "application/json"}
        token = token if token is not None else settings.api_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            headers=headers,
            transport=transport,
        )
        self.cache = cache if cache is not None else ResourceCache()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ApiClient":
        return cls(
            base_url=settings.api_base_url,
            token=settings.api_token,
            timeout=settings.request_timeout,
            **kwargs,
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        expect_body: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body."""
        logger.debug(f"{method} {path} params={params}")
        try:
            response = self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(f"Network error: {e}", endpoint=path) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            message = _error_message(body) or f"{method} {path} failed"
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise ApiError(
                message,
                status_code=response.status_code,
                code=_error_code(body),
                endpoint=path,
            )

        if body is None:
            if expect_body:
                raise ApiError("Invalid response from server", status_code=response.status_code, endpoint=path)
            return None

        if isinstance(body, dict) and body.get("success") is False:
            message = _error_message(body) or "Request failed"
            raise ApiError(message, status_code=response.status_code, code=_error_code(body), endpoint=path)

        return body

    @staticmethod
    def _data(body: Any) -> Any:
        if isinstance(body, dict):
            return body.get("data")
        return None

    # -------------------------------------------------------------------------
    # Curriculum and progress
    # -------------------------------------------------------------------------

    def get_curriculum(self, course_id: str) -> dict:
        """GET /api/courses?id=...&curriculum=true -> data dict."""
        body = self._request("GET", "/api/courses", params={"id": course_id, "curriculum": "true"})
        return self._data(body) or {}

    def get_progress(self, user_id: str, course_id: str) -> Optional[dict]:
        """GET /api/progress for a learner's course progress (cache-busted)."""
        body = self._request(
            "GET",
            "/api/progress",
            params={
                "userId": user_id,
                "courseId": course_id,
                "t": int(time.time() * 1000),
            },
        )
        return self._data(body)

    def mark_lesson_complete(self, user_id: str, lesson_id: str):
        """POST /api/progress?...&complete=true (no body)."""
        self._request(
            "POST",
            "/api/progress",
            params={"userId": user_id, "lessonId": lesson_id, "complete": "true"},
            expect_body=False,
        )

    def update_lesson_position(self, user_id: str, lesson_id: str, position: float):
        """PUT /api/progress with the last watched position in whole seconds."""
        self._request(
            "PUT",
            "/api/progress",
            params={"userId": user_id, "lessonId": lesson_id},
            json={"lastWatchedPosition": int(position)},
            expect_body=False,
        )

    # -------------------------------------------------------------------------
    # Assessment attempts
    # -------------------------------------------------------------------------

    def start_attempt(
        self,
        assessment_id: str,
        user_id: str,
        enrollment_id: str,
        started_at: Optional[str] = None,
    ) -> dict:
        """Create an IN_PROGRESS attempt. Returns ``{attempt, questions?}``."""
        body = self._request(
            "POST",
            "/api/assessment-attempts",
            json={
                "assessmentId": assessment_id,
                "userId": user_id,
                "enrollmentId": enrollment_id,
                "status": "IN_PROGRESS",
                "startedAt": started_at or utc_now_iso(),
            },
        )
        return self._data(body) or {}

    def submit_attempt(
        self,
        attempt_id: str,
        answers: dict[str, Any],
        score: float,
        percentage: int,
        passed: bool,
        time_spent: int,
        completed_at: Optional[str] = None,
    ) -> dict:
        """Finalize an attempt as COMPLETED. Returns ``{attempt?, results?}``."""
        body = self._request(
            "POST",
            "/api/assessment-attempts",
            params={"id": attempt_id, "submit": "true"},
            json={
                "submit": True,
                "id": attempt_id,
                "answers": answers,
                "score": score,
                "percentage": percentage,
                "passed": passed,
                "status": "COMPLETED",
                "completedAt": completed_at or utc_now_iso(),
                "timeSpent": time_spent,
            },
        )
        return self._data(body) or {}

    # -------------------------------------------------------------------------
    # Dashboard lookups
    # -------------------------------------------------------------------------

    def list_resource(
        self,
        resource: str,
        parent_key: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> list:
        """
        List a lookup resource (e.g. departments of a college) through the cache.

        Args:
            resource: Route name under /api (e.g. "departments")
            parent_key: Query parameter naming the parent (e.g. "collegeId")
            parent_id: Parent identifier

        Returns:
            The ``data`` list of the response
        """
        def load():
            params = {parent_key: parent_id} if parent_key and parent_id else None
            data = self._data(self._request("GET", f"/api/{resource}", params=params))
            return data if isinstance(data, list) else []

        return self.cache.get_or_load(resource, parent_id, load)


def _error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return body.get("message")


def _error_code(body: Any) -> Optional[str]:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("code")
    return None
