"""Persistence boundary for plan moves.

The transport (HTTP client, auth, retries) belongs to the host application.
The board only needs an object with an async ``update`` that raises on
failure.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PlanPersistence(Protocol):
    """Anything that can persist a partial plan update."""

    async def update(self, plan_id: int | str, fields: Mapping[str, Any]) -> Any:
        """Persist changed fields for a plan.

        Raises:
            Exception: Any failure, including timeouts, rejects the move
        """
        ...


def _title_from(payload: Any) -> str | None:
    if isinstance(payload, Mapping):
        title = payload.get("title")
        if title:
            return str(title)
    return None


def extract_error_message(error: BaseException, fallback: str) -> str:
    """Best human-readable message for a failed move.

    Preference order: a server-provided title (on the error itself, its
    payload, or its response body), then the exception message, then
    ``fallback``.
    """
    title = getattr(error, "title", None)
    if title:
        return str(title)

    for attr in ("payload", "data"):
        title = _title_from(getattr(error, attr, None))
        if title:
            return title

    response = getattr(error, "response", None)
    if response is not None:
        title = _title_from(getattr(response, "data", None))
        if title:
            return title
        json_body = getattr(response, "json", None)
        if callable(json_body):
            try:
                title = _title_from(json_body())
            except ValueError:
                title = None
            if title:
                return title

    message = str(error).strip()
    return message or fallback
