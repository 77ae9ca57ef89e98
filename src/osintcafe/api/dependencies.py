"""FastAPI dependency injection for orchestrator and sessions."""

from __future__ import annotations

from fastapi import Header, Request

from osintcafe.api.app_state import AppState
from osintcafe.identity.session import IdentityManager


def get_state(request: Request) -> AppState:
    """Get the typed AppState from app.state."""
    return request.app.state.typed  # type: ignore[no-any-return]


def get_identity(
    request: Request,
    x_session_token: str | None = Header(default=None),
) -> IdentityManager | None:
    """Resolve the caller's identity manager, or None when anonymous."""
    state = get_state(request)
    return state.sessions.get(x_session_token)
