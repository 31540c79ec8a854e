"""Bearer token authentication for user endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, Request, status

from calorie_tracker.adapters.supabase_auth import UserResolver  # noqa: TC001
from calorie_tracker.config import parse_bearer_token

if TYPE_CHECKING:
    from calorie_tracker.containers import AppContainer


def _get_user_resolver(request: Request) -> UserResolver:
    container: AppContainer = request.app.state.container
    return container.user_resolver


async def require_user(
    authorization: str | None = Header(default=None),
    resolver: UserResolver = Depends(_get_user_resolver),
) -> str:
    """Return the id of the user owning the bearer token."""
    token = parse_bearer_token(authorization)
    user_id = resolver.resolve(token) if token else None
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
