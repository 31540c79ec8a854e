"""Resolve API callers from Supabase access tokens."""

import logging
from dataclasses import dataclass
from typing import Protocol

from supabase import Client

_logger = logging.getLogger(__name__)


class UserResolver(Protocol):
    """Maps an access token to a user id."""

    def resolve(self, access_token: str) -> str | None:
        """Return the user id for a valid token, else None."""


@dataclass
class SupabaseUserResolver(UserResolver):
    """Validates access tokens with Supabase Auth."""

    client: Client

    def resolve(self, access_token: str) -> str | None:
        """Return the id of the user owning the token."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as exc:
            _logger.info("Rejected access token: %s", exc)
            return None
        user = getattr(response, "user", None)
        user_id = getattr(user, "id", None)
        return str(user_id) if user_id else None
