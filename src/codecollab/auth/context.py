"""Per-request authentication context."""

import uuid
from typing import Optional


class AuthContext:
    """Who is making this request, if anyone.

    Learn: Derived fresh from the bearer token on every request and never
    stored. An unauthenticated context has no caller_id — always check
    ``is_authenticated`` before trusting ``caller_id``.
    """

    __slots__ = ("caller_id",)

    def __init__(self, caller_id: Optional[uuid.UUID] = None):
        self.caller_id = caller_id

    @property
    def is_authenticated(self) -> bool:
        return self.caller_id is not None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    def __repr__(self) -> str:
        return f"AuthContext(caller_id={self.caller_id!r})"
