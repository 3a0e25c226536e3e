"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to turn the
Authorization header into an AuthContext.

- get_auth_context never fails: a missing or bad token just yields an
  anonymous context. The service layer decides what needs a caller.
- require_read_access gates read routes only when
  CODECOLLAB_REQUIRE_AUTH_FOR_READS is on.
"""

from typing import Optional

from fastapi import Depends, Header

from codecollab.auth.context import AuthContext
from codecollab.config import settings
from codecollab.errors import Unauthenticated
from codecollab.services.auth_service import authenticate


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the raw token out of an ``Authorization: Bearer ...`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


async def get_auth_context(
    authorization: Optional[str] = Header(None),
) -> AuthContext:
    """Resolve the caller for this request (anonymous if no valid token)."""
    return authenticate(bearer_token(authorization))


async def require_read_access(
    ctx: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Let reads through, unless reads are configured to need a caller."""
    if settings.require_auth_for_reads and not ctx.is_authenticated:
        raise Unauthenticated()
    return ctx
