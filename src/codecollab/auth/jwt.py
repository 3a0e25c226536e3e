"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication — the
server keeps no session table. The token carries the student id in
``sub`` and is re-verified on every request.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from codecollab.config import settings

ACCESS_TOKEN_TYPE = "access"


class TokenError(Exception):
    """Raised when token verification fails."""


def create_access_token(
    student_id: uuid.UUID | str,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token bound to a student id."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(student_id),
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(
            minutes=expires_minutes or settings.access_token_expire_minutes
        ),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict:
    """Verify and decode an access token.

    Returns the payload dict on success.
    Raises TokenError on failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise TokenError("Not an access token")
    return payload
