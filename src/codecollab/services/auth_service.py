"""Authentication gate — tokens in, AuthContext out; login and registration.

Learn: Three entry points:

1. authenticate(token) → AuthContext. Never raises. A missing, expired,
   forged, or non-access token is just an anonymous caller.
2. login(email, password) → (token, student). Unknown email and wrong
   password raise the same AuthenticationFailure, built fresh each time.
3. register(name, email, password) → (token, student). Registration
   doubles as login: the new student gets a token straight away.
"""

import uuid
from functools import lru_cache
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codecollab.auth.context import AuthContext
from codecollab.auth.jwt import TokenError, create_access_token, verify_token
from codecollab.auth.password import hash_password, verify_password
from codecollab.errors import (
    AuthenticationFailure,
    EmailAlreadyRegistered,
    NotFound,
    Unauthenticated,
)
from codecollab.repositories import PopulatedStudent, StudentRepository

logger = structlog.get_logger()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """A throwaway bcrypt hash, so unknown emails cost the same as wrong passwords."""
    return hash_password("not-a-real-password")


def authenticate(raw_token: Optional[str]) -> AuthContext:
    """Turn a raw bearer token into an AuthContext (anonymous on any failure)."""
    if not raw_token:
        return AuthContext.anonymous()
    try:
        payload = verify_token(raw_token)
        caller_id = uuid.UUID(payload["sub"])
    except (TokenError, ValueError) as e:
        logger.info("auth.token_rejected", reason=str(e))
        return AuthContext.anonymous()
    return AuthContext(caller_id=caller_id)


class AuthService:
    """Login, registration and "who am I" over the student repository."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.students = StudentRepository(db)

    async def login(self, email: str, password: str) -> tuple[str, PopulatedStudent]:
        student = await self.students.find_one(email=email)
        if student is None:
            verify_password(password, _dummy_hash())
            logger.info("auth.login_failed", reason="unknown_email")
            raise AuthenticationFailure()

        if not verify_password(password, student.password_hash):
            logger.info("auth.login_failed", reason="bad_password", student_id=str(student.id))
            raise AuthenticationFailure()

        token = create_access_token(student.id)
        logger.info("auth.login", student_id=str(student.id))
        return token, await self.students.populate(student)

    async def register(
        self, name: str, email: str, password: str
    ) -> tuple[str, PopulatedStudent]:
        """Create a student and log them in."""
        if await self.students.find_one(email=email) is not None:
            raise EmailAlreadyRegistered()

        try:
            student = await self.students.create(
                name=name,
                email=email,
                password_hash=hash_password(password),
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            await self.db.rollback()
            raise EmailAlreadyRegistered() from e
        token = create_access_token(student.id)
        logger.info("auth.registered", student_id=str(student.id))
        return token, await self.students.populate(student)

    async def me(self, ctx: AuthContext) -> PopulatedStudent:
        if not ctx.is_authenticated:
            raise Unauthenticated()
        student = await self.students.find_by_id(ctx.caller_id)
        if student is None:
            raise NotFound("Student not found")
        return await self.students.populate(student)
