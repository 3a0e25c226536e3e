"""Auth API — registration, login, current student.

Learn: Routes for the authentication gate:
- POST /auth/register → create a student, returns a token right away
- POST /auth/login → email/password → token + student
- GET /auth/me → the caller's own record, projects populated
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from codecollab.auth.context import AuthContext
from codecollab.auth.dependencies import get_auth_context
from codecollab.db.engine import get_db
from codecollab.schemas.student import StudentDetail
from codecollab.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    student: StudentDetail


def _svc(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


# ─── Routes ──────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a student account. Registration doubles as login."""
    token, student = await svc.register(
        name=body.name, email=body.email, password=body.password
    )
    return AuthResponse(token=token, student=StudentDetail.model_validate(student))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password → JWT token."""
    token, student = await svc.login(email=body.email, password=body.password)
    return AuthResponse(token=token, student=StudentDetail.model_validate(student))


@router.get("/me", response_model=StudentDetail)
async def get_me(
    ctx: AuthContext = Depends(get_auth_context),
    svc: AuthService = Depends(_svc),
):
    return await svc.me(ctx)
