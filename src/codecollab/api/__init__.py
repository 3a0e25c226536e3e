"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a blanket include_router(dependencies=...) auth gate, the
project routes resolve an AuthContext per handler and let the service
decide — reads stay open (unless CODECOLLAB_REQUIRE_AUTH_FOR_READS is set),
mutations need a caller, and project mutations need the owner.
"""

from fastapi import APIRouter

from codecollab.api.auth import router as auth_router
from codecollab.api.health import router as health_router
from codecollab.api.projects import router as projects_router
from codecollab.api.students import router as students_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(students_router, tags=["students"])
api_router.include_router(projects_router, tags=["projects"])
