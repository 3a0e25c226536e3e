"""Project API routes.

Learn: Reads go straight to the service. Mutations hand the service the
request's AuthContext; the service decides whether the caller may act
(Unauthenticated / Forbidden) so the same rules hold for any other
caller of ProjectService, not just HTTP.

Mutations that touch the owner's list (add, remove) return the owner,
projects populated, so clients see the list change in one round trip.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from codecollab.auth.context import AuthContext
from codecollab.auth.dependencies import get_auth_context, require_read_access
from codecollab.db.engine import get_db
from codecollab.repositories import ProjectFilter
from codecollab.schemas.student import (
    ProjectCreate,
    ProjectDetail,
    ProjectUpdate,
    StudentDetail,
)
from codecollab.services.project_service import ProjectService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


# ─── Reads ──────────────────────────────────────────────

@router.get(
    "/projects",
    response_model=list[ProjectDetail],
    dependencies=[Depends(require_read_access)],
)
async def list_projects(
    student: Optional[uuid.UUID] = Query(None, description="Owner's student id"),
    name: Optional[str] = Query(None, description="Exact project name"),
    svc: ProjectService = Depends(_svc),
):
    return await svc.list_projects(ProjectFilter(student=student, name=name))


@router.get(
    "/projects/{project_id}",
    response_model=ProjectDetail,
    dependencies=[Depends(require_read_access)],
)
async def get_project(project_id: uuid.UUID, svc: ProjectService = Depends(_svc)):
    return await svc.get_project(project_id)


# ─── Mutations ──────────────────────────────────────────

@router.post("/projects", response_model=StudentDetail, status_code=201)
async def add_project(
    body: ProjectCreate,
    ctx: AuthContext = Depends(get_auth_context),
    svc: ProjectService = Depends(_svc),
):
    """Create a project owned by the caller. Returns the caller."""
    return await svc.add_project(
        ctx,
        name=body.name,
        base_language=body.base_language,
        open_collab=body.open_collab,
        description=body.description,
    )


@router.patch("/projects/{project_id}", response_model=ProjectDetail)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    svc: ProjectService = Depends(_svc),
):
    return await svc.update_project(
        ctx,
        project_id,
        open_collab=body.open_collab,
        description=body.description,
    )


@router.delete("/projects/{project_id}", response_model=StudentDetail)
async def remove_project(
    project_id: uuid.UUID,
    ctx: AuthContext = Depends(get_auth_context),
    svc: ProjectService = Depends(_svc),
):
    """Delete one of the caller's projects. Returns the caller."""
    return await svc.remove_project(ctx, project_id)
