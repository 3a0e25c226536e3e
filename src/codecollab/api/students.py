"""Student API routes (read-only).

Students are created through /auth/register; their project lists only
change through the project routes.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from codecollab.auth.dependencies import require_read_access
from codecollab.db.engine import get_db
from codecollab.repositories import StudentFilter
from codecollab.schemas.student import StudentDetail, StudentRead
from codecollab.services.project_service import ProjectService

router = APIRouter(dependencies=[Depends(require_read_access)])


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


@router.get("/students", response_model=list[StudentRead])
async def list_students(svc: ProjectService = Depends(_svc)):
    return await svc.list_students()


@router.get("/students/search", response_model=list[StudentDetail])
async def find_students(
    id: Optional[uuid.UUID] = Query(None, description="Exact student id"),
    name: Optional[str] = Query(None, description="Exact display name"),
    svc: ProjectService = Depends(_svc),
):
    """Students matching every given filter, with projects populated."""
    return await svc.find_students(StudentFilter(id=id, name=name))
