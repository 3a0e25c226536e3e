"""Project service — keeps projects and their owners' project lists in step.

Learn: This is the CORE of the app. A project lives in two places:
its own row (with ``student_id``) and as an entry in the owner's
``project_ids`` list. The two are separate commits, not one transaction,
so every mutation here is an ordered sequence of writes:

  add:    load caller → insert project → push id onto caller's list
  remove: load project → owner check → delete project → pull id from list
  update: load project → owner check → patch project

Rules applied to every mutation:
1. No authenticated caller → Unauthenticated, before touching storage.
2. Caller isn't the project's owner → Forbidden, before writing anything.
3. If the second write fails after the first committed, we log a
   ``consistency_gap`` event and raise ConsistencyGap. Nothing is repaired
   here — the reconciliation sweep is what cleans that up.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from codecollab.auth.context import AuthContext
from codecollab.db.models import Project, Student
from codecollab.errors import ConsistencyGap, Forbidden, NotFound, Unauthenticated
from codecollab.repositories import (
    PopulatedStudent,
    ProjectFilter,
    ProjectRepository,
    StudentFilter,
    StudentRepository,
)

logger = structlog.get_logger()

ORPHANED_PROJECT = "orphaned_project"
DANGLING_REFERENCE = "dangling_reference"


def log_consistency_gap(kind: str, student_id, project_id, **extra) -> None:
    """Log student/project drift under its own event name so it can be alerted on."""
    logger.error(
        "consistency_gap",
        kind=kind,
        student_id=str(student_id) if student_id else None,
        project_id=str(project_id) if project_id else None,
        **extra,
    )


class ProjectService:
    """Ownership-scoped project mutations plus the read-side queries."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.students = StudentRepository(db)
        self.projects = ProjectRepository(db)

    # ─── Mutations ──────────────────────────────────────

    async def add_project(
        self,
        ctx: AuthContext,
        name: str,
        base_language: str,
        open_collab: bool = False,
        description: str = "",
    ) -> PopulatedStudent:
        """Create a project owned by the caller and link it into their list.

        Returns the caller with projects populated. The project insert
        commits before the link is attempted; if linking fails the project
        is left orphaned and ConsistencyGap is raised.
        """
        caller_id = self._require_caller(ctx)

        # Check the owner exists up front so a stale token can't orphan anything
        if await self.students.find_by_id(caller_id) is None:
            raise NotFound("Student not found")

        project = await self.projects.create(
            student_id=caller_id,
            name=name,
            base_language=base_language,
            open_collab=open_collab,
            description=description,
        )
        project_id = project.id

        try:
            student = await self.students.push_project(caller_id, project_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            log_consistency_gap(ORPHANED_PROJECT, caller_id, project_id, error=str(e))
            raise ConsistencyGap(ORPHANED_PROJECT, caller_id, project_id) from e

        if student is None:
            log_consistency_gap(
                ORPHANED_PROJECT, caller_id, project_id, error="owner vanished"
            )
            raise ConsistencyGap(ORPHANED_PROJECT, caller_id, project_id)

        logger.info(
            "project.added",
            student_id=str(caller_id),
            project_id=str(project_id),
        )
        return await self.students.populate(student)

    async def remove_project(
        self, ctx: AuthContext, project_id: uuid.UUID
    ) -> PopulatedStudent:
        """Delete one of the caller's projects and unlink it.

        Idempotent: removing a project that no longer exists is not an
        error, and the caller's list is still pruned of that id.
        """
        caller_id = self._require_caller(ctx)

        project = await self.projects.find_by_id(project_id)
        if project is not None:
            self._require_owner(caller_id, project)
            removed = await self.projects.remove(project_id)
        else:
            removed = None
            logger.info(
                "project.remove_missing",
                student_id=str(caller_id),
                project_id=str(project_id),
            )

        try:
            student = await self.students.pull_project(caller_id, project_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            if removed is None:
                raise
            log_consistency_gap(DANGLING_REFERENCE, caller_id, project_id, error=str(e))
            raise ConsistencyGap(DANGLING_REFERENCE, caller_id, project_id) from e

        if student is None:
            raise NotFound("Student not found")

        if removed is not None:
            logger.info(
                "project.removed",
                student_id=str(caller_id),
                project_id=str(project_id),
            )
        return await self.students.populate(student)

    async def update_project(
        self,
        ctx: AuthContext,
        project_id: uuid.UUID,
        open_collab: Optional[bool] = None,
        description: Optional[str] = None,
    ) -> Project:
        """Partial update — only non-None fields are applied.

        Returns the new state with the owner populated.
        """
        caller_id = self._require_caller(ctx)

        project = await self.projects.find_by_id(project_id)
        if project is None:
            raise NotFound("Project not found")
        self._require_owner(caller_id, project)

        changes = {
            key: value
            for key, value in (("open_collab", open_collab), ("description", description))
            if value is not None
        }
        if not changes:
            return await self.projects.find_by_id(project_id, populate=True)

        updated = await self.projects.update(project_id, populate=True, **changes)
        if updated is None:
            # Deleted between our read and the write
            raise NotFound("Project not found")

        logger.info(
            "project.updated",
            student_id=str(caller_id),
            project_id=str(project_id),
            fields=sorted(changes),
        )
        return updated

    # ─── Reads ──────────────────────────────────────────

    async def list_projects(
        self, filters: Optional[ProjectFilter] = None
    ) -> list[Project]:
        """Projects matching the filter, each with its owner populated."""
        return await self.projects.find(filters, populate=True)

    async def get_project(self, project_id: uuid.UUID) -> Project:
        project = await self.projects.find_by_id(project_id, populate=True)
        if project is None:
            raise NotFound("Project not found")
        return project

    async def list_students(self) -> list[Student]:
        return await self.students.find()

    async def find_students(
        self, filters: Optional[StudentFilter] = None
    ) -> list[PopulatedStudent]:
        """Students matching the filter, each with projects populated."""
        students = await self.students.find(filters)
        return [await self.students.populate(s) for s in students]

    # ─── Guards ─────────────────────────────────────────

    @staticmethod
    def _require_caller(ctx: AuthContext) -> uuid.UUID:
        if not ctx.is_authenticated:
            raise Unauthenticated()
        return ctx.caller_id

    @staticmethod
    def _require_owner(caller_id: uuid.UUID, project: Project) -> None:
        if project.student_id != caller_id:
            logger.warning(
                "project.forbidden",
                student_id=str(caller_id),
                project_id=str(project.id),
                owner_id=str(project.student_id),
            )
            raise Forbidden("You do not own this project")
