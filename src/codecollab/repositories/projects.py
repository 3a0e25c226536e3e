"""Project repository — storage access for the projects table.

Learn: ``populate=True`` eagerly loads the owning student with
selectinload, so the response can embed it without an async lazy-load.
populate_existing makes sure an object already sitting in the session
gets its owner loaded too.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from codecollab.db.models import Project
from codecollab.repositories.filters import ProjectFilter

# Only these columns may be patched through update()
UPDATABLE_FIELDS = frozenset({"name", "base_language", "open_collab", "description"})


class ProjectRepository:
    """CRUD over projects."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────

    async def find(
        self,
        filters: Optional[ProjectFilter] = None,
        populate: bool = True,
    ) -> list[Project]:
        q = select(Project).order_by(Project.created_at, Project.id)
        if filters is not None:
            if filters.student is not None:
                q = q.where(Project.student_id == filters.student)
            if filters.name is not None:
                q = q.where(Project.name == filters.name)
        if populate:
            q = q.options(selectinload(Project.student)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def find_by_id(
        self, project_id: uuid.UUID, populate: bool = False
    ) -> Project | None:
        if not populate:
            return await self.db.get(Project, project_id)
        result = await self.db.execute(
            select(Project)
            .where(Project.id == project_id)
            .options(selectinload(Project.student))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    # ─── Writes ─────────────────────────────────────────

    async def create(
        self,
        student_id: uuid.UUID,
        name: str,
        base_language: str,
        open_collab: bool = False,
        description: str = "",
    ) -> Project:
        """Insert and commit a project. The id is assigned once this returns."""
        project = Project(
            student_id=student_id,
            name=name,
            base_language=base_language,
            open_collab=open_collab,
            description=description,
        )
        self.db.add(project)
        await self.db.commit()
        return project

    async def update(
        self, project_id: uuid.UUID, populate: bool = False, **fields
    ) -> Project | None:
        """Apply a partial update and return the new state (None if missing)."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update project fields: {sorted(unknown)}")

        project = await self.db.get(Project, project_id)
        if project is None:
            return None
        for key, value in fields.items():
            setattr(project, key, value)
        await self.db.commit()
        if populate:
            return await self.find_by_id(project_id, populate=True)
        return project

    async def remove(self, project_id: uuid.UUID) -> Project | None:
        """Delete a project. Returns the removed record, or None if it wasn't there."""
        project = await self.db.get(Project, project_id)
        if project is None:
            return None
        await self.db.delete(project)
        await self.db.commit()
        return project
