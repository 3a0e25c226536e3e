"""Student repository — storage access for the students table.

Learn: Every write here commits on its own. A student update and a
project insert are two separate commits, which is exactly why the
project service has to order its calls carefully.

The ``project_ids`` list is read-modify-written (push/pull), so two
concurrent mutations on the same student are last-write-wins. The
reconciliation sweep picks up whatever a lost write leaves behind.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codecollab.db.models import Project, Student
from codecollab.repositories.filters import StudentFilter


def _parse_refs(refs: list[str]) -> list[uuid.UUID]:
    ids = []
    for ref in refs:
        try:
            ids.append(uuid.UUID(ref))
        except ValueError:
            continue
    return ids


class PopulatedStudent:
    """A student with its project references resolved to full records.

    Attribute access falls through to the underlying Student, so response
    schemas can read ``id``, ``name`` etc. straight off this object.
    """

    def __init__(self, student: Student, projects: list[Project]):
        self.student = student
        self.projects = projects

    def __getattr__(self, name):
        if name == "student":
            raise AttributeError(name)
        return getattr(self.student, name)


class StudentRepository:
    """CRUD over students plus the project-reference list patches."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────

    async def find(self, filters: Optional[StudentFilter] = None) -> list[Student]:
        q = select(Student).order_by(Student.created_at, Student.id)
        if filters is not None:
            if filters.id is not None:
                q = q.where(Student.id == filters.id)
            if filters.name is not None:
                q = q.where(Student.name == filters.name)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def find_by_id(self, student_id: uuid.UUID) -> Student | None:
        return await self.db.get(Student, student_id)

    async def find_one(self, *, email: str) -> Student | None:
        result = await self.db.execute(
            select(Student).where(Student.email == email.lower())
        )
        return result.scalars().first()

    async def populate(self, student: Student) -> PopulatedStudent:
        """Resolve ``project_ids`` into Project records, keeping list order.

        References that no longer resolve are skipped rather than failing
        the read.
        """
        ids = _parse_refs(student.project_ids)
        if not ids:
            return PopulatedStudent(student=student, projects=[])
        result = await self.db.execute(select(Project).where(Project.id.in_(ids)))
        by_id = {p.id: p for p in result.scalars().all()}
        return PopulatedStudent(
            student=student,
            projects=[by_id[pid] for pid in ids if pid in by_id],
        )

    # ─── Writes ─────────────────────────────────────────

    async def create(self, name: str, email: str, password_hash: str) -> Student:
        student = Student(
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            project_ids=[],
        )
        self.db.add(student)
        await self.db.commit()
        return student

    async def push_project(
        self, student_id: uuid.UUID, project_id: uuid.UUID
    ) -> Student | None:
        """Append a project id to the student's list. None if no such student."""
        student = await self.find_by_id(student_id)
        if student is None:
            return None
        student.project_ids = [*student.project_ids, str(project_id)]
        await self.db.commit()
        return student

    async def pull_project(
        self, student_id: uuid.UUID, project_id: uuid.UUID
    ) -> Student | None:
        """Drop every occurrence of a project id from the list (no-op if absent)."""
        student = await self.find_by_id(student_id)
        if student is None:
            return None
        pid = str(project_id)
        if pid in student.project_ids:
            student.project_ids = [p for p in student.project_ids if p != pid]
            await self.db.commit()
        return student

    async def set_project_ids(
        self, student_id: uuid.UUID, project_ids: list[uuid.UUID]
    ) -> Student | None:
        """Overwrite the whole list. Only the reconciliation sweep uses this."""
        student = await self.find_by_id(student_id)
        if student is None:
            return None
        student.project_ids = [str(p) for p in project_ids]
        await self.db.commit()
        return student
