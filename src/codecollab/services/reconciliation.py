"""Reconciliation sweep — find (and optionally fix) student/project drift.

Learn: Project mutations write two records in two commits. A crash or a
lost write between them leaves the collections disagreeing:

- orphaned project:    project exists, but isn't in its owner's list
                       (or its owner is gone)
- dangling reference:  a student's list names a project that doesn't exist,
                       or that belongs to someone else
- duplicate reference: the same id listed twice in one student's list

sweep() reports all three. sweep(repair=True) also fixes them: orphans are
re-linked to their owner (or deleted if the owner is gone), dangling and
duplicate entries are pruned. Run it from the CLI: `codecollab reconcile`.
"""

import uuid
from dataclasses import dataclass, field

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from codecollab.repositories import ProjectRepository, StudentRepository
from codecollab.services.project_service import (
    DANGLING_REFERENCE,
    ORPHANED_PROJECT,
    log_consistency_gap,
)

logger = structlog.get_logger()

DUPLICATE_REFERENCE = "duplicate_reference"


@dataclass
class ReconciliationReport:
    orphaned_projects: list[uuid.UUID] = field(default_factory=list)
    dangling_references: list[tuple[uuid.UUID, str]] = field(default_factory=list)
    duplicate_references: list[tuple[uuid.UUID, str]] = field(default_factory=list)
    repaired: bool = False

    @property
    def is_clean(self) -> bool:
        return not (
            self.orphaned_projects
            or self.dangling_references
            or self.duplicate_references
        )

    def to_dict(self) -> dict:
        return {
            "orphaned_projects": [str(p) for p in self.orphaned_projects],
            "dangling_references": [
                {"student_id": str(s), "project_id": p}
                for s, p in self.dangling_references
            ],
            "duplicate_references": [
                {"student_id": str(s), "project_id": p}
                for s, p in self.duplicate_references
            ],
            "repaired": self.repaired,
        }


class ReconciliationService:
    """Audits the student ↔ project mutual-reference invariant."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.students = StudentRepository(db)
        self.projects = ProjectRepository(db)

    async def sweep(self, repair: bool = False) -> ReconciliationReport:
        report = ReconciliationReport()
        students = await self.students.find()
        projects = await self.projects.find(populate=False)
        projects_by_id = {p.id: p for p in projects}
        student_ids = {s.id for s in students}

        # What each student's list should look like once cleaned up
        desired: dict[uuid.UUID, list[uuid.UUID]] = {}

        for student in students:
            seen: set[uuid.UUID] = set()
            keep: list[uuid.UUID] = []
            for ref in student.project_ids:
                try:
                    pid = uuid.UUID(ref)
                except ValueError:
                    report.dangling_references.append((student.id, ref))
                    log_consistency_gap(DANGLING_REFERENCE, student.id, None, ref=ref)
                    continue

                if pid in seen:
                    report.duplicate_references.append((student.id, ref))
                    log_consistency_gap(DUPLICATE_REFERENCE, student.id, pid)
                    continue
                seen.add(pid)

                project = projects_by_id.get(pid)
                if project is None or project.student_id != student.id:
                    report.dangling_references.append((student.id, ref))
                    log_consistency_gap(DANGLING_REFERENCE, student.id, pid)
                    continue
                keep.append(pid)
            desired[student.id] = keep

        ownerless: list[uuid.UUID] = []
        for project in projects:
            owner_id = project.student_id
            if owner_id in student_ids and project.id in desired[owner_id]:
                continue
            report.orphaned_projects.append(project.id)
            log_consistency_gap(ORPHANED_PROJECT, owner_id, project.id)
            if owner_id in student_ids:
                desired[owner_id].append(project.id)
            else:
                ownerless.append(project.id)

        if repair and not report.is_clean:
            await self._repair(students, desired, ownerless)
            report.repaired = True

        logger.info(
            "reconciliation.finished",
            orphaned=len(report.orphaned_projects),
            dangling=len(report.dangling_references),
            duplicates=len(report.duplicate_references),
            repaired=report.repaired,
        )
        return report

    async def _repair(self, students, desired, ownerless) -> None:
        for project_id in ownerless:
            await self.projects.remove(project_id)
            logger.info("reconciliation.project_deleted", project_id=str(project_id))

        for student in students:
            target = desired[student.id]
            if [str(p) for p in target] != student.project_ids:
                await self.students.set_project_ids(student.id, target)
                logger.info(
                    "reconciliation.list_rewritten",
                    student_id=str(student.id),
                    project_count=len(target),
                )
