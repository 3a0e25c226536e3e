"""Pydantic schemas for students and their projects.

Learn: Pydantic v2 models validate request/response data. Separate
"Create"/"Update" schemas (input) from "Read" schemas (output).
The "Detail" variants embed the other side of the relationship,
resolved at read time:
- StudentDetail: student + their projects, in creation order
- ProjectDetail: project + its owning student

No schema ever exposes the password hash.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ─── Students ───────────────────────────────────────────

class StudentRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    project_ids: list[uuid.UUID] = []
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("project_ids", mode="before")
    @classmethod
    def drop_malformed_refs(cls, refs):
        """Skip stored references that aren't UUIDs; the sweep reports those."""
        if not isinstance(refs, list):
            return refs
        kept = []
        for ref in refs:
            try:
                kept.append(uuid.UUID(str(ref)))
            except ValueError:
                continue
        return kept


class StudentDetail(StudentRead):
    """Student with projects populated."""
    projects: list["ProjectRead"] = []


# ─── Projects ───────────────────────────────────────────

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    base_language: str = Field(..., min_length=1, max_length=50)
    open_collab: bool = False
    description: str = ""


class ProjectUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    open_collab: Optional[bool] = None
    description: Optional[str] = None


class ProjectRead(BaseModel):
    id: uuid.UUID
    name: str
    base_language: str
    open_collab: bool
    description: str
    student_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class ProjectDetail(ProjectRead):
    """Project with its owner populated."""
    student: Optional[StudentRead] = None


# Rebuild forward refs for nested models
StudentDetail.model_rebuild()
