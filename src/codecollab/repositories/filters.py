"""Query filters for the repository ``find`` methods.

Every field is optional. ``None`` means "don't constrain on this";
a value means "exact match on this column". An empty filter matches
every row.
"""

import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StudentFilter:
    id: Optional[uuid.UUID] = None
    """Only the student with this id."""

    name: Optional[str] = None
    """Only students with exactly this display name."""


@dataclass(frozen=True)
class ProjectFilter:
    student: Optional[uuid.UUID] = None
    """Only projects owned by this student."""

    name: Optional[str] = None
    """Only projects with exactly this name."""
