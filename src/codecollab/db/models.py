"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Two tables, two aggregates:

- Student owns an ordered list of project ids (``project_ids``, a JSON array
  in creation order).
- Project points back at exactly one owning student (``student_id``).

The two sides mirror each other but are written by separate commits, so
keeping them in agreement is the service layer's job, not the database's.

Column types are the portable ones (Uuid, JSON) so the same models run on
PostgreSQL in production and SQLite in tests.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class Student(Base):
    """A student account. Logs in, owns projects.

    Learn: ``project_ids`` stores ids as strings because JSON has no UUID
    type. Always assign a new list rather than mutating in place — plain
    JSON columns don't track in-place changes.
    """

    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    project_ids: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


class Project(Base):
    """A project published by a student, optionally open for collaboration."""

    __tablename__ = "projects"
    __table_args__ = (
        Index("ix_projects_student_id", "student_id"),
        Index("ix_projects_name", "name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    base_language: Mapped[str] = mapped_column(String(50), nullable=False)
    open_collab: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    # Owner. Async sessions can't lazy-load, so readers selectinload() it
    student: Mapped["Student"] = relationship()
