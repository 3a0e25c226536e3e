"""Storage accessors for the two aggregates (students, projects)."""

from codecollab.repositories.filters import ProjectFilter, StudentFilter
from codecollab.repositories.projects import ProjectRepository
from codecollab.repositories.students import PopulatedStudent, StudentRepository

__all__ = [
    "PopulatedStudent",
    "ProjectFilter",
    "ProjectRepository",
    "StudentFilter",
    "StudentRepository",
]
