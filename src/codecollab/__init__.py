"""CodeCollab — students, their projects, and who gets to change them.

A small API where students register, log in, and publish the projects
they want collaborators for. Every project belongs to exactly one student,
and only that student may change or remove it.
"""

__version__ = "0.1.0"
