# src/taskboard/errors.py

"""
Error taxonomy.

- ValidationError: a required field is missing or invalid; raised before any backend call.
- CollaboratorError: the persistence or identity collaborator failed; message preserved, no retry.
- ProfileNotFound: the session's subject has no profile; callers treat it as "not logged in".

A missing task/notification id is not an error: lookups return None / False.
"""

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for all taskboard errors."""


class ValidationError(TaskboardError, ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class CollaboratorError(TaskboardError, RuntimeError):
    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator
        self.message = message


class ProfileNotFound(TaskboardError, LookupError):
    def __init__(self, subject_id: str) -> None:
        super().__init__(f"no profile for subject {subject_id!r}")
        self.subject_id = subject_id
