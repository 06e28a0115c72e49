# src/taskflow/core/errors.py

from __future__ import annotations


class TaskFlowError(Exception):
    """Base class for TaskFlow errors."""


class ValidationError(TaskFlowError, ValueError):
    """Input rejected before any network call (e.g. empty title)."""


class NotFoundError(TaskFlowError, LookupError):
    """Operation targets an id that is not held locally."""


class RemoteCallFailure(TaskFlowError):
    """
    The record store could not be reached or answered with an error.

    Raised by the store client only; repositories catch it and turn it into
    a failure value (None / False / []).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(TaskFlowError, RuntimeError):
    """Required configuration (credentials, base URL) is missing."""
