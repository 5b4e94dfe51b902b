"""Errors raised across the domain/adapter boundary."""

from __future__ import annotations


class PersistenceError(RuntimeError):
    """A call to the persistence service failed."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ResourceNotFoundError(PersistenceError):
    """The requested resource does not exist on the store."""

    def __init__(self, message: str, *, status: int | None = 404) -> None:
        super().__init__(message, status=status)


class InvalidResourceReferenceError(ValueError):
    """A resource URI is present but does not encode a resource id."""
