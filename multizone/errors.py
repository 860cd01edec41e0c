"""Error taxonomy shared by the datastore layer and the API."""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failure the backend distinguishes."""
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    INTERNAL = "internal"


class DatastoreError(Exception):
    """Base class for datastore access failures."""

    kind = ErrorKind.INTERNAL


class InvalidError(DatastoreError):
    """Client-supplied data failed required-field validation."""

    kind = ErrorKind.INVALID


class NotFoundError(DatastoreError):
    """No entity matches the given id or key."""

    kind = ErrorKind.NOT_FOUND


class DuplicateError(DatastoreError):
    """A uniqueness constraint was violated."""

    kind = ErrorKind.DUPLICATE


class InternalError(DatastoreError):
    """Any other storage failure."""

    kind = ErrorKind.INTERNAL
