"""Custom exception classes for the relay."""

from enum import Enum


class RelayException(Exception):
    """
    Base exception class for all relay errors.
    """
    pass


class ValidationError(RelayException):
    """
    Raised when a request is missing required input or carries bad input.
    """
    pass


class NotFoundError(RelayException):
    """
    Raised when no FileRecord exists for a requested URL.
    """
    pass


class DuplicateKeyError(RelayException):
    """
    Raised when inserting a FileRecord whose URL is already indexed.
    """
    pass


class AuthRequired(RelayException):
    """
    Raised by the auth gate when a request lacks a valid session.
    """
    pass


class BackendErrorKind(str, Enum):
    UPSTREAM = "upstream"
    UNREACHABLE = "unreachable"
    MISSING_ID = "missing_id"
    MISSING_REF = "missing_ref"
    NOT_FOUND = "not_found"
    FETCH_FAILED = "fetch_failed"


class BackendError(RelayException):
    """
    Raised when the blob backend misbehaves or cannot be reached.

    The kind is set where the failure is detected; callers choose HTTP
    statuses from it.
    """

    def __init__(self, kind: BackendErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
