"""Shared domain building blocks: error taxonomy and result types."""

from .exceptions import (
    ConflictError,
    DomainError,
    DuplicateKeyError,
    ErrorType,
    ForbiddenError,
    InvalidTransitionError,
    JobNotFoundError,
    MachineNotFoundError,
    NotFoundError,
    OutOfRangeError,
    RepositoryUnavailableError,
    UnauthenticatedError,
    ValidationError,
)
from .result import Failure, Result, Success

__all__ = [
    "ConflictError",
    "DomainError",
    "DuplicateKeyError",
    "ErrorType",
    "Failure",
    "ForbiddenError",
    "InvalidTransitionError",
    "JobNotFoundError",
    "MachineNotFoundError",
    "NotFoundError",
    "OutOfRangeError",
    "RepositoryUnavailableError",
    "Result",
    "Success",
    "UnauthenticatedError",
    "ValidationError",
]
