"""
Result types for operations that can succeed or fail.

The scheduling core returns a Result instead of raising so that every caller
handles each failure kind explicitly:

    >>> result = engine.validate_placement("P-01", 2, 3, occupancy)
    >>> if isinstance(result, Success):
    ...     print(result.value)
    >>> elif isinstance(result, Failure):
    ...     print(result.error.error_type)
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .exceptions import DomainError

T = TypeVar("T")
E = TypeVar("E", bound=DomainError)


class Result(Generic[T, E], ABC):
    """Success/failure outcome of a core operation."""

    @abstractmethod
    def is_success(self) -> bool:
        """Check if result represents success."""
        pass

    @abstractmethod
    def is_failure(self) -> bool:
        """Check if result represents failure."""
        pass


class Success(Result[T, E]):
    """Success result containing a value."""

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


class Failure(Result[T, E]):
    """Failure result containing a domain error."""

    __slots__ = ("error",)

    def __init__(self, error: E) -> None:
        self.error = error

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Failure({self.error.error_type.value}: {self.error.message})"
