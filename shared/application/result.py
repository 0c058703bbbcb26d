"""
Result type

Use cases report business-rule violations as values instead of letting
exceptions cross the application boundary. A ``Result`` is either a success
carrying a value or a failure carrying an error kind tag and a user-facing
message, so callers branch on the tag explicitly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar('T')


class ErrorKind(Enum):
    """Closed set of business failure kinds"""
    NOT_FOUND = 'not_found'
    UNAUTHORIZED = 'unauthorized'
    INVALID_STATE_TRANSITION = 'invalid_state_transition'
    CONFLICT = 'conflict'
    VALIDATION = 'validation'


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Any = None
    error: ErrorKind | None = None
    message: str = ''

    @classmethod
    def success(cls, value: T = None) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> 'Result[T]':
        return cls(error=error, message=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self):
        if self.ok:
            return f"Result.success({self.value!r})"
        return f"Result.failure({self.error.value!r}, {self.message!r})"
