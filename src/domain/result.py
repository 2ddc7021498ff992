"""
Use Case Results

Business outcomes (missing records, rejected transitions) come back as
`Result` errors carrying a taxonomy error. Store and unexpected failures
still raise.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from src.domain.errors import SecurityServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[SecurityServiceError] = None

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None


class Return:
    @staticmethod
    def ok(value: T = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: SecurityServiceError) -> Result:
        return Result(error=error)
