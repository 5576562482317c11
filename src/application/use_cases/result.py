"""Common result type returned by every use case."""

from dataclasses import dataclass
from typing import Any

NOT_FOUND = "NOT_FOUND"
INTERNAL = "INTERNAL"


@dataclass
class UseCaseResult:
    """Outcome of a use case.

    ``code`` tells a failed lookup (``NOT_FOUND``) apart from an unexpected
    error (``INTERNAL``).
    """

    success: bool
    data: Any = None
    error: str | None = None
    code: str | None = None

    @classmethod
    def ok(cls, data: Any) -> "UseCaseResult":
        return cls(success=True, data=data)

    @classmethod
    def not_found(cls, error: str) -> "UseCaseResult":
        return cls(success=False, error=error, code=NOT_FOUND)

    @classmethod
    def failed(cls, error: str) -> "UseCaseResult":
        return cls(success=False, error=error, code=INTERNAL)
