"""Typed outcomes returned by every coordinator operation.

    Completed[T]    every step committed (``pending`` set when a trailing
                    cleanup step failed after the user-visible effect landed)
    Failed          nothing was committed
    PartialFailure  a strict prefix of the committing steps landed
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from src.ms_common.errors import AppError

T = TypeVar("T")


@dataclass(frozen=True)
class PartialFailure:
    operation: str
    completed_steps: tuple[str, ...]
    failed_step: str
    cause: Exception
    entity_id: str | None = None

    def to_details(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "completed_steps": list(self.completed_steps),
            "failed_step": self.failed_step,
            "cause": str(self.cause),
            "entity_id": self.entity_id,
        }


@dataclass(frozen=True)
class Completed(Generic[T]):
    value: T
    pending: PartialFailure | None = None


@dataclass(frozen=True)
class Failed:
    error: AppError


Outcome = Completed[T] | Failed | PartialFailure
