"""StepSequence — runs one compound operation's store calls strictly in order.

Each call is bounded by a timeout; a timeout is treated like any other store
error. Read steps are never recorded. A write step is recorded once it
returns a record; a write that returns None touched nothing and is not
recorded. That record is what classifies a failure:

  - nothing recorded yet → Failed (the operation had no effect)
  - something recorded   → PartialFailure (a prefix landed)
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from src.ms_common.errors import AppError, StoreTimeoutError, StoreUnavailableError
from src.ms_sync.domain.outcome import Failed, PartialFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StepFailedError(Exception):
    """Raised inside a sequence when a step (or a check between steps) fails."""

    def __init__(self, step: str, cause: Exception) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"{step}: {cause}")


class StepSequence:
    def __init__(self, operation: str, timeout: float) -> None:
        self.operation = operation
        self.completed: list[str] = []
        self._timeout = timeout

    async def read(self, step: str, call: Awaitable[T]) -> T:
        return await self._run(step, call)

    async def write(self, step: str, call: Awaitable[T]) -> T:
        result = await self._run(step, call)
        if result is not None:
            self.completed.append(step)
        return result

    def fail(self, step: str, error: AppError) -> StepFailedError:
        """Build the exception for a business check that failed between steps."""
        return StepFailedError(step, error)

    def settle(
        self, failure: StepFailedError, entity_id: str | None = None
    ) -> Failed | PartialFailure:
        if not self.completed:
            cause = failure.cause
            if not isinstance(cause, AppError):
                cause = StoreUnavailableError(failure.step, str(cause))
            return Failed(cause)
        logger.warning(
            "Partial failure: op=%s completed=%s failed=%s entity=%s cause=%r",
            self.operation,
            ",".join(self.completed),
            failure.step,
            entity_id,
            failure.cause,
        )
        return PartialFailure(
            operation=self.operation,
            completed_steps=tuple(self.completed),
            failed_step=failure.step,
            cause=failure.cause,
            entity_id=entity_id,
        )

    async def _run(self, step: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except TimeoutError as exc:
            raise StepFailedError(step, StoreTimeoutError(step, self._timeout)) from exc
        except Exception as exc:
            raise StepFailedError(step, exc) from exc
