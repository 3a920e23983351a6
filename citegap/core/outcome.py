"""Explicit success/failure outcomes for best-effort tasks.

The orchestrator runs its tasks independently; each one reports an
``Outcome`` instead of raising so the caller can see which task failed
without the failure leaking into the other task.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger

from citegap.core.error_categorization import categorize_error

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Task finished and produced a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Task raised; the error is kept for diagnostics only."""

    task: str
    error_message: str
    error_type: str

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, task: str, exception: BaseException) -> "Failure":
        return cls(
            task=task,
            error_message=f"{type(exception).__name__}: {exception}",
            error_type=categorize_error(exception),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "error": self.error_message,
            "type": self.error_type,
        }


Outcome = Success[T] | Failure


async def run_best_effort(
    task: str,
    project_id: str,
    operation: Callable[[], Awaitable[T]],
) -> "Outcome[T]":
    """Await ``operation`` and wrap its result or exception in an Outcome.

    Exceptions are logged as warnings with project context and never
    propagate.
    """
    try:
        value = await operation()
    except Exception as e:
        failure = Failure.from_exception(task, e)
        logger.warning(
            f"{task} failed for project {project_id} "
            f"({failure.error_type}): {failure.error_message}"
        )
        return failure
    return Success(value)


def value_or(outcome: "Outcome[T]", default: T) -> T:
    """Unwrap a Success, falling back to ``default`` on Failure."""
    if isinstance(outcome, Success):
        return outcome.value
    return default
