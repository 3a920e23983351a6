"""Cooperative cancellation for long-running similarity scans."""

import threading

from citegap.core.exceptions import OperationCancelledError


class CancellationToken:
    """Thread-safe flag checked between iterations of CPU-bound loops.

    The clustering loop and the pairwise gap scan call ``raise_if_cancelled``
    at their checkpoints; any thread (or an asyncio task running the
    orchestrator) may call ``cancel``.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def raise_if_cancelled(self, operation: str) -> None:
        """Raise OperationCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise OperationCancelledError(operation, self._reason)


def check_cancelled(token: CancellationToken | None, operation: str) -> None:
    """Checkpoint helper that tolerates a missing token."""
    if token is not None:
        token.raise_if_cancelled(operation)
