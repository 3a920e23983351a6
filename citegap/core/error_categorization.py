"""Error categorization utilities for best-effort tasks.

Categorizes exceptions into standard types for structured failure reporting.
"""

import asyncio

from citegap.core.exceptions import OperationCancelledError


def categorize_error(exception: BaseException) -> str:
    """Categorize exception into standard error type.

    Args:
        exception: Exception to categorize

    Returns:
        Error category: cancelled, timeout, network, validation, or unknown
    """
    if isinstance(exception, (OperationCancelledError, asyncio.CancelledError)):
        return "cancelled"

    # Timeout errors
    if isinstance(exception, (asyncio.TimeoutError, TimeoutError)):
        return "timeout"

    # Network / data source errors
    name = type(exception).__name__
    if isinstance(exception, ConnectionError) or "ConnectionError" in name:
        return "network"
    if "OperationalError" in name or "InterfaceError" in name:
        return "network"

    # Validation errors
    if isinstance(exception, (ValueError, TypeError, KeyError)):
        return "validation"
    if "ValidationError" in name:
        return "validation"

    return "unknown"
