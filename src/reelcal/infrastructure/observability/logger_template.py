"""Shared logging helpers.

USAGE:
    from reelcal.infrastructure.observability.logger_template import log_operation

    async with log_operation(logger, "build_history", export_dir=str(path)):
        ...
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


# Yo, this context manager times a whole pipeline step. Start and end are logged with the
# same **context fields; on failure it logs with exc_info and RE-RAISES, the caller decides
# whether the failure is fatal.
@asynccontextmanager
async def log_operation(
    logger: logging.Logger,
    operation: str,
    **context: Any,
) -> AsyncIterator[None]:
    """Context manager for logging operation start/end with automatic timing.

    Logs:
    - {operation}.started with context fields
    - {operation}.completed with context + duration_ms
    - {operation}.failed with context + duration_ms + error details (if exception)

    Args:
        logger: Logger instance
        operation: Operation name (e.g., "build_history", "enrich_live")
        **context: Additional fields to include in logs

    Example:
        >>> async with log_operation(logger, "build_calendar", dry_run=False):
        ...     await project()
    """
    start = time.time()
    logger.info(f"{operation}.started", extra=context)

    try:
        yield
    except Exception as e:
        duration_ms = int((time.time() - start) * 1000)
        logger.error(
            f"{operation}.failed",
            extra={
                **context,
                "duration_ms": duration_ms,
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    duration_ms = int((time.time() - start) * 1000)
    logger.info(
        f"{operation}.completed",
        extra={**context, "duration_ms": duration_ms},
    )
