"""Observability infrastructure for structured logging."""

from reelcal.infrastructure.observability.logger_template import log_operation
from reelcal.infrastructure.observability.logging import (
    configure_logging,
    get_run_id,
    set_run_id,
)

__all__ = [
    "configure_logging",
    "get_run_id",
    "log_operation",
    "set_run_id",
]
