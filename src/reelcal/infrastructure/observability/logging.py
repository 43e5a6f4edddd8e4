"""Structured logging configuration with JSON formatting and run IDs."""

import contextvars
import logging
import sys
import traceback
import uuid
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me, a run ID ties together every log line of ONE build (history or calendar).
# The scheduled CI build writes both scripts' logs into the same job output, so grepping
# for the run_id is how you separate them. contextvars is asyncio-safe, so the concurrent
# enrichment lookups inherit the ID of the run that spawned them.
run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="")


def get_run_id() -> str:
    """Get the current run ID from context.

    Returns:
        Current run ID or empty string if not set
    """
    return run_id_var.get()


# Generates a short ID if none is given. Call it ONCE at the start of a script.
def set_run_id(run_id: str | None = None) -> str:
    """Set run ID in context.

    Args:
        run_id: Run ID to set. If None, generates a new one

    Returns:
        The run ID that was set
    """
    if run_id is None:
        run_id = uuid.uuid4().hex[:12]
    run_id_var.set(run_id)
    return run_id


class RunIdFilter(logging.Filter):
    """Add run ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add run_id to record (never blocks the record)."""
        record.run_id = get_run_id()
        return True


class CompactExceptionFormatter(logging.Formatter):
    """Formatter that shows compact exception chains.

    Hey future me - this drops the "The above exception was the direct cause
    of the following exception" noise from CI logs. Each exception in the
    chain gets a ╰─► header, followed by OUR frames only (reelcal package).

    Example output:
    12:00:01 │ WARNING │ reelcal.application.use_cases.build_calendar:88 │ Live feed unavailable
    ╰─► ConnectError: All connection attempts failed
        File "letterboxd_feed_client.py", line 71, in fetch_feed
          response = await client.get(self.feed_url)
    ╰─► SourceUnavailableError: Source 'feed' is unavailable
    """

    def formatException(self, ei: Any) -> str:
        """Format exception chain with root cause first.

        Args:
            ei: Exception info tuple (type, value, traceback)

        Returns:
            Formatted exception string
        """
        _, exc_value, _ = ei
        if exc_value is None:
            return ""

        exceptions: list[BaseException] = []
        current: BaseException | None = exc_value
        while current is not None and current not in exceptions:
            exceptions.append(current)
            current = current.__cause__ or current.__context__
        exceptions.reverse()

        lines: list[str] = []
        for exc in exceptions:
            lines.append(f"╰─► {exc.__class__.__name__}: {exc}")
            if not exc.__traceback__:
                continue
            for frame in traceback.extract_tb(exc.__traceback__):
                filepath = frame.filename
                if "/site-packages/" in filepath or "reelcal" not in filepath:
                    continue
                lines.append(f'    File "{Path(filepath).name}", line {frame.lineno}, in {frame.name}')
                if frame.line:
                    lines.append(f"      {frame.line.strip()}")

        return "\n".join(lines)


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined,misc]
    """Custom JSON formatter with additional fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: Dictionary to be logged as JSON
            record: Python logging record
            message_dict: Message dictionary from format string
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        run_id = getattr(record, "run_id", "")
        if run_id:
            log_record["run_id"] = run_id

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)


# Listen future me, call this ONCE per script, before anything logs. It resets the root
# logger's handlers so calling it twice (tests!) doesn't double every line.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "reelcal",
) -> None:
    """Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for logs (for log shipping from CI)
        app_name: Application name to include in logs
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RunIdFilter())

    if json_format:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = CompactExceptionFormatter(
            fmt="%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s",
            datefmt="%H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Every TMDb lookup would otherwise log its request line
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "app_name": app_name,
            "log_level": log_level,
            "json_format": json_format,
        },
    )
