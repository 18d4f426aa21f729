"""Structured logging configuration for RSS Discord Announcer."""

import json
import logging
import sys
from datetime import UTC, datetime

# Attributes every LogRecord carries; anything else was passed as context
RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in RESERVED_ATTRS and key not in log_entry:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ExecutionLogger:
    """Logger with execution context and structured logging."""

    def __init__(self, execution_id: str, component: str = "main"):
        """Initialize execution logger.

        Args:
            execution_id: Unique identifier for this execution
            component: Component name (e.g., 'poller', 'image_resolver')
        """
        self.execution_id = execution_id
        self.component = component
        self.logger = logging.getLogger(f"rss_announcer.{component}")
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None

    def with_execution(self, execution_id: str) -> "ExecutionLogger":
        """Return a logger for the same component bound to ``execution_id``."""
        return ExecutionLogger(execution_id, self.component)

    def _log_with_context(self, level: int, message: str, **kwargs) -> None:
        """Log message with execution context."""
        extra = {
            "execution_id": self.execution_id,
            "component": self.component,
            **kwargs,
        }
        self.logger.log(level, message, extra=extra)

    def info(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def log_execution_start(self, **kwargs) -> None:
        """Log execution start with timestamp."""
        self.start_time = datetime.now(UTC)
        self.info(
            f"Starting {self.component} execution",
            execution_start=self.start_time.isoformat(),
            **kwargs,
        )

    def log_execution_end(self, success: bool = True, **kwargs) -> None:
        """Log execution end with timestamp and duration."""
        self.end_time = datetime.now(UTC)

        duration_seconds = None
        if self.start_time:
            duration_seconds = (self.end_time - self.start_time).total_seconds()

        self.info(
            f"Completed {self.component} execution",
            execution_end=self.end_time.isoformat(),
            execution_duration_seconds=duration_seconds,
            execution_success=success,
            **kwargs,
        )

    def log_item_processing(
        self, feed_name: str, item_title: str, action: str, success: bool = True
    ) -> None:
        """Log item processing with structured data."""
        level = logging.INFO if success else logging.ERROR
        self._log_with_context(
            level,
            f"Item {action}: {item_title}",
            feed_name=feed_name,
            item_title=item_title,
            action=action,
            success=success,
        )


def setup_structured_logging(log_level: str = "INFO") -> None:
    """Setup structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    level = resolve_log_level(log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    loggers = [
        "rss_announcer",
        "rss_announcer.main",
        "rss_announcer.scheduler",
        "rss_announcer.poller",
        "rss_announcer.feed_processor",
        "rss_announcer.image_resolver",
        "rss_announcer.composer",
        "rss_announcer.discord_publisher",
        "rss_announcer.config",
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True

    if not isinstance(logging.getLevelName((log_level or "").strip().upper()), int):
        logging.getLogger("rss_announcer.config").warning(
            f"Unknown LOG_LEVEL {log_level!r}, falling back to INFO"
        )


def resolve_log_level(log_level: str | None) -> int:
    """Map a level name to its numeric value, defaulting to INFO when unknown."""
    level = logging.getLevelName((log_level or "").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def create_execution_logger(
    component: str, execution_id: str | None = None
) -> ExecutionLogger:
    """Create an execution logger for a component.

    Args:
        component: Component name
        execution_id: Optional execution ID (will generate one if not provided)

    Returns:
        ExecutionLogger instance
    """
    if not execution_id:
        execution_id = new_execution_id()

    return ExecutionLogger(execution_id, component)


def new_execution_id(prefix: str = "exec") -> str:
    """Generate a timestamped execution identifier."""
    return f"{prefix}_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
