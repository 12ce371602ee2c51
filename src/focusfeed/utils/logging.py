"""Logging configuration using structlog for structured JSON logging."""

import atexit
import logging
import queue
import sys
import threading
import time
from collections import deque
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer
from structlog.stdlib import LoggerFactory, add_log_level, add_logger_name

# Standard library logging levels mapping
_LOG_LEVELS = {
    "TRACE": logging.DEBUG - 5,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_level_no(level_name: str) -> int:
    """Get numeric log level from name."""
    level_name = level_name.upper()
    return _LOG_LEVELS.get(level_name, logging.INFO)


@dataclass(slots=True)
class HighVolumeEventPolicy:
    """
    Rate-limiting policy for high-frequency log events.

    Attributes:
        max_occurrences: Maximum number of events allowed within the window.
        window_seconds: Sliding window size in seconds for counting events.
    """

    max_occurrences: int
    window_seconds: float


class ConsoleNoiseFilterProcessor:
    """
    Structlog processor that reduces console noise while preserving critical diagnostics.

    This processor enforces module-level minimum log levels and rate-limits
    specific high-volume events within a sliding time window.
    """

    def __init__(
        self,
        level_overrides: Mapping[str, str] | None = None,
        high_volume_policies: Mapping[str, HighVolumeEventPolicy] | None = None,
        time_func: Callable[[], float] | None = None,
    ) -> None:
        """
        Initialize the console noise filter processor.

        Args:
            level_overrides: Mapping of module prefixes to minimum log levels.
            high_volume_policies: Mapping of event names to rate-limit policies.
            time_func: Optional time provider for testing (defaults to time.monotonic).
        """
        self.level_overrides = dict(level_overrides or {})
        self.high_volume_policies = dict(high_volume_policies or {})
        self._resolved_level_overrides = {
            prefix: _get_level_no(level_name)
            for prefix, level_name in self.level_overrides.items()
            if level_name
        }
        self._event_windows: dict[str, deque[float]] = {
            event: deque() for event in self.high_volume_policies
        }
        self._lock = threading.Lock()
        self._time_func = time_func or time.monotonic

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        """Apply level overrides and rate limits to a log event."""
        logger_name = event_dict.get("logger", "") or ""
        level_no = event_dict.get("level", logging.INFO)

        if isinstance(level_no, str):
            level_no = _get_level_no(level_no)
        elif not isinstance(level_no, int):
            level_no = logging.INFO

        for prefix, min_level in self._resolved_level_overrides.items():
            if logger_name.startswith(prefix) and level_no < min_level:
                raise structlog.DropEvent

        message = event_dict.get("event", "")
        policy = (
            self.high_volume_policies.get(message) if isinstance(message, str) else None
        )
        if policy:
            now = self._time_func()
            with self._lock:
                window = self._event_windows.setdefault(
                    str(message) if message else "", deque()
                )
                while window and now - window[0] > policy.window_seconds:
                    window.popleft()
                if len(window) >= policy.max_occurrences:
                    raise structlog.DropEvent
                window.append(now)

        return event_dict


class ConsoleNoiseFilter(logging.Filter):
    """Handler filter applying a ConsoleNoiseFilterProcessor to stdlib records.

    Runs for structlog events (whose event dict travels in record.msg) and for
    plain stdlib records alike, and only affects the handler it is attached to.
    """

    def __init__(self, processor: ConsoleNoiseFilterProcessor) -> None:
        super().__init__()
        self.processor = processor

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, dict):
            event = record.msg.get("event", "")
        else:
            event = record.getMessage()
        event_dict = {"event": event, "logger": record.name, "level": record.levelno}
        try:
            self.processor(None, record.levelname.lower(), event_dict)
        except structlog.DropEvent:
            return False
        return True


DEFAULT_CONSOLE_LEVEL_OVERRIDES: dict[str, str] = {
    # Provider construction logs are only interesting when something breaks.
    "focusfeed.providers.factory": "WARNING",
}

DEFAULT_HIGH_VOLUME_EVENTS: dict[str, HighVolumeEventPolicy] = {
    # Every feed page produces one of each; keep a handful per burst.
    "generation_cache_hit": HighVolumeEventPolicy(5, 10.0),
    "generation_cache_coalesced": HighVolumeEventPolicy(5, 10.0),
    "dedup_filtered": HighVolumeEventPolicy(5, 10.0),
    "provider_call_completed": HighVolumeEventPolicy(10, 10.0),
}

# Global state for handlers
_configured = False
_handlers: list[logging.Handler] = []
_listener: QueueListener | None = None
_config_lock = threading.Lock()


def _base_pre_chain() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _setup_structlog() -> None:
    """Route structlog through the standard library logging machinery."""
    structlog.configure(
        processors=[
            *_base_pre_chain(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class _EventDictQueueHandler(QueueHandler):
    """QueueHandler that enqueues records untouched.

    The stock prepare() pre-formats record.msg into a string, which would
    flatten the structlog event dict before ProcessorFormatter sees it.
    The queue never leaves the process, so no pickling concerns apply.
    """

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        return record


def _stop_listener() -> None:
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None


def configure_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    json_console: bool = False,
    enable_console_noise_filter: bool = True,
) -> None:
    """Configure structlog logging.

    Records are handed to a QueueHandler on the calling thread and written
    by a background QueueListener, so request threads never wait on
    console or file I/O.

    Args:
        log_level: Minimum console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for rotating JSON log files (no file logging if None)
        json_console: Render console output as JSON lines instead of colored text
        enable_console_noise_filter: Toggle console-side noise suppression
    """
    global _configured, _listener

    with _config_lock:
        _setup_structlog()

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        _stop_listener()
        for handler in _handlers:
            root_logger.removeHandler(handler)
            handler.close()
        _handlers.clear()

        level = _get_level_no(log_level)
        sinks: list[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        if enable_console_noise_filter:
            console_handler.addFilter(
                ConsoleNoiseFilter(
                    ConsoleNoiseFilterProcessor(
                        level_overrides=DEFAULT_CONSOLE_LEVEL_OVERRIDES,
                        high_volume_policies=DEFAULT_HIGH_VOLUME_EVENTS,
                    )
                )
            )
        console_renderer: Any = (
            JSONRenderer()
            if json_console
            else ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=console_renderer,
                foreign_pre_chain=_base_pre_chain(),
            )
        )
        sinks.append(console_handler)

        if log_dir is not None:
            log_dir.mkdir(exist_ok=True, parents=True)
            file_formatter = structlog.stdlib.ProcessorFormatter(
                processor=JSONRenderer(),
                foreign_pre_chain=_base_pre_chain(),
            )

            # 50MB per file, 5 backups
            file_handler = RotatingFileHandler(
                filename=str(log_dir / "focusfeed.log"),
                maxBytes=50 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(file_formatter)
            sinks.append(file_handler)

            error_handler = RotatingFileHandler(
                filename=str(log_dir / "errors.log"),
                maxBytes=10 * 1024 * 1024,
                backupCount=10,
                encoding="utf-8",
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(file_formatter)
            sinks.append(error_handler)

        log_queue: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
        queue_handler = _EventDictQueueHandler(log_queue)
        root_logger.addHandler(queue_handler)
        _handlers.append(queue_handler)
        _handlers.extend(sinks)

        _listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
        _listener.start()
        _configured = True

    logger = get_logger("focusfeed.utils.logging")
    logger.debug(
        "logging_configured",
        console_level=log_level,
        log_dir=str(log_dir) if log_dir else None,
        json_console=json_console,
        console_noise_filter=enable_console_noise_filter,
    )


def flush_logging() -> None:
    """Block until every queued record has reached its handlers."""
    with _config_lock:
        if _listener is None:
            return
        # stop() drains the queue; the listener is restarted for later records
        _listener.stop()
        for handler in _handlers:
            handler.flush()
        _listener.start()


def shutdown_logging() -> None:
    """Drain the queue and stop the background listener."""
    global _configured
    with _config_lock:
        _stop_listener()
        for handler in _handlers:
            handler.flush()
        _configured = False


atexit.register(shutdown_logging)


def get_logger(name: str) -> Any:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the given name
    """
    if not _configured:
        configure_logging()

    return structlog.get_logger(name)
