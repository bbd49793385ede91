"""Python logging handler adapter for cloudwatchr.

This adapter bridges Python's standard library logging module to the
LogStoragePort, so the service's own log records can be served back over
HTTP from the ``/logs`` endpoint.
"""

import logging
import traceback

from cloudwatchr.core.models import LogEntry
from cloudwatchr.core.ports import LogStoragePort

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

_DEFAULT_INCLUDE_ATTRS = ["module", "funcName", "lineno", "pathname"]

ROOT_LOGGER_NAME = "cloudwatchr"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LogStorageHandler(logging.Handler):
    """Logging handler that writes log records to a LogStoragePort.

    Example:
        ```python
        storage = RingBufferLogStorage(max_size=1000)
        logging.getLogger("cloudwatchr").addHandler(LogStorageHandler(storage))
        ```
    """

    def __init__(
        self,
        storage: LogStoragePort,
        include_attrs: list[str] | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        """Initialize the handler with a log storage backend.

        Args:
            storage: Storage adapter implementing LogStoragePort.
            include_attrs: List of LogRecord attributes to include. Defaults to
                ["module", "funcName", "lineno", "pathname"].
            level: Minimum level handled.
        """
        super().__init__(level)
        self._storage = storage
        self._include_attrs = include_attrs or _DEFAULT_INCLUDE_ATTRS

    @property
    def storage(self) -> LogStoragePort:
        return self._storage

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the storage backend.

        Args:
            record: The log record to emit.
        """
        try:
            self._storage.write(self._to_entry(record))
        except Exception:
            self.handleError(record)

    def _to_entry(self, record: logging.LogRecord) -> LogEntry:
        attr_mapping: dict[str, str | int | float | bool] = {
            "module": record.name,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
            "pathname": record.pathname,
        }
        attributes: dict[str, str | int | float | bool] = {
            key: attr_mapping[key] for key in self._include_attrs if key in attr_mapping
        }

        # Fields passed via extra=
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                attributes[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                attributes["exc_type"] = exc_type.__name__
            if exc_value is not None:
                attributes["exc_message"] = str(exc_value)
            if exc_tb is not None:
                attributes["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        return LogEntry(
            timestamp=record.created,
            level=record.levelname,
            message=record.getMessage(),
            attributes=attributes,
        )


def install_log_storage(
    storage: LogStoragePort,
    level: str = "INFO",
    logger_name: str = ROOT_LOGGER_NAME,
) -> LogStorageHandler:
    """Route records from ``logger_name`` into ``storage``.

    Any LogStorageHandler previously installed on the logger is replaced, so
    building several apps in one process (as tests do) does not duplicate
    entries. Console output is left to the root logger configuration.

    Args:
        storage: Destination for log entries.
        level: Level name applied to the logger.
        logger_name: Logger to attach to.

    Returns:
        The installed handler.
    """
    target = logging.getLogger(logger_name)
    target.setLevel(level.upper())

    for existing in list(target.handlers):
        if isinstance(existing, LogStorageHandler):
            target.removeHandler(existing)

    handler = LogStorageHandler(storage)
    target.addHandler(handler)
    return handler
