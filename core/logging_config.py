"""Logging setup - JSON records for deployments, colored console output locally"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional, TextIO

# Record attributes set through LogContext
CONTEXT_KEYS = (
    "request_id", "path", "method", "status_code", "duration",
    "content_id", "version_no", "language_code",
)

# Third party loggers kept at WARNING
QUIET_LOGGERS = (
    "uvicorn.access",
    "botocore",
    "boto3",
    "s3transfer",
    "urllib3",
    "sqlalchemy.engine",
)

_CONTEXT_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, context and extra fields at the top level"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        log_data.update({key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)})
        log_data.update(getattr(record, "extra_fields", {}))

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter with a colored level name and extra fields as key=value pairs"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers get the record unchanged
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{self.COLORS.get(record.levelname, '')}{record.levelname}{self.RESET}"

        output = super().format(colored)
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            output += " " + " ".join(f"{key}={value}" for key, value in extra_fields.items())
        return output


def setup_logging(
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the root logger, defaults come from the settings"""
    from core.settings import settings

    log_level = (log_level or settings.LOG_LEVEL).upper()
    if json_logs is None:
        json_logs = settings.JSON_LOGS

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    if json_logs:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(ColoredFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def _context_method(logger: logging.Logger, level: int):
    def log(msg: str, **fields):
        logger.log(level, msg, extra={"extra_fields": fields} if fields else None, stacklevel=2)
    return log


def get_logger(name: str) -> logging.Logger:
    """
    Logger with debug_ctx, info_ctx, warning_ctx and error_ctx methods.

    Keyword arguments of those methods end up as fields of the record:

        logger.info_ctx("Stored image", path=path, uri=uri)
    """
    logger = logging.getLogger(name)
    if not hasattr(logger, "info_ctx"):
        for level_name, level in _CONTEXT_LEVELS.items():
            setattr(logger, f"{level_name}_ctx", _context_method(logger, level))
    return logger


_log_context: ContextVar[dict] = ContextVar("log_context", default={})


def _install_context_factory() -> None:
    """Wrap the record factory once, records pick up the context of their own task"""
    base_factory = logging.getLogRecordFactory()
    if getattr(base_factory, "applies_log_context", False):
        return

    def record_factory(*args, **kwargs):
        record = base_factory(*args, **kwargs)
        record.__dict__.update(_log_context.get())
        return record

    record_factory.applies_log_context = True
    logging.setLogRecordFactory(record_factory)


_install_context_factory()


class LogContext:
    """
    Set attributes on every record created inside the block, blocks nest.

    The context is kept per task, concurrent requests do not share it.
    """

    def __init__(self, **context):
        self.context = context
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
        return False
