import sys, json, logging, time, uuid
from typing import Optional, Dict, Any
from contextvars import ContextVar

from .settings import settings as S

SERVICE_NAME = S.service_name

# --- Request context --------------------------------------------------------
# Correlates log lines emitted while serving one caller request
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)


def set_request_context(request_id: str = None, user_id: str = None):
    """Set request-scoped context variables for logging correlation.

    Args:
        request_id: Unique identifier for the request (generated when omitted)
        user_id: Identifier of the user the scores are computed for
    """
    if request_id is None:
        request_id = str(uuid.uuid4())

    request_id_var.set(request_id)
    if user_id:
        user_id_var.set(user_id)

    return request_id


def get_request_context() -> Dict[str, Any]:
    """Get current request context for logging."""
    return {
        "request_id": request_id_var.get(),
        "user_id": user_id_var.get(),
    }


class PerformanceLogger:
    """Context manager for performance logging."""

    def __init__(self, logger: logging.Logger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.debug(f"Starting {self.operation}", extra={
            "operation": self.operation,
            "phase": "start",
            **self.context
        })
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        level = logging.ERROR if exc_type else logging.DEBUG
        status = "error" if exc_type else "success"

        self.logger.log(level, f"Completed {self.operation}", extra={
            "operation": self.operation,
            "phase": "complete",
            "duration_seconds": round(duration, 3),
            "status": status,
            "error_type": exc_type.__name__ if exc_type else None,
            **self.context
        })


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with request context and caller extras."""

    _builtin_keys = set(logging.LogRecord(None, 0, "", 0, "", (), None, None).__dict__.keys())

    def format(self, record):
        context = get_request_context()
        payload = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "event": record.getMessage(),
            "logger": record.name,
            **{k: v for k, v in context.items() if v is not None}
        }

        # Merge any user-supplied extras except builtin attributes
        for key, value in record.__dict__.items():
            if key not in self._builtin_keys and key not in payload:
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logger(name: str | None = None):
    """Return a JSON-logging logger writing to stderr."""
    logger = logging.getLogger(name or SERVICE_NAME)
    logger.setLevel(getattr(logging, S.log_level.upper(), logging.INFO))

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        # stdout is reserved for CLI output
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(JsonFormatter())
        logger.addHandler(ch)

    logger.propagate = False

    def log_performance(operation: str, **context):
        return PerformanceLogger(logger, operation, **context)

    logger.log_performance = log_performance
    return logger


def log_error_with_context(logger: logging.Logger, error: Exception, operation: str, **context):
    """Log errors with full context for debugging."""
    logger.error(f"Error in {operation}: {str(error)}", extra={
        "operation": operation,
        "error_type": type(error).__name__,
        **context
    })
