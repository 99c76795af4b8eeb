"""
Logging for the NoteGate backend.

Everything under the ``notegate`` logger goes to the console (JSON or
colored text), a rotating file, and a separate error file. Records logged
while a request is in flight carry its request id.
"""
import json
import logging
import logging.config
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Settings, get_settings

REQUEST_ID_HEADER = b"x-request-id"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# attributes every LogRecord has; anything else came in through extra=
_RECORD_ATTRS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
    'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'taskName', 'message', 'asctime', 'request_id',
))


class RequestIdFilter(logging.Filter):
    """Stamp records with the id of the request being served ('-' outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or '-'
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info and record.exc_info[0]:
            entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'traceback': self.formatException(record.exc_info),
            }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            entry['extra'] = extra

        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Human readable console lines, colored by level."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # other handlers share the record, so color a copy
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname:<8}{self.RESET}"
        return super().format(record)


def get_log_level(level_str: Optional[str] = None) -> int:
    """Numeric level for a name such as 'debug'; unknown names mean INFO."""
    level_str = (level_str or get_settings().log_level).upper()
    level = logging.getLevelName(level_str)
    return level if isinstance(level, int) else logging.INFO


def _console_formatter(settings: Settings) -> str:
    if settings.log_format == 'json':
        return 'json'
    if settings.log_format == 'text':
        return 'colored'
    return 'colored' if settings.debug else 'json'


def _rotating_file(path: Path, formatter: str, level: str) -> Dict[str, Any]:
    return {
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': str(path),
        'maxBytes': 10_000_000,
        'backupCount': 5,
        'formatter': formatter,
        'level': level,
        'filters': ['request_id'],
    }


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """dictConfig for the given settings."""
    log_dir = Path(settings.log_dir)

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'filters': {
            'request_id': {'()': RequestIdFilter},
        },
        'formatters': {
            'json': {'()': JSONFormatter},
            'colored': {
                '()': ColoredFormatter,
                'format': '%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s',
                'datefmt': '%H:%M:%S',
            },
            'file': {
                'format': (
                    '%(asctime)s | %(levelname)-8s | %(name)-22s | %(request_id)s | '
                    '%(funcName)s:%(lineno)d | %(message)s'
                ),
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': _console_formatter(settings),
                'stream': sys.stdout,
                'level': get_log_level(settings.log_level),
                'filters': ['request_id'],
            },
            'file': _rotating_file(log_dir / 'notegate.log', 'file', 'DEBUG'),
            'error_file': _rotating_file(log_dir / 'error.log', 'json', 'ERROR'),
        },
        'loggers': {
            '': {'handlers': ['console', 'file'], 'level': 'INFO'},
            'notegate': {
                'handlers': ['console', 'file', 'error_file'],
                'level': 'DEBUG',
                'propagate': False,
            },
            'uvicorn': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
            # LoggingMiddleware already logs every request
            'uvicorn.access': {'handlers': [], 'level': 'WARNING', 'propagate': False},
            'sqlalchemy': {'handlers': ['file'], 'level': 'WARNING', 'propagate': False},
            'alembic': {'handlers': ['console', 'file'], 'level': 'INFO', 'propagate': False},
        },
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Apply the logging config. Safe to call more than once."""
    settings = settings or get_settings()
    Path(settings.log_dir).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(settings))

    logging.getLogger('notegate.logging').info("Logging configured", extra={
        'log_level': settings.log_level,
        'log_format': settings.log_format,
        'environment': settings.environment,
    })


def get_logger(name: str) -> logging.Logger:
    """Logger under the notegate namespace."""
    return logging.getLogger(f"notegate.{name}")


class LoggingMiddleware:
    """ASGI middleware: request id, one line per request, one per response.

    An incoming ``X-Request-ID`` is reused, otherwise a new one is made;
    either way it is echoed on the response.
    """

    def __init__(self, app, logger_name: str = "http"):
        self.app = app
        self.logger = get_logger(logger_name)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get('headers', []))
        request_id = headers.get(REQUEST_ID_HEADER, b'').decode('latin-1') or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        start = time.perf_counter()

        # only the path: query strings may carry share tokens
        self.logger.info(f"{scope['method']} {scope['path']}", extra={
            'client_ip': scope['client'][0] if scope.get('client') else 'unknown',
            'user_agent': headers.get(b'user-agent', b'unknown').decode('latin-1'),
        })

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + [
                    (REQUEST_ID_HEADER, request_id.encode('latin-1'))
                ]
                self.logger.info(
                    f"{scope['method']} {scope['path']} -> {message.get('status', 0)}",
                    extra={'duration_ms': round((time.perf_counter() - start) * 1000, 2)},
                )
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            self.logger.error(f"{scope['method']} {scope['path']} failed", extra={
                'duration_ms': round((time.perf_counter() - start) * 1000, 2),
                'exception_type': type(exc).__name__,
            })
            raise
        finally:
            request_id_var.reset(token)
