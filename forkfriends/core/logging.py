"""
Logging configuration for Fork n Friends

structlog over the stdlib logging tree. Request ids are bound into structlog
contextvars by RequestIDMiddleware, so every event logged while serving a
request carries the id without threading it through service calls.
"""

import logging
import re
import sys
import time
import uuid
from contextlib import contextmanager
from typing import Iterator

import structlog
from pythonjsonlogger import jsonlogger

from forkfriends.core.config import settings

REQUEST_ID_HEADER = b"x-request-id"

# Inbound ids are reused only if they look like a sane token
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Paths polled by load balancers; logged at debug only
_QUIET_PATHS = {f"{settings.api_prefix}/health", "/"}


def setup_logging() -> None:
    """Configure structured logging for the application"""

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # JSON formatter for production
    if settings.is_production:
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s"
        )
    else:
        formatter = logging.Formatter("%(message)s")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # setup_logging runs once per app lifespan; don't stack handlers in tests
    root_logger.handlers = [handler]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
            if settings.is_production
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Reduce noise from third-party libraries
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiomysql", "httpx", "passlib"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance"""
    return structlog.get_logger(name)


def _inbound_request_id(scope) -> str:
    for key, value in scope.get("headers", []):
        if key == REQUEST_ID_HEADER:
            candidate = value.decode("latin-1")
            if _REQUEST_ID_RE.match(candidate):
                return candidate
    return uuid.uuid4().hex


class RequestIDMiddleware:
    """Bind a request id for the duration of each HTTP request and echo it back"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _inbound_request_id(scope)

        async def send_with_request_id(message):
            if message["type"] == "http.response.start":
                headers = [(k, v) for k, v in message.get("headers", []) if k != REQUEST_ID_HEADER]
                headers.append((REQUEST_ID_HEADER, request_id.encode()))
                message["headers"] = headers
            await send(message)

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")


class RequestLoggingMiddleware:
    """One log line per HTTP request, leveled by response status"""

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("forkfriends.request")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500

        async def send_with_status(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            path = scope.get("path")
            if path in _QUIET_PATHS:
                log = self.logger.debug
            elif status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            else:
                log = self.logger.info
            log(
                "request.completed",
                method=scope.get("method"),
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


@contextmanager
def timed(event: str, logger: structlog.stdlib.BoundLogger, **fields) -> Iterator[None]:
    """Log `<event>.completed` or `<event>.failed` with the elapsed time"""
    start = time.perf_counter()
    try:
        yield
    except Exception as exc:
        logger.warning(
            f"{event}.failed",
            error_type=type(exc).__name__,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            **fields,
        )
        raise
    logger.info(
        f"{event}.completed",
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
        **fields,
    )
