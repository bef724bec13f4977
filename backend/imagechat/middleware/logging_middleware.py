"""
ASGI middleware that logs one line per HTTP request.

Pure ASGI (not BaseHTTPMiddleware). Response bodies are only read for
failed requests, to pick out the envelope's error text.
"""

import json
import logging
import time
from typing import List, Optional
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import truncate_large_data

logger = logging.getLogger(__name__)


def _error_reason(body: bytes) -> Optional[str]:
    """Error text of a failed response: `error` or `detail` of the JSON body."""
    text = body.decode("utf-8", errors="ignore")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return truncate_large_data(text, max_length=300) or None

    if isinstance(payload, dict):
        reason = payload.get("error") or payload.get("detail")
        if reason:
            return truncate_large_data(str(reason), max_length=300)
    return None


class RequestLoggingMiddleware:
    """Logs method, path, status and duration of every HTTP request."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[List[str]] = None):
        """
        Args:
            app: The ASGI application
            exclude_paths: Paths that are never logged (defaults to "/" and "/health")
        """
        self.app = app
        self.exclude_paths = exclude_paths or ["/", "/health"]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        start_time = time.time()
        status_code = 0
        error_chunks: List[bytes] = []

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body" and status_code >= 400:
                error_chunks.append(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, logging_send)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path} - {e}",
                exc_info=True,
                extra={"extra_fields": {"method": method, "path": path}}
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        fields = {
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
        }

        if status_code < 400:
            log_level = logging.INFO
            reason = None
        else:
            log_level = logging.WARNING if status_code < 500 else logging.ERROR
            reason = _error_reason(b"".join(error_chunks))
            fields["error_reason"] = reason

        summary = f"{method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if reason:
            summary += f" | {reason}"
        logger.log(log_level, summary, extra={"extra_fields": fields})
