import logging
import time
import uuid
from typing import Callable

from asgiref.sync import iscoroutinefunction, markcoroutinefunction
from django.http import HttpRequest, HttpResponse

from apps.common.correlation import set_correlation_id
from apps.common.logging_utils import build_log_extra


logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """
    Tags every request with a correlation id and logs its outcome.

    Works under both WSGI and ASGI; the assistant views are async, so the
    async path is the one exercised in production.
    """

    sync_capable = True
    async_capable = True

    def __init__(self, get_response: Callable) -> None:
        self.get_response = get_response
        if iscoroutinefunction(self.get_response):
            markcoroutinefunction(self)

    def __call__(self, request: HttpRequest):
        if iscoroutinefunction(self):
            return self._acall(request)

        start_time = time.monotonic()
        correlation_id = self._begin(request)
        try:
            response = self.get_response(request)
        except Exception:
            self._log_failure(request, correlation_id, start_time)
            raise
        return self._finish(request, response, correlation_id, start_time)

    async def _acall(self, request: HttpRequest):
        start_time = time.monotonic()
        correlation_id = self._begin(request)
        try:
            response = await self.get_response(request)
        except Exception:
            self._log_failure(request, correlation_id, start_time)
            raise
        return self._finish(request, response, correlation_id, start_time)

    def _begin(self, request: HttpRequest) -> str:
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.correlation_id = correlation_id
        set_correlation_id(correlation_id)
        return correlation_id

    def _log_failure(self, request: HttpRequest, correlation_id: str, start_time: float) -> None:
        duration_ms = (time.monotonic() - start_time) * 1000.0
        logger.exception(
            "request_failed",
            extra=build_log_extra(
                correlation_id=correlation_id,
                method=request.method,
                path=request.path,
                status_code=500,
                duration_ms=round(duration_ms, 2),
            ),
        )
        set_correlation_id(None)

    def _finish(
        self,
        request: HttpRequest,
        response: HttpResponse,
        correlation_id: str,
        start_time: float,
    ) -> HttpResponse:
        duration_ms = (time.monotonic() - start_time) * 1000.0
        logger.info(
            "request_completed",
            extra=build_log_extra(
                correlation_id=correlation_id,
                method=request.method,
                path=request.path,
                status_code=getattr(response, "status_code", None),
                duration_ms=round(duration_ms, 2),
            ),
        )
        response["X-Correlation-ID"] = correlation_id
        set_correlation_id(None)
        return response
