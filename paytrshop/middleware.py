import logging
import uuid


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that keeps call-site ``extra`` alongside the request id."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


class RequestIdFilter(logging.Filter):
    """Give records logged outside a request a placeholder ``request_id``."""

    def filter(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def request_logger(request_id: str, name: str = "paytr") -> RequestLoggerAdapter:
    return RequestLoggerAdapter(logging.getLogger(name), {"request_id": request_id})


class RequestLoggerMiddleware:
    """Attach a logger scoped to the current request as ``request.logger``.

    The id comes from an ``X-Request-ID`` header when the proxy sets one.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
        request.logger = request_logger(request_id)
        response = self.get_response(request)
        response["X-Request-ID"] = request_id
        return response
