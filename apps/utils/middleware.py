import logging
import time
from django.utils.deprecation import MiddlewareMixin
from django.http import JsonResponse

logger = logging.getLogger("apps.requests")


class RequestLogMiddleware(MiddlewareMixin):
    """
    One log line per API request: method, path, status, duration.
    """
    def process_request(self, request):
        request._log_started = time.monotonic()

    def process_response(self, request, response):
        started = getattr(request, "_log_started", None)
        if started is not None and request.path.startswith('/api/'):
            elapsed_ms = (time.monotonic() - started) * 1000
            user = getattr(request, "user", None)
            extra = {}
            if user is not None and user.is_authenticated:
                extra["user_id"] = user.pk
            logger.info(
                f"{request.method} {request.path} {response.status_code} {elapsed_ms:.1f}ms",
                extra=extra,
            )
        return response


class GlobalExceptionMiddleware(MiddlewareMixin):
    """
    Last line of defense for non-DRF views.
    """
    def process_exception(self, request, exception):
        logger.exception(f"Unhandled Middleware Exception: {str(exception)}")
        if request.path.startswith('/api/'):
            return JsonResponse(
                {"error": "Internal System Error"},
                status=500
            )
        return None # Let Django's default 500 handler work for HTML
