import logging

from django.db import DatabaseError
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class ApiErrorMiddleware:
    """
    Report storage failures on /api/ paths as JSON 500 responses carrying the
    backend's message.
    """

    prefix = "/api/"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not request.path.startswith(self.prefix):
            return None
        if not isinstance(exception, DatabaseError):
            return None
        logger.exception("Storage error on %s %s", request.method, request.path)
        return JsonResponse({"error": str(exception)}, status=500)
