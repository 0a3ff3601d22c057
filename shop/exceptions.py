# shop/exceptions.py
import logging

from google.api_core import exceptions as google_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def shop_exception_handler(exc, context):
    """DRF's handler, plus Firestore/Google API failures reported as 503."""
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, google_exceptions.GoogleAPIError):
        view = context.get("view")
        logger.exception("Firestore call failed in %s", type(view).__name__ if view else "unknown view")
        return Response(
            {"detail": "שירות הנתונים אינו זמין כרגע. אנא נסה שוב מאוחר יותר."},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return None
