import logging

from django.db import IntegrityError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.ledger.exceptions import LedgerError


logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    DRF handles its own exceptions. Everything else that escapes a view is
    turned into a JSON body instead of Django's HTML error page.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    view_name = type(view).__name__ if view is not None else "unknown"

    if isinstance(exc, LedgerError):
        logger.warning("Ledger refused posting in %s: %s", view_name, exc)
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ProtectedError):
        return Response(
            {"detail": "Record is still referenced by other records and cannot be removed."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error in %s: %s", view_name, exc)
        return Response(
            {"detail": "Record conflicts with existing data."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    logger.exception("Unhandled error in %s", view_name)
    return Response({"detail": "Server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
