from decimal import Decimal

from django.db import IntegrityError
from django.db.models import ProtectedError
from django.test import SimpleTestCase
from rest_framework.exceptions import NotFound

from apps.ledger.exceptions import SalaryUnderflowError

from .exceptions import api_exception_handler
from .serializers import DateRangeQuerySerializer


class ApiExceptionHandlerTests(SimpleTestCase):
    def _handle(self, exc):
        return api_exception_handler(exc, {"view": None})

    def test_drf_exceptions_pass_through(self):
        response = self._handle(NotFound("Worker not found."))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["detail"], "Worker not found.")

    def test_ledger_error_is_bad_request(self):
        response = self._handle(SalaryUnderflowError(worker_id=1, pending=Decimal("10"), amount=Decimal("20")))
        self.assertEqual(response.status_code, 400)
        self.assertIn("exceeds pending salary", response.data["detail"])

    def test_protected_error_is_bad_request(self):
        response = self._handle(ProtectedError("protected", set()))
        self.assertEqual(response.status_code, 400)

    def test_integrity_error_is_bad_request(self):
        response = self._handle(IntegrityError("UNIQUE constraint failed"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "Record conflicts with existing data.")

    def test_unexpected_error_is_logged_server_error(self):
        with self.assertLogs("common.exceptions", level="ERROR"):
            response = self._handle(RuntimeError("boom"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"detail": "Server error"})


class DateRangeQuerySerializerTests(SimpleTestCase):
    def test_reversed_range_is_invalid(self):
        serializer = DateRangeQuerySerializer(data={"start_date": "2026-03-10", "end_date": "2026-03-01"})
        self.assertFalse(serializer.is_valid())
        self.assertIn("end_date", serializer.errors)

    def test_open_range_is_valid(self):
        serializer = DateRangeQuerySerializer(data={"start_date": "2026-03-10"})
        self.assertTrue(serializer.is_valid())
