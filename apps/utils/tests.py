# apps/utils/tests.py
import json
import logging

from django.http import HttpResponse
from django.test import TestCase, RequestFactory
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import ValidationError

from .exceptions import BusinessLogicException, custom_exception_handler
from .logging import JSONFormatter
from .middleware import RequestLogMiddleware


class ExceptionHandlerTests(TestCase):
    def test_business_error_is_400_with_code(self):
        resp = custom_exception_handler(
            BusinessLogicException("Price book is inactive.", code="price_book_inactive"), {}
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data, {"error": "Price book is inactive.", "code": "price_book_inactive"})

    def test_validation_error_keeps_drf_shape(self):
        resp = custom_exception_handler(ValidationError({"quantity": ["Required."]}), {})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("quantity", resp.data)

    def test_unexpected_error_is_500(self):
        with self.assertLogs("apps.utils.exceptions", level="ERROR"):
            resp = custom_exception_handler(RuntimeError("boom"), {})
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.data["code"], "server_error")


class JSONFormatterTests(TestCase):
    def _record(self, msg, args=None, **extra):
        record = logging.LogRecord("apps.test", logging.INFO, __file__, 10, msg, args, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_context_fields_are_promoted(self):
        record = self._record("changed", opportunity_id="opp-1", price_book_id="pb-2")
        payload = json.loads(JSONFormatter().format(record))

        self.assertEqual(payload["msg"], "changed")
        self.assertEqual(payload["opportunity_id"], "opp-1")
        self.assertEqual(payload["price_book_id"], "pb-2")
        self.assertNotIn("user_id", payload)

    def test_sensitive_keys_are_redacted(self):
        record = self._record({"user": "ops", "password": "hunter2", "nested": {"token": "abc"}})
        payload = json.loads(JSONFormatter().format(record))

        self.assertNotIn("hunter2", payload["msg"])
        self.assertNotIn("abc", payload["msg"])
        self.assertIn("***REDACTED***", payload["msg"])


class HealthAndInfoTests(TestCase):
    def test_health_check(self):
        resp = self.client.get(reverse("health-check"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["components"]["db"], "ok")

    def test_server_info_is_public(self):
        resp = self.client.get(reverse("server-info"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["app_name"], "PriceBook")


class RequestLogMiddlewareTests(TestCase):
    def test_api_requests_are_logged(self):
        with self.assertLogs("apps.requests", level="INFO") as logs:
            self.client.get(reverse("server-info"))
        self.assertTrue(any("GET /api/v1/utils/info/ 200" in line for line in logs.output))

    def test_non_api_requests_are_not_logged(self):
        request = RequestFactory().get("/admin/")
        middleware = RequestLogMiddleware(lambda r: None)
        middleware.process_request(request)
        logger = logging.getLogger("apps.requests")
        with self.assertNoLogs(logger, level="INFO"):
            middleware.process_response(request, HttpResponse())
