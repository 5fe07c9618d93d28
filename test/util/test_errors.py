import unittest

from util.errors import (
    AuthenticationError,
    ConflictError,
    DataUnavailableError,
    InternalError,
    NotFoundError,
    ServiceError,
    StoreError,
    ValidationError,
)


class ServiceErrorTest(unittest.TestCase):

    def test_to_log_string_without_cause(self):
        error = ServiceError("Something went wrong", error_code = 42, emoji = "🫖")

        self.assertEqual(error.to_log_string(), "[🫖 E42] Something went wrong")

    def test_to_log_string_with_cause(self):
        try:
            try:
                raise ValueError("root cause")
            except ValueError as cause:
                raise ServiceError("Something went wrong", error_code = 42, emoji = "🫖") from cause
        except ServiceError as error:
            self.assertEqual(error.to_log_string(), "[🫖 E42] Something went wrong # Caused by: root cause")

    def test_str_equals_to_log_string(self):
        error = ServiceError("Something went wrong", error_code = 42, emoji = "🫖")

        self.assertEqual(str(error), error.to_log_string())

    def test_message_is_the_plain_text(self):
        error = ServiceError("Something went wrong", error_code = 42)

        self.assertEqual(error.message, "Something went wrong")

    def test_to_api_dict(self):
        error = ServiceError("Something went wrong", error_code = 42, emoji = "🫖")

        result = error.to_api_dict()

        self.assertEqual(result, {"error_code": 42, "message": "Something went wrong", "emoji": "🫖"})

    def test_default_http_status(self):
        error = ServiceError("Something went wrong", error_code = 42)

        self.assertEqual(error.http_status, 500)


class ServiceErrorSubclassesTest(unittest.TestCase):

    def test_http_statuses(self):
        expectations = [
            (ValidationError, 400),
            (AuthenticationError, 401),
            (NotFoundError, 404),
            (ConflictError, 409),
            (InternalError, 500),
            (StoreError, 500),
            (DataUnavailableError, 503),
        ]
        for error_class, http_status in expectations:
            error = error_class("message", 1)
            self.assertIsInstance(error, ServiceError)
            self.assertEqual(error.http_status, http_status, error_class.__name__)
            self.assertEqual(error.error_code, 1)

    def test_custom_emoji(self):
        error = ConflictError("Already there", 3001, emoji = "🔁")

        self.assertEqual(error.emoji, "🔁")
        self.assertEqual(error.to_log_string(), "[🔁 E3001] Already there")
