"""
Tests for application errors and their HTTP payloads.
"""

from core.exceptions import ConflictError, InternalError, ValidationError
from core.responses import error_payload, error_response


class TestBaseApplicationError:
    def test_default_code_and_status(self):
        error = ConflictError("Period already paid")

        assert error.error_code == "CONFLICT"
        assert error.http_status == 409
        assert error.to_dict() == {"error": "Period already paid", "error_code": "CONFLICT"}

    def test_custom_code_and_details(self):
        error = ValidationError("Bad period", "INVALID_PERIOD", {"period": "2024-13"})

        assert error.to_dict()["error_code"] == "INVALID_PERIOD"
        assert error.to_dict()["details"] == {"period": "2024-13"}


class TestErrorPayload:
    def test_internal_error_hidden_in_production(self, settings):
        settings.DEBUG = False

        body = error_payload(InternalError("relation payments_payment does not exist"))

        assert body == {"error": "Internal server error", "error_code": "INTERNAL_ERROR"}

    def test_internal_error_detail_in_debug(self, settings):
        settings.DEBUG = True

        body = error_payload(InternalError("boom"))

        assert body["detail"] == "boom"

    def test_error_response_status(self):
        response = error_response(ConflictError("Period already paid"))

        assert response.status_code == 409
        assert response.data["error"] == "Period already paid"
