"""
Tests for the service result envelope and its HTTP mapping.
"""

from unittest.mock import MagicMock

import pytest

from app.api.responses import actor_id_from_request, status_for_result
from app.services.base_service import (
    GENERIC_INTERNAL_ERROR,
    BaseService,
    ServiceResult,
    log_operation,
    service_envelope,
)
from app.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
    status_for_error_code,
)


class _Service(BaseService):
    @service_envelope
    async def returns(self, value):
        return value

    @service_envelope
    async def raises(self, error):
        raise error

    @service_envelope
    @log_operation
    async def logged(self, error):
        raise error


@pytest.fixture
def service(mock_session):
    return _Service(mock_session)


class TestEnvelope:
    """Test conversion of results and errors."""

    @pytest.mark.asyncio
    async def test_plain_value_wrapped(self, service):
        result = await service.returns({"a": 1})
        assert result == ServiceResult(success=True, data={"a": 1})

    @pytest.mark.asyncio
    async def test_service_result_passed_through(self, service):
        partial = ServiceResult.ok({"a": 1}, warning="history missing")
        assert await service.returns(partial) is partial

    @pytest.mark.asyncio
    async def test_domain_error_keeps_message(self, service):
        result = await service.raises(ValidationError("period is required"))

        assert result.success is False
        assert result.error == "period is required"
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_internal_error_message_hidden(self, service):
        result = await service.raises(InternalError("mail server password rejected"))

        assert result.error == GENERIC_INTERNAL_ERROR
        assert result.error_code == "INTERNAL_ERROR"

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back(self, service, mock_session):
        result = await service.raises(RuntimeError("connection reset"))

        assert result.success is False
        assert result.error == GENERIC_INTERNAL_ERROR
        assert result.error_code == "INTERNAL_ERROR"
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_braces_in_logged_error(self, service):
        result = await service.logged(ValidationError("bad value {amount}"))

        assert result.error == "bad value {amount}"
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_braces_in_logged_unexpected_error(self, service, mock_session):
        result = await service.logged(RuntimeError("lost {connection}"))

        assert result.error_code == "INTERNAL_ERROR"
        mock_session.rollback.assert_awaited_once()

    def test_to_dict_omits_empty_fields(self):
        assert ServiceResult.ok().to_dict() == {"success": True}

    def test_to_dict_failure(self):
        result = ServiceResult.fail(NotFoundError("Investment 5 not found"))
        assert result.to_dict() == {
            "success": False,
            "error": "Investment 5 not found",
            "error_code": "NOT_FOUND",
        }


class TestStatusMapping:
    """Test error code to HTTP status mapping."""

    @pytest.mark.parametrize(
        "error,status",
        [
            (ValidationError(), 400),
            (AuthenticationError(), 401),
            (AuthorizationError(), 403),
            (NotFoundError(), 404),
            (ConflictError(), 409),
            (InternalError(), 500),
        ],
    )
    def test_error_status(self, error, status):
        assert status_for_result(ServiceResult.fail(error)) == status

    def test_success_status(self):
        assert status_for_result(ServiceResult.ok({})) == 200

    def test_unknown_code(self):
        assert status_for_error_code("SOMETHING_ELSE") == 500
        assert status_for_error_code(None) == 500


class TestActorHeader:
    """Test actor identity header parsing."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("42", 42),
            (" 7 ", 7),
            ("", None),
            ("0", None),
            ("-3", None),
            ("abc", None),
        ],
    )
    def test_header_values(self, header, expected):
        request = MagicMock()
        request.headers = {"X-Actor-Id": header}
        assert actor_id_from_request(request) == expected

    def test_missing_header(self):
        request = MagicMock()
        request.headers = {}
        assert actor_id_from_request(request) is None
