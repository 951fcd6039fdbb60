"""Tests for the generic REST fetch-and-decode routine."""
from typing import List
from unittest.mock import Mock

import httpx
import pytest
from pydantic import BaseModel

from providers.rest import (
    ApiError,
    RestClient,
    RestError,
    TransportError,
    UnexpectedFailureShapeError,
    UnexpectedSuccessShapeError,
)


class Payload(BaseModel):
    value: int


class VendorError(BaseModel):
    code: int
    message: str

    def __str__(self) -> str:
        return f"API error {self.code}: {self.message}"


def test_success_is_decoded(rest, mock_client, json_response):
    """2xx body is returned as the success type."""
    mock_client.get.return_value = json_response(200, {"value": 42})

    result = rest.fetch("https://example.test/data", Payload, VendorError, params={"q": "x"})

    assert result == Payload(value=42)
    mock_client.get.assert_called_once_with("https://example.test/data", params={"q": "x"})


def test_success_list_shape(rest, mock_client, json_response):
    mock_client.get.return_value = json_response(200, [{"value": 1}, {"value": 2}])

    result = rest.fetch("https://example.test/data", List[Payload], VendorError)

    assert [p.value for p in result] == [1, 2]


@pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
def test_failure_payload_raises_api_error(rest, mock_client, json_response, status):
    """Non-2xx body decoded as the failure type is carried verbatim."""
    mock_client.get.return_value = json_response(status, {"code": 7, "message": "bad key"})

    with pytest.raises(ApiError) as exc_info:
        rest.fetch("https://example.test/data", Payload, VendorError)

    assert exc_info.value.failure == VendorError(code=7, message="bad key")
    assert exc_info.value.status_code == status
    assert str(exc_info.value) == "API error 7: bad key"


def test_success_shape_mismatch(rest, mock_client, json_response):
    """Valid JSON of the wrong shape never yields a default value."""
    body = {"other": "field"}
    mock_client.get.return_value = json_response(200, body)

    with pytest.raises(UnexpectedSuccessShapeError) as exc_info:
        rest.fetch("https://example.test/data", Payload, VendorError)

    assert '"other"' in exc_info.value.raw_body
    assert exc_info.value.cause is not None


def test_success_invalid_json(rest, mock_client, json_response):
    mock_client.get.return_value = json_response(200, "<html>oops</html>")

    with pytest.raises(UnexpectedSuccessShapeError) as exc_info:
        rest.fetch("https://example.test/data", Payload, VendorError)
    assert exc_info.value.raw_body == "<html>oops</html>"


def test_failure_shape_mismatch(rest, mock_client, json_response):
    mock_client.get.return_value = json_response(502, "Bad Gateway")

    with pytest.raises(UnexpectedFailureShapeError) as exc_info:
        rest.fetch("https://example.test/data", Payload, VendorError)

    assert exc_info.value.status_code == 502
    assert exc_info.value.raw_body == "Bad Gateway"
    assert "HTTP 502" in str(exc_info.value)


def test_failure_body_matching_success_is_still_error(rest, mock_client, json_response):
    """The status code decides the branch, not the body."""
    mock_client.get.return_value = json_response(404, {"value": 1})

    with pytest.raises(UnexpectedFailureShapeError):
        rest.fetch("https://example.test/data", Payload, VendorError)


def test_transport_error(rest, mock_client):
    """Network failures are wrapped and not retried."""
    mock_client.get.side_effect = httpx.ConnectError("connection refused")

    with pytest.raises(TransportError) as exc_info:
        rest.fetch("https://example.test/data", Payload, VendorError)

    assert isinstance(exc_info.value.cause, httpx.ConnectError)
    assert isinstance(exc_info.value, RestError)
    assert mock_client.get.call_count == 1


def test_timeout_is_transport_error(rest, mock_client):
    mock_client.get.side_effect = httpx.ReadTimeout("timed out")

    with pytest.raises(TransportError):
        rest.fetch("https://example.test/data", Payload, VendorError)


def test_context_manager_closes_client():
    client = Mock()
    with RestClient(client=client) as rest:
        assert isinstance(rest, RestClient)
    client.close.assert_called_once()
