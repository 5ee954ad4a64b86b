# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
from unittest.mock import Mock, patch

import pytest

from courier.networking.config import HttpTransportConfig
from courier.networking.defaults import validate_status
from courier.networking.errors import TransportError
from courier.networking.http_adapter import HttpAdapter


def _mock_response(*, text: str = "", status: int = 200, reason: str = "OK"):
    response = Mock()
    response.text = text
    response.content = text.encode()
    response.status_code = status
    response.reason = reason
    response.headers = {"Content-Type": "text/plain"}
    return response


def _config(**overrides):
    config = {
        "method": "get",
        "url": "http://example.com/missing",
        "validate_status": validate_status,
    }
    config.update(overrides)
    return config


def test_404_rejects_with_partial_response():
    adapter = HttpAdapter(HttpTransportConfig(timeout_seconds=5.0))

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            text="not found", status=404, reason="Not Found"
        )
        with pytest.raises(TransportError) as excinfo:
            adapter.send(_config())

    error = excinfo.value
    assert error.code == "ERR_BAD_REQUEST"
    assert error.status == 404
    assert error.response.data == "not found"
    assert error.response.status_text == "Not Found"
    assert str(error) == "Request failed with status code 404"


def test_500_rejects_as_bad_response():
    adapter = HttpAdapter(HttpTransportConfig(timeout_seconds=5.0))

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            text="server error", status=500, reason="Internal Server Error"
        )
        with pytest.raises(TransportError) as excinfo:
            adapter.send(_config(url="http://example.com/error"))

    assert excinfo.value.code == "ERR_BAD_RESPONSE"
    assert excinfo.value.response.data == "server error"


def test_custom_validate_status_accepts_redirect_without_following():
    adapter = HttpAdapter(HttpTransportConfig(timeout_seconds=5.0))

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(status=302, reason="Found")
        response = adapter.send(
            _config(
                url="http://example.com/redirect",
                max_redirects=0,
                validate_status=lambda status: status < 400,
            )
        )

    assert response.status == 302
    assert response.status_text == "Found"
    assert mock_request.call_args.kwargs["allow_redirects"] is False


def test_missing_validate_status_accepts_any_status():
    adapter = HttpAdapter(HttpTransportConfig(timeout_seconds=5.0))

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(status=503, reason="Unavailable")
        response = adapter.send(_config(validate_status=None))

    assert response.status == 503
