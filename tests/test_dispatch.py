# pyright: reportUnknownParameterType=false, reportMissingParameterType=false
import asyncio
from unittest.mock import Mock

import pytest

from courier.networking.cancel import AbortController, CancelToken
from courier.networking.dispatch import dispatch_request
from courier.networking.errors import (
    AdapterUnknownError,
    CanceledError,
    TransportError,
)
from courier.networking.headers import Headers
from courier.networking.response import Response


def _echo_adapter(**response_fields):
    async def adapter(config):
        return Response(
            data=response_fields.get("data", config.get("data")),
            status=response_fields.get("status", 200),
            headers=response_fields.get("headers", {"content-type": "text/plain"}),
            config=config,
        )

    return adapter


def _sync_adapter(config):
    return Response(config=config)


def _config(**overrides):
    config = {"method": "get", "url": "/x", "adapter": _echo_adapter()}
    config.update(overrides)
    return config


def test_canceled_token_fails_before_transforms_and_io():
    token = CancelToken()
    token.cancel("user abort")
    transform = Mock()
    adapter = Mock()

    with pytest.raises(CanceledError) as excinfo:
        dispatch_request(
            _config(cancel_token=token, transform_request=[transform], adapter=adapter)
        )

    assert str(excinfo.value) == "user abort"
    transform.assert_not_called()
    adapter.assert_not_called()


def test_aborted_signal_fails_immediately():
    controller = AbortController()
    controller.abort()

    with pytest.raises(CanceledError):
        dispatch_request(_config(signal=controller.signal))


def test_unknown_adapter_raises_at_call_time():
    with pytest.raises(AdapterUnknownError):
        dispatch_request(_config(adapter="bogus"))


@pytest.mark.asyncio
async def test_request_transforms_and_header_normalization():
    seen = {}

    def transform(data, headers):
        seen["headers"] = headers
        headers.set("X-Transformed", "yes")
        return data.upper()

    config = _config(
        method="post",
        data="payload",
        headers={"X-Caller": "1"},
        transform_request=[transform, lambda data, headers: data + "!"],
    )

    response = await dispatch_request(config)

    assert isinstance(config["headers"], Headers)
    assert seen["headers"] is config["headers"]
    assert config["data"] == "PAYLOAD!"
    assert response.data == "PAYLOAD!"
    assert config["headers"].get("x-transformed") == "yes"
    assert config["headers"].get("content-type") == "application/x-www-form-urlencoded"


@pytest.mark.parametrize("method", ["post", "put", "patch"])
def test_body_methods_default_content_type(method):
    config = _config(method=method, adapter=_sync_adapter)

    dispatch_request(config).close()

    assert config["headers"].get_content_type() == "application/x-www-form-urlencoded"


def test_content_type_default_keeps_explicit_values():
    explicit = _config(
        method="post",
        headers={"Content-Type": "application/json"},
        adapter=_sync_adapter,
    )
    suppressed = _config(
        method="post", headers={"Content-Type": False}, adapter=_sync_adapter
    )
    get = _config(method="get", adapter=_sync_adapter)

    for config in (explicit, suppressed, get):
        dispatch_request(config).close()

    assert explicit["headers"].get("content-type") == "application/json"
    assert suppressed["headers"].get("content-type") is False
    assert get["headers"].get("content-type") is None


@pytest.mark.asyncio
async def test_response_transform_receives_status_and_headers_are_wrapped():
    calls = []

    def transform(data, headers, status):
        calls.append((data, headers.get("content-type"), status))
        return {"wrapped": data}

    response = await dispatch_request(
        _config(
            adapter=_echo_adapter(data="body", status=201),
            transform_response=transform,
        )
    )

    assert calls == [("body", "text/plain", 201)]
    assert response.data == {"wrapped": "body"}
    assert isinstance(response.headers, Headers)


@pytest.mark.asyncio
async def test_default_adapter_is_used_when_unset(monkeypatch):
    adapter = _echo_adapter(data="from default")
    monkeypatch.setattr("courier.networking.dispatch.DEFAULT_ADAPTER", (adapter,))

    config = _config()
    del config["adapter"]

    response = await dispatch_request(config)

    assert response.data == "from default"


@pytest.mark.asyncio
async def test_sync_adapter_return_value_is_accepted():
    response = await dispatch_request(
        _config(adapter=lambda config: Response(data="sync", config=config))
    )

    assert response.data == "sync"


@pytest.mark.asyncio
async def test_failure_with_partial_response_is_transformed():
    async def failing(config):
        raise TransportError(
            "Request failed with status code 404",
            "ERR_BAD_REQUEST",
            config=config,
            response=Response(data="missing", status=404, headers={"x-a": "1"}),
        )

    with pytest.raises(TransportError) as excinfo:
        await dispatch_request(
            _config(
                adapter=failing,
                transform_response=lambda data, headers, status: f"{status}:{data}",
            )
        )

    assert excinfo.value.response.data == "404:missing"
    assert isinstance(excinfo.value.response.headers, Headers)


@pytest.mark.asyncio
async def test_cancellation_during_flight_wins_over_success():
    controller = AbortController()
    started = asyncio.Event()

    async def slow(config):
        started.set()
        await asyncio.sleep(0.01)
        return Response(data="late", config=config)

    pending = asyncio.ensure_future(
        dispatch_request(_config(adapter=slow, signal=controller.signal))
    )
    await started.wait()
    controller.abort()

    with pytest.raises(CanceledError):
        await pending


@pytest.mark.asyncio
async def test_cancellation_during_flight_wins_over_transport_failure():
    token = CancelToken()
    transform = Mock()

    async def failing(config):
        token.cancel("stop")
        raise TransportError(
            "boom", config=config, response=Response(data="partial")
        )

    with pytest.raises(CanceledError) as excinfo:
        await dispatch_request(
            _config(adapter=failing, cancel_token=token, transform_response=transform)
        )

    assert str(excinfo.value) == "stop"
    transform.assert_not_called()


@pytest.mark.asyncio
async def test_adapter_cancellation_skips_response_transforms():
    transform = Mock()

    async def canceled(config):
        raise CanceledError(config=config)

    with pytest.raises(CanceledError):
        await dispatch_request(_config(adapter=canceled, transform_response=transform))

    transform.assert_not_called()
