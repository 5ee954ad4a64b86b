from courier.networking.headers import Headers
from courier.networking.response import Response
from courier.networking.transforms import json_request, json_response, transform_data


def test_json_request_serialises_mappings_and_sets_content_type():
    headers = Headers()

    assert json_request({"a": 1}, headers) == '{"a": 1}'
    assert headers.get_content_type() == "application/json"


def test_json_request_keeps_explicit_content_type_and_raw_payloads():
    headers = Headers({"Content-Type": "application/vnd.api+json"})

    json_request([1, 2], headers)

    assert headers.get_content_type() == "application/vnd.api+json"
    assert json_request("a=1", Headers()) == "a=1"
    assert json_request(None, Headers()) is None


def test_json_response_decodes_json_bodies():
    assert json_response('{"a": 1}', Headers(), 200) == {"a": 1}
    assert json_response(b"[1]", Headers({"Content-Type": "application/json"}), 200) == [1]


def test_json_response_leaves_non_json_alone():
    assert json_response("plain text", Headers(), 200) == "plain text"
    assert json_response("{broken", Headers(), 200) == "{broken"
    assert json_response(b"\x00\x01", Headers(), 200) == b"\x00\x01"


def test_transform_data_chains_request_transforms():
    config = {"data": "a", "headers": {"X": "1"}}

    result = transform_data(
        config,
        [lambda data, headers: data + headers.get("x"), lambda data, headers: data * 2],
    )

    assert result == "a1a1"


def test_transform_data_passes_status_for_responses():
    response = Response(data="body", status=404, headers={"X": "1"})

    result = transform_data({}, lambda data, headers, status: (data, status), response)

    assert result == ("body", 404)
