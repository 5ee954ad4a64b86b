from courier.networking.headers import Headers
from courier.networking.merge import merge_config


def test_value_fields_prefer_override():
    merged = merge_config(
        {"url": "/base", "method": "get", "timeout": 100},
        {"url": "/override", "timeout": 0},
    )

    assert merged == {"url": "/override", "method": "get", "timeout": 0}


def test_keys_from_one_side_pass_through():
    transform = lambda data, headers: data  # noqa: E731
    merged = merge_config({"transform_request": [transform]}, {"base_url": "http://x"})

    assert merged["transform_request"] == [transform]
    assert merged["base_url"] == "http://x"
    assert "data" not in merged


def test_function_fields_are_replaced_not_combined():
    first = lambda data, headers: data  # noqa: E731
    second = lambda data, headers: data  # noqa: E731

    merged = merge_config({"transform_request": [first]}, {"transform_request": [second]})

    assert merged["transform_request"] == [second]


def test_headers_merge_per_key_case_insensitively():
    merged = merge_config(
        {"headers": {"X-Base": "1", "X-Both": "base"}},
        {"headers": {"x-both": "override", "X-New": "2"}},
    )

    headers = merged["headers"]
    assert isinstance(headers, Headers)
    assert headers.get("x-base") == "1"
    assert headers.get("X-Both") == "override"
    assert headers.get("x-new") == "2"


def test_headers_with_method_buckets_stay_mappings():
    merged = merge_config(
        {"headers": {"common": {"Accept": "*/*"}, "post": {"X-Post": "1"}}},
        {"headers": {"common": {"accept": "text/plain"}, "X-Flat": "1"}},
    )

    assert merged["headers"] == {
        "common": {"Accept": "text/plain"},
        "post": {"X-Post": "1"},
        "X-Flat": "1",
    }


def test_option_bags_merge_recursively():
    merged = merge_config(
        {"params": {"a": 1, "nested": {"x": 1, "y": 2}}, "auth": {"username": "u"}},
        {"params": {"b": 2, "nested": {"y": 3}}, "auth": {"password": "p"}},
    )

    assert merged["params"] == {"a": 1, "b": 2, "nested": {"x": 1, "y": 3}}
    assert merged["auth"] == {"username": "u", "password": "p"}


def test_merge_does_not_mutate_or_alias_inputs():
    base = {"params": {"a": 1}, "headers": {"X-A": "1"}, "data": {"k": [1]}}
    override = {"params": {"b": 2}}

    merged = merge_config(base, override)
    merged["params"]["c"] = 3
    merged["data"]["k"].append(2)

    assert base == {"params": {"a": 1}, "headers": {"X-A": "1"}, "data": {"k": [1]}}
    assert override == {"params": {"b": 2}}


def test_merge_accepts_missing_layers():
    assert merge_config(None, {"url": "/x"}) == {"url": "/x"}
    assert merge_config({"url": "/x"}) == {"url": "/x"}


def test_header_container_layer_keeps_suppression():
    merged = merge_config({}, {"headers": Headers({"Content-Type": False})})

    assert merged["headers"].get("Content-Type") is False


def test_header_container_suppression_survives_bucketed_base():
    merged = merge_config(
        {"headers": {"common": {"Content-Type": None}}},
        {"headers": Headers({"Content-Type": False, "X-A": "1"})},
    )

    assert merged["headers"]["Content-Type"] is False
    assert merged["headers"]["X-A"] == "1"
