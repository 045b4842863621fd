"""Tests for log sanitization."""

from agencybridge.core.sanitize import REDACTED, is_sensitive_field, partial_redact_url, sanitize_for_logging


def test_sensitive_fields_are_redacted() -> None:
    data = {
        "X-Brand-Secret": "s3cr3t",
        "Authorization": "Bearer abc",
        "api_key": "k",
        "brandId": "brandA",
    }
    result = sanitize_for_logging(data)
    assert result["X-Brand-Secret"] == REDACTED
    assert result["Authorization"] == REDACTED
    assert result["api_key"] == REDACTED
    assert result["brandId"] == "brandA"


def test_nested_structures() -> None:
    data = {"event": {"data": {"secret": "s", "items": [{"token": "t", "id": 1}]}}}
    result = sanitize_for_logging(data)
    assert result["event"]["data"]["secret"] == REDACTED
    assert result["event"]["data"]["items"] == [{"token": REDACTED, "id": 1}]


def test_input_is_not_modified() -> None:
    data = {"secret": "s"}
    sanitize_for_logging(data)
    assert data == {"secret": "s"}


def test_urls_are_partially_redacted() -> None:
    data = {
        "asset_presigned_url": "https://s3.example.com/a.jpg?X-Amz-Signature=abc",
        "endPointUrl": "https://brand.example.com/hook?code=1",
    }
    result = sanitize_for_logging(data)
    assert result["asset_presigned_url"] == "https://s3.example.com/a.jpg?[REDACTED_QUERY_PARAMS]"
    assert result["endPointUrl"] == "https://brand.example.com/hook?[REDACTED_QUERY_PARAMS]"


def test_partial_redact_without_scheme() -> None:
    assert partial_redact_url("not a url").endswith("...[REDACTED]")
    assert partial_redact_url("https://a.example.com/x") == "https://a.example.com/x"


def test_depth_limit() -> None:
    data: dict = {}
    current = data
    for _ in range(20):
        current["child"] = {}
        current = current["child"]
    result = sanitize_for_logging(data)
    node = result
    for _ in range(11):
        node = node["child"]
    assert node == "[MAX_DEPTH_REACHED]"


def test_is_sensitive_field() -> None:
    assert is_sensitive_field("clientSecret")
    assert is_sensitive_field("ACCESS_TOKEN")
    assert not is_sensitive_field("name")
