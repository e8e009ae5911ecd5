"""Tests for the serverless (Netlify / Lambda) entry point."""

import base64
import json
from unittest import mock

import pytest

from api_proxy.lambda_handler import handler, lambda_handler

API_KEY = "lambda-secret"


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", API_KEY)


@pytest.fixture
def upstream():
    with mock.patch("api_proxy.api_handlers.requests.post") as post:
        post.return_value.status_code = 200
        post.return_value.content = b'{"predictions": []}'
        yield post


def test_get_is_405():
    result = handler({"httpMethod": "GET"}, None)
    assert result["statusCode"] == 405
    assert result["body"] == "Method Not Allowed"
    assert result["headers"]["Content-Type"].startswith("text/plain")


def test_missing_method_is_405():
    assert handler({}, None)["statusCode"] == 405


def test_post_relays(upstream):
    event = {
        "httpMethod": "POST",
        "body": json.dumps({"modelName": "imagen-3", "apiPayload": {"x": 1}}),
    }
    result = handler(event, None)
    assert result == {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": '{"predictions":[]}',
    }
    assert upstream.call_args.args[0].partition("?")[0].endswith("imagen-3:predict")


def test_base64_body(upstream):
    raw = json.dumps({"modelName": "gemini-pro", "apiPayload": {"x": 1}}).encode()
    event = {"httpMethod": "POST", "body": base64.b64encode(raw).decode(), "isBase64Encoded": True}
    assert handler(event, None)["statusCode"] == 200
    assert upstream.call_args.args[0].partition("?")[0].endswith("gemini-pro:generateContent")


def test_bad_base64_body_is_500(upstream):
    event = {"httpMethod": "POST", "body": "***not base64***", "isBase64Encoded": True}
    result = handler(event, None)
    assert result["statusCode"] == 500
    assert json.loads(result["body"])["error"] == "Internal Server Error in API Proxy."
    upstream.assert_not_called()


def test_missing_body_is_500(upstream):
    result = handler({"httpMethod": "POST"}, None)
    assert result["statusCode"] == 500
    upstream.assert_not_called()


def test_missing_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY")
    result = handler({"httpMethod": "POST", "body": "not json", "isBase64Encoded": True}, None)
    assert result["statusCode"] == 500
    assert json.loads(result["body"]) == {"error": "API Key not configured."}


def test_lambda_handler_alias():
    assert lambda_handler is handler
