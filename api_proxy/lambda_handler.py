"""Netlify Functions / AWS Lambda entry point for the API proxy.

The platform passes a proxy event ({"httpMethod", "body", "isBase64Encoded"})
and expects {"statusCode", "headers", "body"} back.
"""

import base64
import binascii
import logging

from .config import get_api_key
from .api_handlers import relay_request, JSON_CONTENT_TYPE, INTERNAL_ERROR
from .utils import dump_json, redact_secret

logger = logging.getLogger(__name__)


def _event_body(event):
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        body = base64.b64decode(body, validate=True).decode("utf-8")
    return body


def handler(event, context=None):
    """Relay one serverless invocation."""
    method = event.get("httpMethod") or ""

    if method == "POST" and get_api_key():
        try:
            body = _event_body(event)
        except (binascii.Error, ValueError) as e:
            message = redact_secret(str(e), get_api_key())
            logger.error(f"Proxy Error: undecodable request body: {message}")
            return {
                "statusCode": 500,
                "headers": {"Content-Type": JSON_CONTENT_TYPE},
                "body": dump_json({"error": INTERNAL_ERROR, "details": message}),
            }
    else:
        # 405 and missing-key answers never look at the body
        body = event.get("body")

    status, text, content_type = relay_request(method, body)
    return {
        "statusCode": status,
        "headers": {"Content-Type": content_type},
        "body": text,
    }


# AWS Lambda's conventional handler name
lambda_handler = handler
