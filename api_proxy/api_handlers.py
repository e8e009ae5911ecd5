"""API endpoint handlers for the API proxy.

The relay keeps GOOGLE_API_KEY on the server: callers send
{"modelName": ..., "apiPayload": ...} and the proxy forwards apiPayload to
the generative-language API with the key attached, then hands the upstream
status and JSON body back unchanged.
"""

import logging
from typing import NamedTuple

import requests

from .config import UPSTREAM_BASE_URL, get_api_key
from .routing import MODEL_ROUTES, build_endpoint, resolve_action
from .utils import SecretRedactingFilter, dump_json, is_blank, parse_json, redact_secret

logger = logging.getLogger(__name__)

# urllib3 logs each request line, query string included, at DEBUG
logging.getLogger("urllib3.connectionpool").addFilter(SecretRedactingFilter(get_api_key))

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

METHOD_NOT_ALLOWED = "Method Not Allowed"
API_KEY_NOT_CONFIGURED = "API Key not configured."
MISSING_FIELDS = "Missing modelName or apiPayload."
UNSUPPORTED_MODEL = "Unsupported model specified."
INTERNAL_ERROR = "Internal Server Error in API Proxy."


class ProxyResponse(NamedTuple):
    """Status, serialized body and content type of one proxy answer."""
    status: int
    body: str
    content_type: str = JSON_CONTENT_TYPE


def _json_response(data, status: int) -> ProxyResponse:
    return ProxyResponse(status, dump_json(data))


def _error(message: str, status: int) -> ProxyResponse:
    return _json_response({"error": message}, status)


def relay_request(method: str, body, base_url: str = UPSTREAM_BASE_URL) -> ProxyResponse:
    """Validate an inbound request and relay it to the upstream model API.

    Args:
        method: HTTP method of the inbound request
        body: Raw request body text (or None when absent)
        base_url: Upstream base, e.g. https://generativelanguage.googleapis.com/v1beta

    Returns:
        ProxyResponse. Only the 405 answer is plain text.
    """
    if method != "POST":
        return ProxyResponse(405, METHOD_NOT_ALLOWED, TEXT_CONTENT_TYPE)

    api_key = get_api_key()
    if not api_key:
        logger.error("GOOGLE_API_KEY is not set, refusing to relay")
        return _error(API_KEY_NOT_CONFIGURED, 500)

    try:
        # Malformed JSON raises here and ends up as a 500 below, not a 400
        data = parse_json(body)
        if data is None:
            raise TypeError("Cannot destructure request body: it is null")
        if not isinstance(data, dict):
            data = {}

        model_name = data.get("modelName")
        api_payload = data.get("apiPayload")

        if is_blank(model_name) or is_blank(api_payload):
            logger.warning("Rejected request: missing modelName or apiPayload")
            return _error(MISSING_FIELDS, 400)

        action = resolve_action(model_name)
        if action is None:
            logger.warning(f"Rejected request: unsupported model {model_name!r}")
            return _error(UNSUPPORTED_MODEL, 400)

        endpoint = build_endpoint(model_name, action, api_key, base_url)

        response = requests.post(
            endpoint,
            headers={"Content-Type": JSON_CONTENT_TYPE},
            data=dump_json(api_payload).encode("utf-8"),
        )
        result = parse_json(response.content)

        logger.info(f"Relayed {model_name}:{action} -> upstream {response.status_code}")
        return _json_response(result, response.status_code)

    except Exception as e:
        message = redact_secret(str(e), api_key)
        logger.error(f"Proxy Error: {type(e).__name__}: {message}")
        return _json_response({"error": INTERNAL_ERROR, "details": message}, 500)


class APIHandler:
    """Handles the proxy and health endpoints."""

    def __init__(self, send_response_func, upstream_base_url: str = UPSTREAM_BASE_URL):
        """Initialize with a send_response(status, body, content_type) function."""
        self.send_response = send_response_func
        self.upstream_base_url = upstream_base_url

    def handle_proxy(self, method: str, body):
        """POST /api/proxy - Relay a model call with the server-side API key.

        Request: {"modelName": "gemini-pro", "apiPayload": {"contents": [...]}}
        Response: upstream status and JSON body, unchanged
        """
        status, text, content_type = relay_request(method, body, self.upstream_base_url)
        self.send_response(status, text, content_type)

    def handle_health(self):
        """GET /api/health - Report whether the proxy is able to relay.

        Response: {"status": "ok", "api_key_configured": true, "upstream": "...", "models": [...]}
        """
        response = _json_response({
            "status": "ok",
            "api_key_configured": bool(get_api_key()),
            "upstream": self.upstream_base_url,
            "models": [f"{prefix}*:{action}" for prefix, action in MODEL_ROUTES],
        }, 200)
        self.send_response(*response)
