"""Model-name routing for upstream generative-language endpoints."""

from typing import Optional

# Checked in order; prefix match is case-sensitive.
# Imagen models use :predict, Gemini models use :generateContent.
MODEL_ROUTES = (
    ("imagen", "predict"),
    ("gemini", "generateContent"),
)


def resolve_action(model_name: str) -> Optional[str]:
    """Return the endpoint action for a model name, or None if unsupported."""
    for prefix, action in MODEL_ROUTES:
        if model_name.startswith(prefix):
            return action
    return None


def build_endpoint(model_name: str, action: str, api_key: str, base_url: str) -> str:
    """Build the upstream URL, e.g. <base>/models/gemini-pro:generateContent?key=..."""
    return f"{base_url}/models/{model_name}:{action}?key={api_key}"
