"""
Gemini generateContent client (REST, batch mode).
"""

import logging
from typing import Any, Dict, Optional

import httpx

from utils.config import GEMINI_API_BASE, require_env, get_generation_timeout
from utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def _extract_text(payload: Dict[str, Any]) -> Optional[str]:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return None
    texts = [part.get("text", "") for part in parts if isinstance(part, dict)]
    return "".join(texts)


def generate_content(
    prompt: str,
    model_config: Dict[str, Any],
    http_client: Optional[httpx.Client] = None
) -> str:
    """
    POST a single prompt to Gemini and return the generated text.
    Args:
        prompt: Full prompt text.
        model_config: Entry from MODEL_CONFIGS.
        http_client: Optional client, mainly for tests.
    Raises:
        UpstreamError on non-2xx, transport failure, or missing content.
    """
    api_key = require_env("GEMINI_API_KEY")
    url = f"{GEMINI_API_BASE}/models/{model_config['model']}:generateContent"
    body = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": model_config.get("temperature", 0.7),
            "maxOutputTokens": model_config.get("max_tokens", 8192),
        },
    }

    client = http_client or httpx.Client(timeout=get_generation_timeout())
    try:
        response = client.post(url, params={"key": api_key}, json=body)
    except httpx.HTTPError as e:
        logger.error(f"Gemini request failed: {e}")
        raise UpstreamError(f"Gemini request failed: {e}") from e
    finally:
        if http_client is None:
            client.close()

    if not response.is_success:
        logger.error(f"Gemini API error: {response.status_code} {response.text[:500]}")
        raise UpstreamError(
            f"Gemini API returned {response.status_code}",
            upstream_status=response.status_code,
            upstream_body=response.text,
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise UpstreamError(
            "Gemini returned a non-JSON body",
            upstream_status=response.status_code,
            upstream_body=response.text,
        ) from e

    text = _extract_text(payload)
    if not text or not text.strip():
        raise UpstreamError(
            "Gemini response contained no candidate text",
            upstream_status=response.status_code,
            upstream_body=response.text,
        )
    return text
