import logging
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from utils.config import require_env, get_generation_timeout
from utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)

_openai_client: Optional[OpenAI] = None


def get_openai_client() -> OpenAI:
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAI(
            api_key=require_env("OPENAI_API_KEY"),
            timeout=get_generation_timeout(),
            max_retries=0,
        )
    return _openai_client


def generate_completion(
    messages: List[Dict[str, str]],
    model_config: Dict[str, Any],
) -> str:
    """
    Run one chat completion and return the assistant text.
    Args:
        messages: Chat messages (system + user).
        model_config: Entry from MODEL_CONFIGS.
    Returns:
        The generated text.
    Raises:
        UpstreamError on non-2xx, transport failure, or empty content.
    """
    client = get_openai_client()
    try:
        response = client.chat.completions.create(
            model=model_config["model"],
            messages=messages,
            max_tokens=model_config.get("max_tokens"),
            temperature=model_config.get("temperature", 0.7),
        )
    except openai.APIStatusError as e:
        body = e.response.text if e.response is not None else None
        logger.error(f"OpenAI API error: status={e.status_code} body={body}")
        raise UpstreamError(
            f"OpenAI API returned {e.status_code}",
            upstream_status=e.status_code,
            upstream_body=body,
        ) from e
    except openai.APIError as e:
        logger.error(f"OpenAI request failed: {e}")
        raise UpstreamError(f"OpenAI request failed: {e}") from e

    content = None
    if response.choices:
        content = response.choices[0].message.content
    if not content or not content.strip():
        raise UpstreamError("OpenAI response contained no content", upstream_status=200)
    return content
