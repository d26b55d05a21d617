import logging
import time
from typing import Optional

from clients import gemini_client, openai_client
from prompts.study_prompts import GenerationPrompt
from utils.exceptions import ConfigurationError, ValidationError
from utils.model_config import ModelConfig, ModelProvider

logger = logging.getLogger(__name__)


def generate_text(prompt: GenerationPrompt, model_key: Optional[str] = None) -> str:
    """
    Send a prompt to the model configured for its artifact kind and return raw text.

    Raises:
        UpstreamError from the provider client; ValidationError for an unknown
        requested model; ConfigurationError for an unknown configured model.
    """
    key = model_key or ModelConfig.model_key_for(prompt.kind)
    try:
        model_config = ModelConfig.get_config(key)
    except ValueError as e:
        if model_key:
            raise ValidationError(str(e), error_code="INVALID_MODEL") from e
        raise ConfigurationError(
            f"Configured model for {prompt.kind} is unknown: {e}",
            context={"kind": prompt.kind, "model": key},
        ) from e

    provider = model_config["provider"]
    start_time = time.time()
    logger.info(f"Generating {prompt.kind} with {key} ({provider.value}), content {len(prompt.content)} chars")

    if provider == ModelProvider.OPENAI:
        text = openai_client.generate_completion(prompt.as_messages(), model_config)
    elif provider == ModelProvider.GEMINI:
        text = gemini_client.generate_content(prompt.as_text(), model_config)
    else:
        raise ValidationError(f"Unknown provider: {provider}", error_code="INVALID_MODEL")

    logger.info(f"{key} returned {len(text)} characters in {time.time() - start_time:.2f}s")
    return text
