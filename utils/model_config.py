"""
Model configuration for study artifact generation.
Each artifact kind resolves to a model key; each model key names its provider.
"""

import os
from typing import Dict, Any, Optional
from enum import Enum


class ModelProvider(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"


# Model configurations
MODEL_CONFIGS: Dict[str, Dict[str, Any]] = {
    "gpt-4o-mini": {
        "provider": ModelProvider.OPENAI,
        "model": "gpt-4o-mini",
        "max_tokens": 2000,
        "temperature": 0.7
    },
    "gpt-4o": {
        "provider": ModelProvider.OPENAI,
        "model": "gpt-4o",
        "max_tokens": 4000,
        "temperature": 0.7
    },
    "gemini-2.0-flash": {
        "provider": ModelProvider.GEMINI,
        "model": "gemini-2.0-flash",
        "max_tokens": 8192,
        "temperature": 0.7
    },
    "gemini-2.0-flash-exp": {
        "provider": ModelProvider.GEMINI,
        "model": "gemini-2.0-flash-exp",
        "max_tokens": 8192,
        "temperature": 0.7
    }
}

# Artifact kind -> (env override, default model key)
ARTIFACT_MODELS: Dict[str, tuple] = {
    "flashcards": ("FLASHCARD_MODEL", "gpt-4o-mini"),
    "quiz": ("QUIZ_MODEL", "gemini-2.0-flash"),
    "summary": ("SUMMARY_MODEL", "gemini-2.0-flash"),
}

DEFAULT_MODEL = "gpt-4o-mini"


class ModelConfig:
    """Model configuration manager"""

    @staticmethod
    def get_config(model_key: Optional[str] = None) -> Dict[str, Any]:
        """Get configuration for specified model or default"""
        key = model_key or DEFAULT_MODEL

        if key not in MODEL_CONFIGS:
            raise ValueError(f"Unknown model: {key}. Available: {list(MODEL_CONFIGS.keys())}")

        return MODEL_CONFIGS[key]

    @staticmethod
    def get_available_models() -> list:
        """List all available models"""
        return list(MODEL_CONFIGS.keys())

    @staticmethod
    def model_key_for(kind: str) -> str:
        """Model key used for an artifact kind, honouring the env override."""
        env_name, default_key = ARTIFACT_MODELS.get(kind, (None, DEFAULT_MODEL))
        if env_name:
            return os.getenv(env_name) or default_key
        return default_key
