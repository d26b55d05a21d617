# Study artifact utilities
from .exceptions import (
    StudyPlanError,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    UpstreamError,
    RateLimitError,
    PaymentRequiredError,
    ParseError,
    PersistenceError
)

from .model_config import (
    ModelConfig,
    ModelProvider,
    MODEL_CONFIGS,
    DEFAULT_MODEL
)

__all__ = [
    'StudyPlanError',
    'ConfigurationError',
    'ValidationError',
    'NotFoundError',
    'UpstreamError',
    'RateLimitError',
    'PaymentRequiredError',
    'ParseError',
    'PersistenceError',
    'ModelConfig',
    'ModelProvider',
    'MODEL_CONFIGS',
    'DEFAULT_MODEL'
]
