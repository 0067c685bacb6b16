"""
Factory for creating chat model instances based on configuration.
"""

import logging
from typing import TYPE_CHECKING

from ..errors import ConfigurationError
from .base import BaseChatModel
from .bedrock import BedrockChatModel
from .ollama import OllamaChatModel

if TYPE_CHECKING:
    from ..config import NLQueryConfig


logger = logging.getLogger(__name__)


def create_model(config: 'NLQueryConfig') -> BaseChatModel:
    """
    Create the chat model selected by config.provider.

    - 'ollama': an Ollama server at config.endpoint
    - 'bedrock': AWS Bedrock in config.bedrock_region

    Raises:
        ConfigurationError: for an unknown provider or a client that cannot be built
    """
    provider_type = config.provider.lower()

    try:
        if provider_type == 'ollama':
            logger.info(f"Creating Ollama model {config.model} at {config.endpoint}")
            return OllamaChatModel(
                endpoint=config.endpoint,
                model=config.model,
                timeout_seconds=config.timeout_seconds,
            )
        if provider_type == 'bedrock':
            logger.info(f"Creating Bedrock model {config.model} in {config.bedrock_region}")
            return BedrockChatModel(
                model=config.model,
                region=config.bedrock_region,
                timeout_seconds=config.timeout_seconds,
            )
    except Exception as e:
        raise ConfigurationError(f"failed to create {provider_type} model: {e}") from e

    raise ConfigurationError(f"unsupported nlquery provider: {config.provider!r} (supported: ollama, bedrock)")
