"""
Chat model abstraction layer.

Supports multiple model backends (Ollama, Bedrock) with a common interface.
"""

from .base import BaseChatModel, ChatMessage, ChatRole, ModelResponse
from .factory import create_model
from .ollama import OllamaChatModel
from .bedrock import BedrockChatModel


__all__ = [
    'BaseChatModel',
    'ChatMessage',
    'ChatRole',
    'ModelResponse',
    'create_model',
    'OllamaChatModel',
    'BedrockChatModel',
]
