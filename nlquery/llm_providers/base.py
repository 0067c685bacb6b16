"""
Abstract base class for chat models.
Defines the interface that all model providers (Ollama, Bedrock, etc.) must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ChatRole(str, Enum):
    """Role of a message as the model sees it."""
    SYSTEM = "system"
    HUMAN = "user"
    AI = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """One message sent to the model."""
    role: ChatRole
    content: str


@dataclass
class ModelResponse:
    """Response from a chat model."""
    model_name: str
    choices: List[str] = field(default_factory=list)
    response_time_ms: int = 0

    @property
    def content(self) -> Optional[str]:
        """Text of the first generated candidate, or None when there is none."""
        return self.choices[0] if self.choices else None


class BaseChatModel(ABC):
    """Abstract base class for chat model providers."""

    @abstractmethod
    async def generate_content(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.0,
        max_tokens: int = 256,
        json_mode: bool = False,
    ) -> ModelResponse:
        """
        Generate a completion for an ordered list of messages.

        Args:
            messages: Conversation to send, in order
            temperature: Sampling temperature (0.0 for reproducible output)
            max_tokens: Maximum number of tokens to generate
            json_mode: Ask the provider to constrain output to a JSON object

        Returns:
            ModelResponse whose choices are empty if the model produced nothing

        Raises:
            Provider-specific exceptions, or asyncio.TimeoutError when the
            configured timeout elapses. Callers wrap these.
        """
        pass

    @abstractmethod
    async def get_available_models(self) -> List[str]:
        """
        Get list of available models from this provider.

        Returns:
            List of model names/identifiers
        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model this provider talks to."""
        pass
