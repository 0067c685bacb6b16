"""
Ollama chat model implementation.
Connects to an Ollama server for model inference.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List

import ollama

from .base import BaseChatModel, ChatMessage, ModelResponse


logger = logging.getLogger(__name__)


class OllamaChatModel(BaseChatModel):
    """Chat model served by an Ollama instance."""

    def __init__(self, endpoint: str, model: str, timeout_seconds: float = 60):
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self._model = model
        self.client = ollama.AsyncClient(host=endpoint)

    @property
    def model_name(self) -> str:
        return self._model

    async def get_available_models(self) -> List[str]:
        """Get list of available Ollama models."""
        try:
            models = await self.client.list()
            return [model.get('name', model.get('model', 'unknown')) for model in models.get('models', [])]
        except Exception as e:
            logger.error(f"Failed to get available models: {e}")
            return []

    async def generate_content(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.0,
        max_tokens: int = 256,
        json_mode: bool = False,
    ) -> ModelResponse:
        """Send the conversation to /api/chat and return the reply."""
        start_time = datetime.now()

        chat_kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": m.role.value, "content": m.content} for m in messages],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        # JSON mode only for slot filling; analysis is free text
        if json_mode:
            chat_kwargs["format"] = "json"

        response = await asyncio.wait_for(
            self.client.chat(**chat_kwargs),
            timeout=self.timeout_seconds
        )

        message = response.get('message') or {}
        content = (message.get('content') or '').strip()

        end_time = datetime.now()
        response_time = int((end_time - start_time).total_seconds() * 1000)
        logger.debug(f"Ollama {self._model} replied in {response_time}ms, {len(content)} chars")

        return ModelResponse(
            model_name=self._model,
            choices=[content] if content else [],
            response_time_ms=response_time,
        )
