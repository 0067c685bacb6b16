"""
Amazon Bedrock chat model implementation.
Connects to AWS Bedrock for Claude model inference.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List

import boto3

from .base import BaseChatModel, ChatMessage, ChatRole, ModelResponse


logger = logging.getLogger(__name__)

DEFAULT_BEDROCK_MODEL = 'anthropic.claude-3-haiku-20240307-v1:0'


class BedrockChatModel(BaseChatModel):
    """Chat model served by Amazon Bedrock (Anthropic messages API)."""

    def __init__(self, model: str = DEFAULT_BEDROCK_MODEL, region: str = 'us-east-1', timeout_seconds: float = 60):
        self.region = region
        self.timeout_seconds = timeout_seconds
        self._model = model or DEFAULT_BEDROCK_MODEL
        self.client = boto3.client('bedrock-runtime', region_name=self.region)

    @property
    def model_name(self) -> str:
        return self._model

    async def get_available_models(self) -> List[str]:
        """Get list of available Bedrock Claude models."""
        try:
            bedrock_client = boto3.client('bedrock', region_name=self.region)
            response = await asyncio.to_thread(bedrock_client.list_foundation_models)
            models = response.get('modelSummaries', [])
            return [m['modelId'] for m in models if 'claude' in m['modelId'].lower()]
        except Exception as e:
            logger.error(f"Failed to get available Bedrock models: {e}")
            return [self._model]

    def _build_body(self, messages: List[ChatMessage], temperature: float, max_tokens: int) -> Dict[str, Any]:
        """Split system messages out; Bedrock takes them as a separate field."""
        system_parts = [m.content for m in messages if m.role == ChatRole.SYSTEM]
        body: Dict[str, Any] = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [
                {"role": m.role.value, "content": m.content}
                for m in messages if m.role != ChatRole.SYSTEM
            ],
        }
        if system_parts:
            body["system"] = "\n\n".join(system_parts)
        return body

    async def generate_content(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.0,
        max_tokens: int = 256,
        json_mode: bool = False,
    ) -> ModelResponse:
        """
        Invoke the model and return the concatenated text blocks.

        Bedrock has no JSON mode; the system prompt carries the format contract
        and the caller's strict decoding rejects anything else.
        """
        start_time = datetime.now()
        body = self._build_body(messages, temperature, max_tokens)

        response = await asyncio.wait_for(
            asyncio.to_thread(
                self.client.invoke_model,
                modelId=self._model,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(body),
            ),
            timeout=self.timeout_seconds,
        )

        response_body = json.loads(response['body'].read())
        text = "".join(
            block.get('text', '')
            for block in response_body.get('content', [])
            if block.get('type') == 'text'
        ).strip()

        end_time = datetime.now()
        response_time = int((end_time - start_time).total_seconds() * 1000)
        logger.debug(f"Bedrock {self._model} replied in {response_time}ms, {len(text)} chars")

        return ModelResponse(
            model_name=self._model,
            choices=[text] if text else [],
            response_time_ms=response_time,
        )
