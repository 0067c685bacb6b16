"""
Model-backed extraction of trace search parameters.

The model is used only for slot filling: it must answer with a JSON object
and that object is decoded strictly into SearchParams. Unknown keys are
dropped by the decoder, so nothing the model invents reaches the query
engine. Output that is not a matching JSON object is an error, never an
empty result.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from .errors import ParseError, ProviderError
from .extractor import BaseExtractor
from .llm_providers import BaseChatModel, ChatMessage, ChatRole
from .params import SearchParams


logger = logging.getLogger(__name__)


EXTRACTION_SYSTEM_PROMPT = """You are a structured data extraction tool for a distributed tracing system (Jaeger).
Your ONLY job is to extract trace search parameters from natural language queries.

You MUST respond with ONLY a valid JSON object. No explanations, no markdown, no extra text.

The JSON object must use ONLY these fields (omit fields that cannot be determined from the input):
{
  "service": "service name string",
  "operation": "operation/span name string",
  "tags": {"key": "value"},
  "minDuration": "duration string like 2s, 500ms, 100us",
  "maxDuration": "duration string like 10s, 1m",
  "searchDepth": integer (number of results to return)
}

Rules:
- "service" is the name of a microservice (e.g., "payment-service", "frontend", "order-service")
- "operation" is an API endpoint or span name (e.g., "GET /api/users", "POST /checkout")
- "tags" maps attribute keys to string values (e.g., {"http.status_code": "500", "http.method": "GET"})
- Duration strings use the units "ns", "us", "ms", "s", "m", "h"
- HTTP status codes go in tags as {"http.status_code": "NNN"}
- If the user mentions "errors" or "failures" without a specific code, use {"error": "true"}
- If a field cannot be determined from the input, omit it entirely
- NEVER invent or guess values not present in the input"""


class LLMExtractor(BaseExtractor):
    """Extractor that asks a chat model for JSON and decodes it into SearchParams."""

    def __init__(self, model: BaseChatModel, temperature: float = 0.0, max_tokens: int = 256):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def extract(self, query: str) -> SearchParams:
        """
        Send the query to the model and decode its reply.

        Raises:
            ProviderError: the model call failed or returned no candidate
            ParseError: the reply is not a JSON object matching SearchParams
        """
        messages = [
            ChatMessage(ChatRole.SYSTEM, EXTRACTION_SYSTEM_PROMPT),
            ChatMessage(ChatRole.HUMAN, query),
        ]

        try:
            response = await self.model.generate_content(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except Exception as e:
            raise ProviderError(f"model generation failed: {e}") from e

        completion = response.content
        if completion is None:
            raise ProviderError("model returned empty response")

        logger.debug(f"Extraction raw response for {query!r}: {completion!r}")

        return decode_search_params(completion)


def decode_search_params(raw: str) -> SearchParams:
    """
    Decode model output into SearchParams.

    Only the declared fields survive; any other key is discarded here.

    Raises:
        ParseError: if raw is not a JSON object with correctly typed fields
    """
    try:
        # Public names only; the Python field names are not part of the output schema
        return SearchParams.model_validate_json(raw, by_alias=True, by_name=False)
    except PydanticValidationError as e:
        raise ParseError(
            f"invalid structured output: {e.error_count()} error(s), first: {e.errors()[0]['msg']} (raw: {raw!r})",
            raw=raw,
        ) from e
