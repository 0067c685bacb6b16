"""
Extraction of trace search parameters from natural language.

An extractor turns free text into a SearchParams value and nothing else: it
never runs a search and never decides what to do with the result.
Implementations:
    StubExtractor       - returns empty params (wiring checks)
    HeuristicExtractor  - deterministic regex rules, no model
    LLMExtractor        - model-backed slot filling with strict decoding
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from .errors import ConfigurationError
from .params import SearchParams

if TYPE_CHECKING:
    from .config import NLQueryConfig
    from .llm_providers import BaseChatModel


class BaseExtractor(ABC):
    """Converts a natural language query into SearchParams."""

    @abstractmethod
    async def extract(self, query: str) -> SearchParams:
        """
        Extract search parameters from the query.

        Raises:
            NLQueryError subclass on failure; never returns a partial result
            in place of an error.
        """
        pass


class StubExtractor(BaseExtractor):
    """Returns empty SearchParams regardless of input."""

    async def extract(self, query: str) -> SearchParams:
        return SearchParams()


def create_extractor(
    kind: str,
    model: Optional['BaseChatModel'] = None,
    config: Optional['NLQueryConfig'] = None,
) -> BaseExtractor:
    """
    Build an extractor by name: 'stub', 'heuristic' or 'llm'.

    Raises:
        ConfigurationError: for an unknown kind, or 'llm' without a model
    """
    from .heuristic import HeuristicExtractor
    from .llm_extractor import LLMExtractor

    kind = kind.lower()
    if kind == 'stub':
        return StubExtractor()
    if kind == 'heuristic':
        return HeuristicExtractor()
    if kind == 'llm':
        if model is None:
            raise ConfigurationError("llm extractor requires a model")
        if config is None:
            return LLMExtractor(model)
        return LLMExtractor(model, temperature=config.temperature, max_tokens=config.max_tokens)
    raise ConfigurationError(f"unknown extractor kind: {kind!r}")
