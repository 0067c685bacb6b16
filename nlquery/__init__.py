"""
Natural language trace search and model-backed trace analysis.

Turns free text such as "500 errors from payment-service slower than 2s" into
structured trace search parameters, and explains traces and spans with a chat
model inside short-lived conversation sessions.
"""

from .analyzer import Analyzer
from .components import Components, build_components
from .config import NLQueryConfig
from .errors import (
    ConfigurationError,
    NLQueryError,
    NotFoundError,
    ParseError,
    ProviderError,
    QueryServiceError,
    ValidationError,
)
from .extractor import BaseExtractor, StubExtractor, create_extractor
from .heuristic import HeuristicExtractor
from .llm_extractor import LLMExtractor
from .params import SearchParams, TraceQueryParams
from .sessions import MessageRole, SessionManager


__all__ = [
    'Analyzer',
    'BaseExtractor',
    'Components',
    'ConfigurationError',
    'HeuristicExtractor',
    'LLMExtractor',
    'MessageRole',
    'NLQueryConfig',
    'NLQueryError',
    'NotFoundError',
    'ParseError',
    'ProviderError',
    'QueryServiceError',
    'SearchParams',
    'SessionManager',
    'StubExtractor',
    'TraceQueryParams',
    'ValidationError',
    'build_components',
    'create_extractor',
]
