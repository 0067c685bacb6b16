"""
Rule-based extraction of trace search parameters.

Each SearchParams field is filled by its own precompiled pattern; fields with
no match stay empty. No model, no randomness, no I/O: the same query always
produces the same params.

Recognised phrasing:
- Service:    "from <service>", "in <name>-service"
- Status:     "500 errors", "status 404", "status code 502", "HTTP 503"
- Min latency: "more than 2s", "slower than 500ms", "taking over 1s",
               "at least 2 seconds", "> 500ms"
- Max latency: "less than 3s", "faster than 100ms", "under 200ms",
               "within 1s", "at most 5s", "< 500ms"
- Operation:  "GET /api/users", "POST /checkout"
"""

import re
from typing import Dict, Optional, Pattern

from .extractor import BaseExtractor
from .params import SearchParams


# Service names are typically lowercase with hyphens, e.g. "payment-service"
SERVICE_FROM_PATTERN = re.compile(r'\bfrom\s+([a-z][a-z0-9_-]*(?:-service)?)\b', re.IGNORECASE)
SERVICE_IN_PATTERN = re.compile(r'\bin\s+([a-z][a-z0-9_-]*-service)\b', re.IGNORECASE)

HTTP_STATUS_PATTERN = re.compile(
    r'\b(?:(?:http\s+)?status(?:\s+code)?\s+(\d{3})|http\s+(\d{3})|(\d{3})\s+errors?)\b',
    re.IGNORECASE,
)

_DURATION_VALUE = r'\s*(\d+(?:\.\d+)?)\s*(milliseconds?|seconds?|minutes?|hours?|ms|us|ns|s|m|h)\b'

MIN_DURATION_PATTERN = re.compile(
    r'(?:\b(?:more|slower|longer|over)\s+than|\btaking\s+over|\bat\s+least|>)' + _DURATION_VALUE,
    re.IGNORECASE,
)

MAX_DURATION_PATTERN = re.compile(
    r'(?:\b(?:less|faster|shorter)\s+than|\bunder|\bwithin|\bat\s+most|<)' + _DURATION_VALUE,
    re.IGNORECASE,
)

# HTTP methods are matched case-sensitively so "get" in prose is ignored
OPERATION_PATTERN = re.compile(r'\b(GET|POST|PUT|DELETE|PATCH|HEAD|OPTIONS)\s+(/[/a-zA-Z0-9_{}.*-]+)')

UNIT_ALIASES = {
    'millisecond': 'ms',
    'milliseconds': 'ms',
    'second': 's',
    'seconds': 's',
    'minute': 'm',
    'minutes': 'm',
    'hour': 'h',
    'hours': 'h',
}


class HeuristicExtractor(BaseExtractor):
    """Deterministic regex and keyword extractor."""

    async def extract(self, query: str) -> SearchParams:
        return extract_params(query)


def extract_params(query: str) -> SearchParams:
    """Synchronous core of HeuristicExtractor.extract."""
    return SearchParams(
        service=extract_service(query),
        operation=extract_operation(query),
        tags=extract_tags(query),
        min_duration=extract_duration(query, MIN_DURATION_PATTERN),
        max_duration=extract_duration(query, MAX_DURATION_PATTERN),
    )


def extract_service(query: str) -> str:
    """Find a service name, preferring the explicit "from <service>" form."""
    match = SERVICE_FROM_PATTERN.search(query)
    if match:
        return match.group(1)
    match = SERVICE_IN_PATTERN.search(query)
    if match:
        return match.group(1)
    return ''


def extract_operation(query: str) -> str:
    match = OPERATION_PATTERN.search(query)
    if match:
        return f"{match.group(1)} {match.group(2)}"
    return ''


def extract_tags(query: str) -> Dict[str, str]:
    tags = {}
    code = extract_http_status_code(query)
    if code:
        tags['http.status_code'] = code
    return tags


def extract_http_status_code(query: str) -> Optional[str]:
    match = HTTP_STATUS_PATTERN.search(query)
    if not match:
        return None
    return next(group for group in match.groups() if group)


def extract_duration(query: str, pattern: Pattern[str]) -> str:
    match = pattern.search(query)
    if not match:
        return ''
    return match.group(1) + normalize_duration_unit(match.group(2))


def normalize_duration_unit(unit: str) -> str:
    """Map spelled-out units to duration suffixes; short units pass through."""
    return UNIT_ALIASES.get(unit.lower(), unit)
