"""
Runs extracted SearchParams against the trace query backend.

The callers in this package only need two operations (search and list
services), so they depend on BaseToolCaller rather than on the HTTP client.
Results use the same field names as the search_traces tool output.
"""

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

from .errors import ValidationError
from .params import SearchParams
from .pruner import iter_spans, normalize_id, service_name, span_times, status_name
from .query_client import JaegerQueryClient


logger = logging.getLogger(__name__)

# Window searched when the caller gives no start time bounds
DEFAULT_SEARCH_TIME_RANGE = timedelta(hours=1)


@dataclass
class TraceSearchResult:
    """Lightweight summary of one trace."""
    trace_id: str = ''
    root_service: str = ''
    root_span_name: str = ''
    start_time: str = ''
    duration_us: int = 0
    span_count: int = 0
    service_count: int = 0
    has_errors: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BaseToolCaller(ABC):
    """Trace query operations needed by the natural language pipeline."""

    @abstractmethod
    async def search_traces(self, params: SearchParams) -> List[TraceSearchResult]:
        pass

    @abstractmethod
    async def get_services(self) -> List[str]:
        pass


class QueryServiceToolCaller(BaseToolCaller):
    """BaseToolCaller backed by a JaegerQueryClient."""

    def __init__(self, client: JaegerQueryClient):
        self.client = client

    async def search_traces(self, params: SearchParams) -> List[TraceSearchResult]:
        """
        Search the last hour of traces matching params.

        Raises:
            ValidationError: if params hold a malformed duration
            QueryServiceError: if the backend call fails
        """
        try:
            query_params = params.to_query_params()
        except ValidationError as e:
            raise ValidationError(f"invalid search params: {e}") from e

        now = datetime.now(timezone.utc)
        resource_spans = await self.client.find_traces(
            query_params,
            start_time_min=now - DEFAULT_SEARCH_TIME_RANGE,
            start_time_max=now,
        )

        results = [build_trace_search_result(spans) for spans in group_by_trace(resource_spans).values()]
        logger.info(f"Trace search returned {len(results)} trace(s) for {params.to_dict()}")
        return results

    async def get_services(self) -> List[str]:
        return await self.client.get_services()


def group_by_trace(resource_spans: List[Dict[str, Any]]) -> 'OrderedDict[str, List[Tuple[Dict, Dict]]]':
    """Group (span, resource) pairs by trace id, keeping first-seen order."""
    traces: 'OrderedDict[str, List[Tuple[Dict, Dict]]]' = OrderedDict()
    for span, resource in iter_spans(resource_spans):
        traces.setdefault(normalize_id(span.get('traceId')), []).append((span, resource))
    return traces


def build_trace_search_result(spans: List[Tuple[Dict[str, Any], Dict[str, Any]]]) -> TraceSearchResult:
    result = TraceSearchResult()
    services = set()
    min_start = None
    max_end = None

    for span, resource in spans:
        result.span_count += 1
        result.trace_id = normalize_id(span.get('traceId'))

        service = service_name(resource)
        services.add(service)

        if not normalize_id(span.get('parentSpanId')):
            result.root_service = service
            result.root_span_name = span.get('name', '')

        start_ns, end_ns = span_times(span)
        if min_start is None or start_ns < min_start:
            min_start = start_ns
        if max_end is None or end_ns > max_end:
            max_end = end_ns

        if status_name((span.get('status') or {}).get('code')) == 'ERROR':
            result.has_errors = True

    result.service_count = len(services)
    if min_start:
        start = datetime.fromtimestamp(min_start // 1_000_000_000, tz=timezone.utc)
        start = start.replace(microsecond=(min_start // 1_000) % 1_000_000)
        result.start_time = start.isoformat().replace('+00:00', 'Z')
        result.duration_us = (max_end - min_start) // 1_000
    return result
