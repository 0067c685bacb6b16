"""
HTTP client for the Jaeger query API (v3, OTLP/JSON).

Only the calls the analysis and search endpoints need are exposed: fetch a
trace by id, find traces by parameters and list services.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx

from .errors import QueryServiceError
from .params import TraceQueryParams


logger = logging.getLogger(__name__)


def format_go_duration(value: timedelta) -> str:
    """Render a timedelta in the duration syntax the query API accepts."""
    return f"{int(value / timedelta(microseconds=1))}us"


def format_rfc3339(value: datetime) -> str:
    return value.isoformat().replace('+00:00', 'Z')


class JaegerQueryClient:
    """
    Async client for a Jaeger query service.

    Args:
        base_url: Root URL of the query service, e.g. http://localhost:16686
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_trace(self, trace_id: str) -> List[Dict[str, Any]]:
        """
        Fetch one trace. Returns its resourceSpans list, empty if unknown.

        Raises:
            QueryServiceError: if the service is unreachable or errors
        """
        data = await self._get(f"/api/v3/traces/{trace_id}", allow_not_found=True)
        return _resource_spans(data)

    async def find_traces(
        self,
        params: TraceQueryParams,
        start_time_min: datetime,
        start_time_max: datetime,
    ) -> List[Dict[str, Any]]:
        """Search traces. Returns the combined resourceSpans of every match."""
        query: Dict[str, Any] = {
            'query.start_time_min': format_rfc3339(start_time_min),
            'query.start_time_max': format_rfc3339(start_time_max),
        }
        if params.service_name:
            query['query.service_name'] = params.service_name
        if params.operation_name:
            query['query.operation_name'] = params.operation_name
        if params.attributes:
            query['query.attributes'] = json.dumps(params.attributes)
        if params.duration_min is not None:
            query['query.duration_min'] = format_go_duration(params.duration_min)
        if params.duration_max is not None:
            query['query.duration_max'] = format_go_duration(params.duration_max)
        if params.search_depth > 0:
            query['query.search_depth'] = params.search_depth

        data = await self._get("/api/v3/traces", params=query, allow_not_found=True)
        return _resource_spans(data)

    async def get_services(self) -> List[str]:
        data = await self._get("/api/v3/services")
        return list((data or {}).get('services') or [])

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Optional[Dict[str, Any]]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            logger.warning(f"Query service timed out on {path}")
            raise QueryServiceError(f"query service timed out: {path}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Query service request failed on {path}: {e}")
            raise QueryServiceError(f"query service unavailable: {e}") from e

        if response.status_code == 404 and allow_not_found:
            return None
        if response.status_code != 200:
            raise QueryServiceError(f"query service returned HTTP {response.status_code} for {path}")

        try:
            return response.json()
        except ValueError as e:
            raise QueryServiceError(f"query service returned invalid JSON for {path}") from e


def _resource_spans(data: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not data:
        return []
    result = data.get('result', data)
    return list(result.get('resourceSpans') or [])
