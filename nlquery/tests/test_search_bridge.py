"""
Tests for running extracted params against the query backend.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from django.test import SimpleTestCase

from nlquery.errors import ValidationError
from nlquery.params import SearchParams
from nlquery.query_client import JaegerQueryClient
from nlquery.search_bridge import (
    DEFAULT_SEARCH_TIME_RANGE,
    QueryServiceToolCaller,
    TraceSearchResult,
    build_trace_search_result,
    group_by_trace,
)

from .otlp_fixtures import ROOT_SPAN_ID, TRACE_ID, checkout_trace, resource_spans, span


OTHER_TRACE_ID = "0af7651916cd43dd8448eb211c80319c"


def make_client(resource_spans_result=None):
    client = MagicMock(spec=JaegerQueryClient)
    client.find_traces = AsyncMock(return_value=resource_spans_result or [])
    client.get_services = AsyncMock(return_value=["frontend", "payment-service"])
    return client


class SearchTracesTests(SimpleTestCase):

    async def test_summarizes_each_trace(self):
        other = resource_spans("inventory", [span("a1b2c3d4e5f60718", "reserve", 0, 20, trace_id=OTHER_TRACE_ID)])
        client = make_client(checkout_trace() + [other])

        results = await QueryServiceToolCaller(client).search_traces(SearchParams(service="frontend"))

        self.assertEqual(len(results), 2)
        self.assertEqual(results[0], TraceSearchResult(
            trace_id=TRACE_ID,
            root_service="frontend",
            root_span_name="GET /checkout",
            start_time="2024-01-01T00:00:00Z",
            duration_us=1_500_000,
            span_count=2,
            service_count=2,
            has_errors=True,
        ))
        self.assertEqual(results[1].trace_id, OTHER_TRACE_ID)
        self.assertFalse(results[1].has_errors)
        self.assertEqual(results[1].duration_us, 20_000)

    async def test_passes_converted_params_and_default_window(self):
        client = make_client()
        params = SearchParams(service="frontend", min_duration="2s", tags={"error": "true"})

        results = await QueryServiceToolCaller(client).search_traces(params)

        self.assertEqual(results, [])
        args, kwargs = client.find_traces.call_args
        query_params = args[0]
        self.assertEqual(query_params.service_name, "frontend")
        self.assertEqual(query_params.duration_min, timedelta(seconds=2))
        self.assertEqual(query_params.attributes, {"error": "true"})
        self.assertEqual(kwargs['start_time_max'] - kwargs['start_time_min'], DEFAULT_SEARCH_TIME_RANGE)

    async def test_invalid_duration_is_rejected_before_query(self):
        client = make_client()
        with self.assertRaises(ValidationError) as ctx:
            await QueryServiceToolCaller(client).search_traces(SearchParams(min_duration="soon"))

        self.assertIn("invalid search params", str(ctx.exception))
        client.find_traces.assert_not_called()

    async def test_get_services(self):
        client = make_client()
        self.assertEqual(await QueryServiceToolCaller(client).get_services(), ["frontend", "payment-service"])


class SummaryTests(SimpleTestCase):

    def test_group_by_trace(self):
        groups = group_by_trace(checkout_trace())
        self.assertEqual(list(groups), [TRACE_ID])
        self.assertEqual(len(groups[TRACE_ID]), 2)

    def test_single_span_summary(self):
        data = [resource_spans("frontend", [span(ROOT_SPAN_ID, "GET /", 0, 5)])]
        result = build_trace_search_result(group_by_trace(data)[TRACE_ID])

        self.assertEqual(result.to_dict(), {
            "trace_id": TRACE_ID,
            "root_service": "frontend",
            "root_span_name": "GET /",
            "start_time": "2024-01-01T00:00:00Z",
            "duration_us": 5_000,
            "span_count": 1,
            "service_count": 1,
            "has_errors": False,
        })
