"""
Tests for the rule-based extractor.
"""

from django.test import SimpleTestCase

from nlquery.heuristic import (
    HeuristicExtractor,
    extract_params,
    extract_http_status_code,
    normalize_duration_unit,
)
from nlquery.params import SearchParams


class HeuristicExtractorTests(SimpleTestCase):
    """Each case lists the fields expected to be non-empty."""

    CASES = [
        (
            "Show me 500 errors from payment-service taking more than 2 seconds",
            {"service": "payment-service", "tags": {"http.status_code": "500"}, "minDuration": "2s"},
        ),
        (
            "Show me 500 errors from payment-service taking over 2s",
            {"service": "payment-service", "tags": {"http.status_code": "500"}, "minDuration": "2s"},
        ),
        ("show traces from order-service", {"service": "order-service"}),
        ("find errors in payment-service", {"service": "payment-service"}),
        ("traces from redis", {"service": "redis"}),
        ("show 404 errors", {"tags": {"http.status_code": "404"}}),
        ("traces with status code 502", {"tags": {"http.status_code": "502"}}),
        ("HTTP status 503", {"tags": {"http.status_code": "503"}}),
        ("requests more than 500ms", {"minDuration": "500ms"}),
        ("traces slower than 3s", {"minDuration": "3s"}),
        ("calls at least 2 seconds", {"minDuration": "2s"}),
        ("traces less than 100ms", {"maxDuration": "100ms"}),
        ("requests faster than 50ms", {"maxDuration": "50ms"}),
        ("spans under 200ms", {"maxDuration": "200ms"}),
        ("requests within 1 minute", {"maxDuration": "1m"}),
        ("traces > 500ms", {"minDuration": "500ms"}),
        ("traces < 10ms", {"maxDuration": "10ms"}),
        ("calls at most 5s", {"maxDuration": "5s"}),
        ("jobs longer than 1 hour", {"minDuration": "1h"}),
        ("jobs shorter than 2 hours", {"maxDuration": "2h"}),
        ("spans slower than 250us", {"minDuration": "250us"}),
        ("spans under 900ns", {"maxDuration": "900ns"}),
        ("requests more than 2S", {"minDuration": "2S"}),
        ("show traces for GET /api/users", {"operation": "GET /api/users"}),
        ("find POST /checkout requests", {"operation": "POST /checkout"}),
        (
            "find 500 errors from frontend-service for GET /api/checkout slower than 1s",
            {
                "service": "frontend-service",
                "operation": "GET /api/checkout",
                "tags": {"http.status_code": "500"},
                "minDuration": "1s",
            },
        ),
        ("", {}),
        ("hello world", {}),
    ]

    async def test_extract(self):
        extractor = HeuristicExtractor()
        for query, expected in self.CASES:
            with self.subTest(query=query):
                params = await extractor.extract(query)
                self.assertEqual(params.to_dict(), expected)

    async def test_canonical_query(self):
        params = await HeuristicExtractor().extract("Show me 500 errors from payment-service taking over 2s")
        self.assertEqual(params, SearchParams(
            service="payment-service",
            tags={"http.status_code": "500"},
            min_duration="2s",
        ))
        self.assertEqual(params.operation, "")
        self.assertEqual(params.max_duration, "")
        self.assertEqual(params.search_depth, 0)

    async def test_deterministic(self):
        extractor = HeuristicExtractor()
        query = "show 500 errors from payment-service slower than 2s"
        first = await extractor.extract(query)
        for _ in range(10):
            self.assertEqual(await extractor.extract(query), first)

    def test_lowercase_method_is_not_an_operation(self):
        self.assertEqual(extract_params("get /api/users from frontend").operation, "")

    def test_no_status_code_without_keyword(self):
        self.assertIsNone(extract_http_status_code("trace 123 from frontend"))

    def test_http_prefix_status(self):
        self.assertEqual(extract_http_status_code("HTTP 503 from gateway"), "503")

    def test_normalize_duration_unit(self):
        self.assertEqual(normalize_duration_unit("seconds"), "s")
        self.assertEqual(normalize_duration_unit("Milliseconds"), "ms")
        self.assertEqual(normalize_duration_unit("hour"), "h")
        self.assertEqual(normalize_duration_unit("ms"), "ms")
        self.assertEqual(normalize_duration_unit("us"), "us")
        self.assertEqual(normalize_duration_unit("ns"), "ns")
        self.assertEqual(normalize_duration_unit("S"), "S")
        self.assertEqual(normalize_duration_unit("HOURS"), "h")
