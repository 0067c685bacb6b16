"""
Tests for SearchParams decoding, serialization and conversion.
"""

from datetime import timedelta

from django.test import SimpleTestCase

from nlquery.errors import ValidationError
from nlquery.params import SearchParams, TraceQueryParams, parse_duration


class ParseDurationTests(SimpleTestCase):

    def test_simple_units(self):
        self.assertEqual(parse_duration("2s"), timedelta(seconds=2))
        self.assertEqual(parse_duration("500ms"), timedelta(milliseconds=500))
        self.assertEqual(parse_duration("100us"), timedelta(microseconds=100))
        self.assertEqual(parse_duration("1m"), timedelta(minutes=1))
        self.assertEqual(parse_duration("2h"), timedelta(hours=2))

    def test_compound_and_fractional(self):
        self.assertEqual(parse_duration("1h30m"), timedelta(hours=1, minutes=30))
        self.assertEqual(parse_duration("1.5s"), timedelta(milliseconds=1500))

    def test_zero(self):
        self.assertEqual(parse_duration("0"), timedelta(0))

    def test_invalid(self):
        for value in ("", "abc", "2", "2 seconds", "s"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_duration(value)


class SearchParamsDecodeTests(SimpleTestCase):

    def test_decodes_public_field_names(self):
        params = SearchParams.model_validate_json(
            '{"service": "frontend", "operation": "GET /api", "tags": {"error": "true"},'
            ' "minDuration": "2s", "maxDuration": "10s", "searchDepth": 20}'
        )
        self.assertEqual(params.service, "frontend")
        self.assertEqual(params.operation, "GET /api")
        self.assertEqual(params.tags, {"error": "true"})
        self.assertEqual(params.min_duration, "2s")
        self.assertEqual(params.max_duration, "10s")
        self.assertEqual(params.search_depth, 20)

    def test_unknown_fields_are_dropped(self):
        params = SearchParams.model_validate_json(
            '{"service": "frontend", "confidence": 0.9, "reasoning": "because"}'
        )
        self.assertEqual(params.to_dict(), {"service": "frontend"})
        self.assertFalse(hasattr(params, "confidence"))

    def test_null_fields_decode_to_zero_values(self):
        params = SearchParams.model_validate_json('{"service": null, "tags": null, "searchDepth": null}')
        self.assertEqual(params.service, "")
        self.assertEqual(params.tags, {})
        self.assertEqual(params.search_depth, 0)

    def test_empty_object_is_empty(self):
        self.assertTrue(SearchParams.model_validate_json('{}').is_empty())


class SearchParamsSerializationTests(SimpleTestCase):

    def test_zero_fields_omitted(self):
        params = SearchParams(service="payment-service", tags={"http.status_code": "500"}, min_duration="2s")
        self.assertEqual(params.to_dict(), {
            "service": "payment-service",
            "tags": {"http.status_code": "500"},
            "minDuration": "2s",
        })

    def test_empty_params_serialize_to_empty_object(self):
        self.assertEqual(SearchParams().to_dict(), {})


class ToQueryParamsTests(SimpleTestCase):

    def test_converts_all_fields(self):
        params = SearchParams(
            service="frontend",
            operation="GET /api",
            tags={"error": "true"},
            min_duration="2s",
            max_duration="10s",
            search_depth=5,
        )
        result = params.to_query_params()
        self.assertEqual(result, TraceQueryParams(
            service_name="frontend",
            operation_name="GET /api",
            attributes={"error": "true"},
            duration_min=timedelta(seconds=2),
            duration_max=timedelta(seconds=10),
            search_depth=5,
        ))

    def test_empty_durations_stay_unset(self):
        result = SearchParams(service="frontend").to_query_params()
        self.assertIsNone(result.duration_min)
        self.assertIsNone(result.duration_max)

    def test_invalid_min_duration_raises(self):
        with self.assertRaises(ValidationError) as ctx:
            SearchParams(min_duration="fast").to_query_params()
        self.assertIn("invalid minDuration", str(ctx.exception))

    def test_invalid_max_duration_raises(self):
        with self.assertRaises(ValidationError) as ctx:
            SearchParams(max_duration="10 parsecs").to_query_params()
        self.assertIn("invalid maxDuration", str(ctx.exception))

    def test_attributes_are_copied(self):
        params = SearchParams(tags={"a": "1"})
        result = params.to_query_params()
        result.attributes["b"] = "2"
        self.assertEqual(params.tags, {"a": "1"})


class ToMCPArgsTests(SimpleTestCase):

    def test_renames_fields(self):
        params = SearchParams(
            service="frontend",
            operation="GET /api",
            tags={"error": "true"},
            min_duration="2s",
            max_duration="10s",
            search_depth=5,
        )
        self.assertEqual(params.to_mcp_args(), {
            "service_name": "frontend",
            "span_name": "GET /api",
            "attributes": {"error": "true"},
            "duration_min": "2s",
            "duration_max": "10s",
            "search_depth": 5,
        })

    def test_omits_zero_fields(self):
        self.assertEqual(SearchParams(service="frontend").to_mcp_args(), {"service_name": "frontend"})
        self.assertEqual(SearchParams().to_mcp_args(), {})
