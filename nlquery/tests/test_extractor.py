"""
Tests for the extractor interface and factory.
"""

from unittest.mock import MagicMock

from django.test import SimpleTestCase

from nlquery.config import NLQueryConfig
from nlquery.errors import ConfigurationError
from nlquery.extractor import StubExtractor, create_extractor
from nlquery.heuristic import HeuristicExtractor
from nlquery.llm_extractor import LLMExtractor
from nlquery.llm_providers import BaseChatModel
from nlquery.params import SearchParams


class StubExtractorTests(SimpleTestCase):

    async def test_returns_empty_params(self):
        params = await StubExtractor().extract("show 500 errors from payment-service")
        self.assertEqual(params, SearchParams())
        self.assertTrue(params.is_empty())


class CreateExtractorTests(SimpleTestCase):

    def test_stub(self):
        self.assertIsInstance(create_extractor('stub'), StubExtractor)

    def test_heuristic_is_case_insensitive(self):
        self.assertIsInstance(create_extractor('Heuristic'), HeuristicExtractor)

    def test_llm_uses_config_generation_settings(self):
        model = MagicMock(spec=BaseChatModel)
        config = NLQueryConfig(enabled=True, temperature=0.2, max_tokens=128)

        extractor = create_extractor('llm', model=model, config=config)

        self.assertIsInstance(extractor, LLMExtractor)
        self.assertIs(extractor.model, model)
        self.assertEqual(extractor.temperature, 0.2)
        self.assertEqual(extractor.max_tokens, 128)

    def test_llm_without_model_raises(self):
        with self.assertRaises(ConfigurationError):
            create_extractor('llm')

    def test_unknown_kind_raises(self):
        with self.assertRaises(ConfigurationError):
            create_extractor('magic')
