"""
Tests for NLQueryConfig loading and validation.
"""

from dataclasses import replace
from datetime import timedelta

from django.test import SimpleTestCase, override_settings

from nlquery.config import MIN_ANALYSIS_MAX_TOKENS, NLQueryConfig
from nlquery.errors import ConfigurationError


VALID = NLQueryConfig(
    enabled=True,
    provider='ollama',
    endpoint='http://localhost:11434',
    model='llama3.2:3b',
)


class FromSettingsTests(SimpleTestCase):

    @override_settings(
        NLQUERY_ENABLED=True,
        NLQUERY_PROVIDER='Ollama',
        NLQUERY_ENDPOINT='http://ollama:11434',
        NLQUERY_MODEL='llama3.2:3b',
        NLQUERY_TEMPERATURE=0.3,
        NLQUERY_MAX_TOKENS=300,
        NLQUERY_TIMEOUT_SECONDS=15,
        NLQUERY_EXTRACTOR='LLM',
        NLQUERY_SESSION_TTL_SECONDS=120,
        NLQUERY_MAX_MESSAGES=20,
        NLQUERY_SWEEP_INTERVAL_SECONDS=30,
    )
    def test_reads_settings(self):
        config = NLQueryConfig.from_settings()

        self.assertTrue(config.enabled)
        self.assertEqual(config.provider, 'ollama')
        self.assertEqual(config.endpoint, 'http://ollama:11434')
        self.assertEqual(config.model, 'llama3.2:3b')
        self.assertEqual(config.temperature, 0.3)
        self.assertEqual(config.max_tokens, 300)
        self.assertEqual(config.timeout_seconds, 15)
        self.assertEqual(config.extractor, 'llm')
        self.assertEqual(config.session_ttl, timedelta(minutes=2))
        self.assertEqual(config.max_messages, 20)
        self.assertEqual(config.sweep_interval, timedelta(seconds=30))
        config.validate()

    def test_no_model_defaults(self):
        config = NLQueryConfig()
        self.assertEqual(config.endpoint, '')
        self.assertEqual(config.model, '')
        self.assertFalse(config.enabled)


class ValidateTests(SimpleTestCase):

    def test_valid_config(self):
        VALID.validate()

    def test_disabled_config_is_not_checked(self):
        NLQueryConfig(enabled=False, provider='nonsense', temperature=5).validate()

    def test_heuristic_only_config(self):
        NLQueryConfig(enabled=True).validate()

    def test_bedrock_does_not_need_endpoint(self):
        NLQueryConfig(enabled=True, provider='bedrock', model='anthropic.claude-3-haiku-20240307-v1:0').validate()

    def test_invalid_configs(self):
        cases = {
            'unsupported provider': replace(VALID, provider='openai'),
            'ollama without endpoint': replace(VALID, endpoint=''),
            'provider without model': replace(VALID, model=''),
            'temperature too high': replace(VALID, temperature=1.5),
            'negative temperature': replace(VALID, temperature=-0.1),
            'negative max_tokens': replace(VALID, max_tokens=-1),
            'zero timeout': replace(VALID, timeout_seconds=0),
            'unknown extractor': replace(VALID, extractor='magic'),
            'llm without provider': NLQueryConfig(enabled=True, extractor='llm'),
            'zero ttl': replace(VALID, session_ttl=timedelta(0)),
            'zero max_messages': replace(VALID, max_messages=0),
        }
        for name, config in cases.items():
            with self.subTest(name):
                with self.assertRaises(ConfigurationError):
                    config.validate()


class AnalysisConfigTests(SimpleTestCase):

    def test_raises_small_budget(self):
        config = replace(VALID, max_tokens=256)
        self.assertEqual(config.analysis_config().max_tokens, MIN_ANALYSIS_MAX_TOKENS)
        self.assertEqual(config.max_tokens, 256)

    def test_keeps_larger_budget(self):
        config = replace(VALID, max_tokens=2048)
        self.assertEqual(config.analysis_config().max_tokens, 2048)
