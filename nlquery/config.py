"""
Configuration for natural language query extraction and trace analysis.

Values come from Django settings (see config/settings.py), which read them
from environment variables. Model endpoint and model name are never
defaulted: an operator must set them before a model-backed extractor or the
analyzer is enabled.
"""

from dataclasses import dataclass, replace
from datetime import timedelta

from django.conf import settings

from .errors import ConfigurationError
from .sessions import DEFAULT_SESSION_TTL, MAX_MESSAGES_PER_SESSION, SWEEP_INTERVAL


SUPPORTED_PROVIDERS = ('ollama', 'bedrock')

# 'auto' picks the model-backed extractor when a provider is set, else heuristic
EXTRACTOR_KINDS = ('auto', 'stub', 'heuristic', 'llm')

# Analysis produces prose, so it gets a larger output budget than extraction
MIN_ANALYSIS_MAX_TOKENS = 512


@dataclass
class NLQueryConfig:
    enabled: bool = False
    provider: str = ''
    endpoint: str = ''
    model: str = ''
    temperature: float = 0.0
    max_tokens: int = 256
    timeout_seconds: float = 60.0
    extractor: str = 'auto'
    session_ttl: timedelta = DEFAULT_SESSION_TTL
    max_messages: int = MAX_MESSAGES_PER_SESSION
    sweep_interval: timedelta = SWEEP_INTERVAL
    bedrock_region: str = 'us-east-1'

    @classmethod
    def from_settings(cls) -> 'NLQueryConfig':
        """Build the config from Django settings, falling back to defaults."""
        return cls(
            enabled=getattr(settings, 'NLQUERY_ENABLED', False),
            provider=getattr(settings, 'NLQUERY_PROVIDER', '').lower(),
            endpoint=getattr(settings, 'NLQUERY_ENDPOINT', ''),
            model=getattr(settings, 'NLQUERY_MODEL', ''),
            temperature=float(getattr(settings, 'NLQUERY_TEMPERATURE', 0.0)),
            max_tokens=int(getattr(settings, 'NLQUERY_MAX_TOKENS', 256)),
            timeout_seconds=float(getattr(settings, 'NLQUERY_TIMEOUT_SECONDS', 60)),
            extractor=getattr(settings, 'NLQUERY_EXTRACTOR', 'auto').lower(),
            session_ttl=timedelta(seconds=getattr(
                settings, 'NLQUERY_SESSION_TTL_SECONDS', DEFAULT_SESSION_TTL.total_seconds())),
            max_messages=int(getattr(settings, 'NLQUERY_MAX_MESSAGES', MAX_MESSAGES_PER_SESSION)),
            sweep_interval=timedelta(seconds=getattr(
                settings, 'NLQUERY_SWEEP_INTERVAL_SECONDS', SWEEP_INTERVAL.total_seconds())),
            bedrock_region=getattr(settings, 'NLQUERY_BEDROCK_REGION', 'us-east-1'),
        )

    def validate(self) -> None:
        """
        Check the configuration is internally consistent.

        Raises:
            ConfigurationError: describing the first problem found
        """
        if not self.enabled:
            return
        if self.provider:
            if self.provider not in SUPPORTED_PROVIDERS:
                raise ConfigurationError(
                    f"nlquery: unsupported provider {self.provider!r} "
                    f"(supported: {', '.join(SUPPORTED_PROVIDERS)})"
                )
            if self.provider == 'ollama' and not self.endpoint:
                raise ConfigurationError("nlquery: endpoint is required when provider is ollama")
            if not self.model:
                raise ConfigurationError("nlquery: model is required when provider is set")
        if not 0.0 <= self.temperature <= 1.0:
            raise ConfigurationError("nlquery: temperature must be between 0.0 and 1.0")
        if self.max_tokens < 0:
            raise ConfigurationError("nlquery: max_tokens must be non-negative")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("nlquery: timeout_seconds must be positive")
        if self.extractor not in EXTRACTOR_KINDS:
            raise ConfigurationError(
                f"nlquery: unknown extractor {self.extractor!r} (choose from {', '.join(EXTRACTOR_KINDS)})"
            )
        if self.extractor == 'llm' and not self.provider:
            raise ConfigurationError("nlquery: extractor 'llm' requires a provider")
        if self.session_ttl <= timedelta(0):
            raise ConfigurationError("nlquery: session TTL must be positive")
        if self.max_messages <= 0:
            raise ConfigurationError("nlquery: max_messages must be positive")

    def analysis_config(self) -> 'NLQueryConfig':
        """Copy of this config with an output budget large enough for summaries."""
        return replace(self, max_tokens=max(self.max_tokens, MIN_ANALYSIS_MAX_TOKENS))
