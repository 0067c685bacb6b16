"""
Builds the runtime components (extractor, analyzer, sessions) from config.

One chat model is created and shared between the extractor and the analyzer.
The session store owns a background thread, so every path out of
build_components either hands it to the caller or closes it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .analyzer import Analyzer
from .config import NLQueryConfig
from .errors import ConfigurationError
from .extractor import BaseExtractor, create_extractor
from .llm_providers import create_model
from .sessions import SessionManager


logger = logging.getLogger(__name__)


@dataclass
class Components:
    """
    Runtime components created from configuration.

    extractor is None when nlquery is disabled; analyzer is None when no
    model provider is configured (heuristic-only mode).
    """
    extractor: Optional[BaseExtractor] = None
    analyzer: Optional[Analyzer] = None
    sessions: Optional[SessionManager] = None

    @property
    def enabled(self) -> bool:
        return self.extractor is not None

    def close(self) -> None:
        """Release resources held by the components."""
        if self.sessions is not None:
            self.sessions.close()


def build_components(config: NLQueryConfig) -> Components:
    """
    Create all nlquery components from configuration.

    Raises:
        ConfigurationError: if the config is invalid or the model cannot be
            created. No fallback happens here; that decision belongs to the
            caller.
    """
    config.validate()

    if not config.enabled:
        logger.info("nlquery: disabled")
        return Components()

    sessions = SessionManager(
        ttl=config.session_ttl,
        max_messages=config.max_messages,
        sweep_interval=config.sweep_interval,
    )

    try:
        if not config.provider:
            kind = 'heuristic' if config.extractor == 'auto' else config.extractor
            logger.info(f"nlquery: no provider configured, using {kind} extractor (analysis disabled)")
            return Components(extractor=create_extractor(kind), sessions=sessions)

        model = create_model(config)
        kind = 'llm' if config.extractor == 'auto' else config.extractor
        extractor = create_extractor(kind, model=model, config=config)

        analysis_config = config.analysis_config()
        analyzer = Analyzer(
            model,
            sessions,
            temperature=analysis_config.temperature,
            max_tokens=analysis_config.max_tokens,
        )
    except Exception as e:
        sessions.close()
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(f"nlquery: failed to build components: {e}") from e

    logger.info(
        f"nlquery: using {kind} extractor and {config.provider} analyzer "
        f"(model={config.model}, endpoint={config.endpoint or '-'})"
    )
    return Components(extractor=extractor, analyzer=analyzer, sessions=sessions)
