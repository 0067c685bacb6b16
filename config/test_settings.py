"""
Test-specific settings: quiet logging and a deterministic nlquery setup.
"""
import os
import warnings
from .settings import *

# Suppress warnings during tests for clean output
warnings.filterwarnings('ignore', category=RuntimeWarning)

# Heuristic-only by default; tests that need a model patch it in
NLQUERY_ENABLED = True
NLQUERY_PROVIDER = ''
NLQUERY_ENDPOINT = ''
NLQUERY_MODEL = ''
NLQUERY_EXTRACTOR = 'auto'

JAEGER_QUERY_URL = 'http://jaeger.test:16686'

# Suppress logging during tests for clean output
# Can override with LOG_LEVEL environment variable
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.NullHandler',  # Suppress output during tests
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'CRITICAL',  # Suppress root logger
    },
    'loggers': {
        'nlquery': {
            'handlers': ['console'],
            'level': os.environ.get('LOG_LEVEL', 'CRITICAL'),
            'propagate': False,
        },
        'query_service': {
            'handlers': ['console'],
            'level': os.environ.get('LOG_LEVEL', 'CRITICAL'),
            'propagate': False,
        },
    },
}
