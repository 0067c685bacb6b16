from pathlib import Path
import os

BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'change-me')
DEBUG = os.environ.get('DEBUG', 'True') == 'True'

# ALLOWED_HOSTS configuration
# Can be overridden with ALLOWED_HOSTS env var (comma-separated list)
if allowed_hosts_env := os.environ.get('ALLOWED_HOSTS'):
    ALLOWED_HOSTS = [host.strip() for host in allowed_hosts_env.split(',')]
else:
    ALLOWED_HOSTS = ['*']

# Settings only; the query service holds no models and no database
INSTALLED_APPS = []

DATABASES = {}

USE_TZ = True
TIME_ZONE = 'UTC'


def _env_bool(name, default=False):
    return os.environ.get(name, str(default)).lower() in ('1', 'true', 'yes', 'on')


# Natural language query settings
# Endpoint and model have no defaults: an operator must choose them before a
# model-backed extractor or the analyzer is enabled.
NLQUERY_ENABLED = _env_bool('NLQUERY_ENABLED', False)
NLQUERY_PROVIDER = os.environ.get('NLQUERY_PROVIDER', '')  # '', 'ollama' or 'bedrock'
NLQUERY_ENDPOINT = os.environ.get('NLQUERY_ENDPOINT', '')
NLQUERY_MODEL = os.environ.get('NLQUERY_MODEL', '')
NLQUERY_TEMPERATURE = float(os.environ.get('NLQUERY_TEMPERATURE', 0.0))
NLQUERY_MAX_TOKENS = int(os.environ.get('NLQUERY_MAX_TOKENS', 256))
NLQUERY_TIMEOUT_SECONDS = float(os.environ.get('NLQUERY_TIMEOUT_SECONDS', 60))
NLQUERY_EXTRACTOR = os.environ.get('NLQUERY_EXTRACTOR', 'auto')  # auto, stub, heuristic, llm

# Session store
NLQUERY_SESSION_TTL_SECONDS = float(os.environ.get('NLQUERY_SESSION_TTL_SECONDS', 30 * 60))
NLQUERY_MAX_MESSAGES = int(os.environ.get('NLQUERY_MAX_MESSAGES', 50))
NLQUERY_SWEEP_INTERVAL_SECONDS = float(os.environ.get('NLQUERY_SWEEP_INTERVAL_SECONDS', 5 * 60))

# AWS Bedrock (when NLQUERY_PROVIDER=bedrock)
NLQUERY_BEDROCK_REGION = os.environ.get('NLQUERY_BEDROCK_REGION', os.environ.get('AWS_REGION', 'us-east-1'))

# Jaeger query service used for trace lookup and search
JAEGER_QUERY_URL = os.environ.get('JAEGER_QUERY_URL', 'http://localhost:16686')
JAEGER_QUERY_TIMEOUT_SECONDS = float(os.environ.get('JAEGER_QUERY_TIMEOUT_SECONDS', 10))

# Frontend origins allowed to call the query service
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get('CORS_ALLOWED_ORIGINS', 'http://localhost:5173,http://localhost:3000').split(',')
    if origin.strip()
]

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.environ.get('LOG_LEVEL', 'INFO'),
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.environ.get('LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'nlquery': {
            'handlers': ['console'],
            'level': os.environ.get('LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'query_service': {
            'handlers': ['console'],
            'level': os.environ.get('LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
