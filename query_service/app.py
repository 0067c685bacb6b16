"""
FastAPI application for natural language trace search and trace analysis.
This runs as a separate service next to the Jaeger query service.
"""
import os
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Optional

import django
from django.conf import settings

# Setup Django so settings (and LOGGING) are loaded before anything reads them
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from nlquery.analyzer import Analyzer
from nlquery.components import Components, build_components
from nlquery.config import NLQueryConfig
from nlquery.errors import ConfigurationError, NLQueryError
from nlquery.pruner import find_span, format_span_for_llm, format_trace_for_llm, prune_span, prune_trace
from nlquery.query_client import JaegerQueryClient
from nlquery.search_bridge import QueryServiceToolCaller
from .errors import NLQueryErrorCode, error_code_for, get_status_code

logger = logging.getLogger(__name__)

TRACE_ID_LENGTH = 32
SPAN_ID_LENGTH = 16

# Global instances (singleton pattern); built on first use
_components: Optional[Components] = None
_query_client: Optional[JaegerQueryClient] = None


def get_components() -> Components:
    """
    Get the nlquery components built from Django settings.

    If the configured model provider cannot be used, the service still starts
    with the heuristic extractor and analysis disabled. Any other configuration
    error is raised.

    Raises:
        ConfigurationError: if the settings are invalid without a provider too
    """
    global _components

    if _components is not None:
        return _components

    config = NLQueryConfig.from_settings()
    fallback = heuristic_fallback_config(config)
    # Problems unrelated to the provider are not fixed by falling back
    fallback.validate()

    try:
        _components = build_components(config)
    except ConfigurationError as e:
        logger.warning(f"nlquery: {e}; falling back to heuristic extractor, analysis disabled")
        _components = build_components(fallback)

    return _components


def heuristic_fallback_config(config: NLQueryConfig) -> NLQueryConfig:
    """Copy of config with the model provider removed."""
    extractor = 'heuristic' if config.extractor == 'llm' else config.extractor
    return replace(config, provider='', endpoint='', model='', extractor=extractor)


def get_query_client() -> JaegerQueryClient:
    global _query_client

    if _query_client is None:
        _query_client = JaegerQueryClient(
            getattr(settings, 'JAEGER_QUERY_URL', 'http://localhost:16686'),
            timeout=getattr(settings, 'JAEGER_QUERY_TIMEOUT_SECONDS', 10),
        )
    return _query_client


async def reset_components():
    """
    Close and forget the global instances.
    Useful for testing or when configuration changes.
    """
    global _components, _query_client
    if _components is not None:
        _components.close()
        _components = None
    if _query_client is not None:
        await _query_client.close()
        _query_client = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build at startup so invalid settings stop the service instead of failing each request
    get_components()
    yield
    await reset_components()


app = FastAPI(
    title="Trace Query Assistant",
    description="Natural language trace search and model-backed trace analysis",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=getattr(settings, 'CORS_ALLOWED_ORIGINS', []),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class APIError(Exception):
    """Error raised by route handlers; rendered as {"error", "code"}."""

    def __init__(self, code: NLQueryErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class NLQueryRequest(BaseModel):
    query: str = ""


class AnalyzeSpanRequest(BaseModel):
    trace_id: str = ""
    span_id: str = ""
    session_id: str | None = None


class AnalyzeTraceRequest(BaseModel):
    trace_id: str = ""
    session_id: str | None = None


class FollowUpRequest(BaseModel):
    session_id: str = ""
    question: str = ""


def error_response(code: NLQueryErrorCode, message: str) -> JSONResponse:
    return JSONResponse(status_code=get_status_code(code), content={"error": message, "code": code.value})


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return error_response(exc.code, exc.message)


@app.exception_handler(NLQueryError)
async def nlquery_error_handler(request: Request, exc: NLQueryError):
    code = error_code_for(exc)
    if get_status_code(code) >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(code, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(NLQueryErrorCode.INVALID_REQUEST, "invalid request body")


def require_enabled() -> Components:
    components = get_components()
    if not components.enabled:
        raise APIError(NLQueryErrorCode.DISABLED, "nlquery is disabled")
    return components


def require_analyzer() -> Analyzer:
    components = require_enabled()
    if components.analyzer is None:
        raise APIError(NLQueryErrorCode.ANALYSIS_UNAVAILABLE, "analysis requires a configured model provider")
    return components.analyzer


def validate_hex_id(value: str, length: int, name: str) -> str:
    if len(value) != length:
        raise APIError(NLQueryErrorCode.INVALID_REQUEST, f"invalid {name} format: must be {length} hex characters")
    try:
        bytes.fromhex(value)
    except ValueError:
        raise APIError(NLQueryErrorCode.INVALID_REQUEST, f"invalid {name} format: not a hex string")
    return value.lower()


@app.get("/health")
async def health_check():
    """Health check endpoint reporting how nlquery is wired"""
    components = get_components()
    return {
        "status": "healthy",
        "service": "query_service",
        "nlquery": {
            "enabled": components.enabled,
            "extractor": components.extractor.__class__.__name__ if components.extractor else None,
            "analysis": components.analyzer is not None,
            "model": components.analyzer.model.model_name if components.analyzer else None,
            "sessions": len(components.sessions) if components.sessions is not None else 0,
        },
    }


@app.post("/api/nlquery")
async def extract_params(request: NLQueryRequest):
    """Turn a natural language query into search parameters. Does not search."""
    components = require_enabled()
    if not request.query.strip():
        raise APIError(NLQueryErrorCode.INVALID_REQUEST, "query field is required")

    params = await components.extractor.extract(request.query)
    return {"params": params.to_dict()}


@app.post("/api/nlquery/search")
async def search(request: NLQueryRequest):
    """Extract search parameters and run them against the trace backend."""
    components = require_enabled()
    if not request.query.strip():
        raise APIError(NLQueryErrorCode.INVALID_REQUEST, "query field is required")

    params = await components.extractor.extract(request.query)
    traces = await QueryServiceToolCaller(get_query_client()).search_traces(params)
    return {
        "params": params.to_dict(),
        "traces": [trace.to_dict() for trace in traces],
    }


@app.get("/api/nlquery/services")
async def list_services():
    require_enabled()
    services = await QueryServiceToolCaller(get_query_client()).get_services()
    return {"services": services}


@app.post("/api/nlquery/analyze/span")
async def analyze_span(request: AnalyzeSpanRequest):
    analyzer = require_analyzer()
    if not request.trace_id or not request.span_id:
        raise APIError(NLQueryErrorCode.INVALID_REQUEST, "trace_id and span_id are required")
    trace_id = validate_hex_id(request.trace_id, TRACE_ID_LENGTH, "trace_id")
    span_id = validate_hex_id(request.span_id, SPAN_ID_LENGTH, "span_id")

    resource_spans = await get_query_client().get_trace(trace_id)
    if not resource_spans:
        raise APIError(NLQueryErrorCode.NOT_FOUND, "trace not found")

    found = find_span(resource_spans, span_id)
    if found is None:
        raise APIError(NLQueryErrorCode.NOT_FOUND, "span not found in trace")

    span_text = format_span_for_llm(prune_span(*found))
    analysis, session_id = await analyzer.analyze_span(span_text, request.session_id or "")
    return {"analysis": analysis, "session_id": session_id}


@app.post("/api/nlquery/analyze/trace")
async def analyze_trace(request: AnalyzeTraceRequest):
    analyzer = require_analyzer()
    if not request.trace_id:
        raise APIError(NLQueryErrorCode.INVALID_REQUEST, "trace_id is required")
    trace_id = validate_hex_id(request.trace_id, TRACE_ID_LENGTH, "trace_id")

    resource_spans = await get_query_client().get_trace(trace_id)
    if not resource_spans:
        raise APIError(NLQueryErrorCode.NOT_FOUND, "trace not found")

    trace_text = format_trace_for_llm(prune_trace(resource_spans))
    analysis, session_id = await analyzer.analyze_trace(trace_text, request.session_id or "")
    return {"analysis": analysis, "session_id": session_id}


@app.post("/api/nlquery/analyze/followup")
async def follow_up(request: FollowUpRequest):
    analyzer = require_analyzer()
    if not request.session_id or not request.question.strip():
        raise APIError(NLQueryErrorCode.INVALID_REQUEST, "session_id and question are required")

    analysis = await analyzer.follow_up(request.question, request.session_id)
    return {"analysis": analysis, "session_id": request.session_id}
