"""
Reduces OTLP/JSON trace data to compact text for model prompts.

Raw trace payloads carry binary ids, nanosecond timestamps and many internal
fields that only cost tokens. Pruning keeps what matters for root-cause
analysis: service, operation, duration, status, kind, a bounded set of
attributes and the span events.

Input is the "resourceSpans" list returned by the Jaeger query API v3.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple


# Limits the number of attributes sent to the model per span or event
MAX_ATTRIBUTES_PER_SPAN = 15

STATUS_NAMES = {0: 'UNSET', 1: 'OK', 2: 'ERROR'}

SPAN_KIND_NAMES = {
    0: 'UNSPECIFIED',
    1: 'INTERNAL',
    2: 'SERVER',
    3: 'CLIENT',
    4: 'PRODUCER',
    5: 'CONSUMER',
}


@dataclass
class PrunedEvent:
    name: str
    time: str = ''
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class PrunedSpan:
    span_id: str
    service: str
    operation: str
    duration: str
    status: str
    kind: str
    parent_span_id: str = ''
    status_message: str = ''
    attributes: Dict[str, str] = field(default_factory=dict)
    events: List[PrunedEvent] = field(default_factory=list)


@dataclass
class PrunedTrace:
    trace_id: str = ''
    span_count: int = 0
    services: List[str] = field(default_factory=list)
    root_span: str = ''
    duration: str = ''
    spans: List[PrunedSpan] = field(default_factory=list)


def iter_spans(resource_spans: List[Dict[str, Any]]) -> Iterator[Tuple[Dict[str, Any], Dict[str, Any]]]:
    """Yield (span, resource_spans_entry) for every span in the payload."""
    for resource in resource_spans or []:
        scopes = resource.get('scopeSpans') or resource.get('instrumentationLibrarySpans') or []
        for scope in scopes:
            for span in scope.get('spans') or []:
                yield span, resource


def prune_span(span: Dict[str, Any], resource: Dict[str, Any]) -> PrunedSpan:
    """Extract the essentials of one span; resource supplies service.name."""
    status = span.get('status') or {}
    start_ns, end_ns = span_times(span)
    return PrunedSpan(
        span_id=normalize_id(span.get('spanId')),
        parent_span_id=normalize_id(span.get('parentSpanId')),
        service=service_name(resource),
        operation=span.get('name', ''),
        duration=format_duration(max(end_ns - start_ns, 0)),
        status=status_name(status.get('code')),
        status_message=status.get('message', ''),
        kind=span_kind_name(span.get('kind')),
        attributes=prune_attributes(span.get('attributes')),
        events=prune_events(span.get('events')),
    )


def prune_trace(resource_spans: List[Dict[str, Any]]) -> PrunedTrace:
    """Prune every span of a trace and compute trace-level metadata."""
    trace = PrunedTrace()
    services = set()
    earliest_start: Optional[int] = None
    latest_end: Optional[int] = None

    for span, resource in iter_spans(resource_spans):
        if not trace.trace_id:
            trace.trace_id = normalize_id(span.get('traceId'))

        pruned = prune_span(span, resource)
        trace.spans.append(pruned)
        services.add(pruned.service)

        if not pruned.parent_span_id:
            trace.root_span = pruned.operation

        start_ns, end_ns = span_times(span)
        if earliest_start is None or start_ns < earliest_start:
            earliest_start = start_ns
        if latest_end is None or end_ns > latest_end:
            latest_end = end_ns

    trace.span_count = len(trace.spans)
    trace.services = sorted(services)
    if earliest_start is not None and latest_end is not None:
        trace.duration = format_duration(max(latest_end - earliest_start, 0))
    return trace


def find_span(
    resource_spans: List[Dict[str, Any]],
    span_id: str,
) -> Optional[Tuple[Dict[str, Any], Dict[str, Any]]]:
    """Locate a span by hex id. Returns (span, resource) or None."""
    wanted = span_id.lower()
    for span, resource in iter_spans(resource_spans):
        if normalize_id(span.get('spanId')) == wanted:
            return span, resource
    return None


def format_span_for_llm(span: PrunedSpan) -> str:
    """Render a pruned span as a text block for a prompt."""
    lines = [
        f"Span: {span.operation}",
        f"  Service: {span.service}",
        f"  Duration: {span.duration}",
    ]
    status = f"  Status: {span.status}"
    if span.status_message:
        status += f" ({span.status_message})"
    lines.append(status)
    lines.append(f"  Kind: {span.kind}")
    if span.parent_span_id:
        lines.append(f"  Parent: {span.parent_span_id}")
    if span.attributes:
        lines.append("  Attributes:")
        lines.extend(f"    {k}: {v}" for k, v in span.attributes.items())
    if span.events:
        lines.append("  Events:")
        for event in span.events:
            line = f"    - {event.name}"
            if event.time:
                line += f" @ {event.time}"
            lines.append(line)
            lines.extend(f"      {k}: {v}" for k, v in event.attributes.items())
    return "\n".join(lines) + "\n"


def format_trace_for_llm(trace: PrunedTrace) -> str:
    """Render a pruned trace (header plus every span) as a text block."""
    parts = [
        f"Trace ID: {trace.trace_id}\n",
        f"Total Spans: {trace.span_count}\n",
        f"Services: {', '.join(trace.services)}\n",
    ]
    if trace.root_span:
        parts.append(f"Root Operation: {trace.root_span}\n")
    if trace.duration:
        parts.append(f"Total Duration: {trace.duration}\n")
    parts.append("\n--- Spans ---\n")
    for span in trace.spans:
        parts.append(format_span_for_llm(span))
        parts.append("\n")
    return "".join(parts)


def format_duration(nanos: int) -> str:
    """Human-scale duration: 250us, 12ms, 1.50s, 2.25m."""
    if nanos < 1_000_000:
        return f"{nanos // 1_000}us"
    if nanos < 1_000_000_000:
        return f"{nanos // 1_000_000}ms"
    seconds = nanos / 1_000_000_000
    if seconds < 60:
        return f"{seconds:.2f}s"
    return f"{seconds / 60:.2f}m"


def span_times(span: Dict[str, Any]) -> Tuple[int, int]:
    return int(span.get('startTimeUnixNano') or 0), int(span.get('endTimeUnixNano') or 0)


def normalize_id(value: Optional[str]) -> str:
    """Return a trace/span id as lowercase hex; accepts hex or base64 input."""
    if not value:
        return ''
    if len(value) in (16, 32):
        try:
            bytes.fromhex(value)
            return value.lower()
        except ValueError:
            pass
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return value.lower()
    if raw and not any(raw):
        # All-zero id means "no parent"
        return ''
    return raw.hex()


def service_name(resource: Dict[str, Any]) -> str:
    attrs = (resource.get('resource') or {}).get('attributes')
    for attr in attrs or []:
        if attr.get('key') == 'service.name':
            return any_value_to_str(attr.get('value'))
    return 'unknown'


def status_name(code: Any) -> str:
    if isinstance(code, str):
        name = code.upper().replace('STATUS_CODE_', '')
        return name if name in STATUS_NAMES.values() else 'UNSET'
    return STATUS_NAMES.get(code or 0, 'UNSET')


def span_kind_name(kind: Any) -> str:
    if isinstance(kind, str):
        name = kind.upper().replace('SPAN_KIND_', '')
        return name if name in SPAN_KIND_NAMES.values() else 'UNSPECIFIED'
    return SPAN_KIND_NAMES.get(kind or 0, 'UNSPECIFIED')


def prune_attributes(attributes: Optional[List[Dict[str, Any]]]) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for attr in attributes or []:
        if len(result) >= MAX_ATTRIBUTES_PER_SPAN:
            break
        result[attr.get('key', '')] = any_value_to_str(attr.get('value'))
    return result


def prune_events(events: Optional[List[Dict[str, Any]]]) -> List[PrunedEvent]:
    result = []
    for event in events or []:
        pruned = PrunedEvent(name=event.get('name', ''))
        time_ns = int(event.get('timeUnixNano') or 0)
        if time_ns:
            pruned.time = datetime.fromtimestamp(time_ns / 1e9, tz=timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')
        pruned.attributes = prune_attributes(event.get('attributes'))
        result.append(pruned)
    return result


def any_value_to_str(value: Optional[Dict[str, Any]]) -> str:
    """Render an OTLP AnyValue as a string."""
    if not value:
        return ''
    if 'stringValue' in value:
        return str(value['stringValue'])
    if 'boolValue' in value:
        return 'true' if value['boolValue'] else 'false'
    if 'intValue' in value:
        return str(int(value['intValue']))
    if 'doubleValue' in value:
        return str(value['doubleValue'])
    if 'bytesValue' in value:
        return str(value['bytesValue'])
    if 'arrayValue' in value:
        items = [any_value_to_str(v) for v in (value['arrayValue'] or {}).get('values', [])]
        return json.dumps(items)
    if 'kvlistValue' in value:
        items = {
            kv.get('key', ''): any_value_to_str(kv.get('value'))
            for kv in (value['kvlistValue'] or {}).get('values', [])
        }
        return json.dumps(items)
    return ''
