"""
Structured trace search parameters.

SearchParams is the only shape extraction may produce. It is a pydantic model
that ignores unknown keys, so decoding model output into it drops anything the
model invented ("confidence", "reasoning", ...) before the value reaches the
rest of the system. That decoding step is the safety firewall.
"""

import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ValidationError


# Go-style duration: optional sign, then one or more <number><unit> groups.
_DURATION_PART = re.compile(r'(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)')

_UNIT_MICROSECONDS = {
    'ns': 0.001,
    'us': 1,
    'µs': 1,
    'μs': 1,
    'ms': 1_000,
    's': 1_000_000,
    'm': 60 * 1_000_000,
    'h': 3600 * 1_000_000,
}


def parse_duration(value: str) -> timedelta:
    """
    Parse a Go-style duration string ("2s", "500ms", "1h30m", "1.5s").

    Raises:
        ValueError: if the string is empty or not a valid duration
    """
    s = value.strip()
    if not s:
        raise ValueError("empty duration")

    sign = 1
    if s[0] in '+-':
        sign = -1 if s[0] == '-' else 1
        s = s[1:]

    if s == '0':
        return timedelta(0)

    pos = 0
    total_us = 0.0
    while pos < len(s):
        match = _DURATION_PART.match(s, pos)
        if not match:
            raise ValueError(f"invalid duration {value!r}")
        total_us += float(match.group(1)) * _UNIT_MICROSECONDS[match.group(2)]
        pos = match.end()

    if pos == 0:
        raise ValueError(f"invalid duration {value!r}")

    return timedelta(microseconds=sign * total_us)


@dataclass
class TraceQueryParams:
    """Validated, typed search parameters for the trace query backend."""
    service_name: str = ''
    operation_name: str = ''
    attributes: Dict[str, str] = field(default_factory=dict)
    duration_min: Optional[timedelta] = None
    duration_max: Optional[timedelta] = None
    search_depth: int = 0


class SearchParams(BaseModel):
    """Schema-restricted output of natural language extraction."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    service: str = ''
    operation: str = ''
    tags: Dict[str, str] = Field(default_factory=dict)
    min_duration: str = Field('', alias='minDuration')
    max_duration: str = Field('', alias='maxDuration')
    search_depth: int = Field(0, alias='searchDepth')

    @field_validator('*', mode='before')
    @classmethod
    def _null_is_zero(cls, value: Any, info) -> Any:
        # A JSON null for a known field leaves it at its zero value.
        if value is None:
            default = cls.model_fields[info.field_name].get_default(call_default_factory=True)
            return default
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the public field names, omitting zero-valued fields."""
        return self.model_dump(by_alias=True, exclude_defaults=True)

    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_query_params(self) -> TraceQueryParams:
        """
        Convert to typed query parameters.

        Duration strings are validated here; a malformed value raises instead of
        silently becoming zero.

        Raises:
            ValidationError: if minDuration or maxDuration cannot be parsed
        """
        duration_min = None
        duration_max = None

        if self.min_duration:
            try:
                duration_min = parse_duration(self.min_duration)
            except ValueError as e:
                raise ValidationError(f"invalid minDuration {self.min_duration!r}: {e}") from e

        if self.max_duration:
            try:
                duration_max = parse_duration(self.max_duration)
            except ValueError as e:
                raise ValidationError(f"invalid maxDuration {self.max_duration!r}: {e}") from e

        return TraceQueryParams(
            service_name=self.service,
            operation_name=self.operation,
            attributes=dict(self.tags),
            duration_min=duration_min,
            duration_max=duration_max,
            search_depth=self.search_depth,
        )

    def to_mcp_args(self) -> Dict[str, Any]:
        """
        Rename fields to the search_traces tool vocabulary.

        service -> service_name, operation -> span_name, minDuration -> duration_min,
        maxDuration -> duration_max, searchDepth -> search_depth, tags -> attributes.
        Only non-zero fields are included.
        """
        args: Dict[str, Any] = {}
        if self.service:
            args['service_name'] = self.service
        if self.operation:
            args['span_name'] = self.operation
        if self.min_duration:
            args['duration_min'] = self.min_duration
        if self.max_duration:
            args['duration_max'] = self.max_duration
        if self.search_depth > 0:
            args['search_depth'] = self.search_depth
        if self.tags:
            args['attributes'] = dict(self.tags)
        return args
