"""Request header policies for correlation ids and the user agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableMapping, Optional, Union

MS_CORRELATION_ID_HEADER = "x-ms-correlation-request-id"
MS_GRAPH_CORRELATION_ID_HEADER = "client-request-id"
USER_AGENT_HEADER_NAME = "User-Agent"

Headers = MutableMapping[str, Union[str, list[str]]]


def _pop_header(headers: Headers, name: str) -> list[str]:
    """Remove every spelling of ``name`` and return the values it held."""
    values: list[str] = []
    for key in [k for k in headers if k.lower() == name.lower()]:
        existing = headers.pop(key)
        if isinstance(existing, str):
            values.append(existing)
        else:
            values.extend(existing)
    return values


def _normalise_trace_id(trace_id: Union[str, bytes, None]) -> Optional[str]:
    if trace_id is None:
        return None
    text = trace_id.hex() if isinstance(trace_id, (bytes, bytearray)) else trace_id
    if not text or set(text) <= {"0"}:
        return None
    return text


@dataclass(frozen=True)
class CorrelationPolicy:
    """Sets a correlation id header from the current trace id."""

    header_name: str

    def apply(self, headers: Headers, trace_id: Union[str, bytes, None]) -> None:
        """Set the header to ``trace_id``; do nothing when there is no trace id."""
        value = _normalise_trace_id(trace_id)
        if value is None:
            return
        _pop_header(headers, self.header_name)
        headers[self.header_name] = value


@dataclass(frozen=True)
class UserAgentPolicy:
    """Appends a custom user agent to the User-Agent header."""

    user_agent: str

    def apply(self, headers: Headers) -> None:
        """Add the user agent to any existing ones, joined by commas."""
        if not self.user_agent.strip():
            return
        values = _pop_header(headers, USER_AGENT_HEADER_NAME)
        values.append(self.user_agent)
        headers[USER_AGENT_HEADER_NAME] = ",".join(values)


def new_ms_correlation_policy() -> CorrelationPolicy:
    """A policy setting the Microsoft correlation id header used by Azure REST APIs."""
    return CorrelationPolicy(MS_CORRELATION_ID_HEADER)


def new_ms_graph_correlation_policy() -> CorrelationPolicy:
    """A policy setting the Microsoft Graph correlation id header."""
    return CorrelationPolicy(MS_GRAPH_CORRELATION_ID_HEADER)


def new_user_agent_policy(user_agent: str) -> UserAgentPolicy:
    """A policy ensuring ``user_agent`` is sent on every request."""
    return UserAgentPolicy(user_agent)