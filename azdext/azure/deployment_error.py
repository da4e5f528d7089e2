"""Readable errors built from the JSON error body of a failed deployment."""

from __future__ import annotations

import json
import math
import os
import sys
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Optional

_GENERIC_FAILURE_CODES = frozenset({"DeploymentFailed", "ResourceDeploymentFailure"})
_NOT_AN_OBJECT = object()


@dataclass
class DeploymentErrorLine:
    """One error in a tree of deployment errors."""

    # The code of the error line, if any.
    code: str = ""
    # The message that represents the error.
    message: str = ""
    inner: list[Optional["DeploymentErrorLine"]] = field(default_factory=list)


class DeploymentError(Exception):
    """A deployment failure, parsed from the JSON error response when possible."""

    def __init__(self, json_text: str) -> None:
        super().__init__(json_text)
        self.json = json_text
        self.details: Optional[DeploymentErrorLine] = _parse_details(json_text)

    def __str__(self) -> str:
        if self.details is None:
            return self.json
        return "".join(f"{_red(line)}\n" for line in generate_error_output(self.details))


def _parse_details(json_text: str) -> Optional[DeploymentErrorLine]:
    decoded = _decode_object(json_text)
    if decoded is _NOT_AN_OBJECT:
        return None
    return get_errors_from_map(decoded)


def _red(text: str) -> str:
    stdout = sys.stdout
    no_color = (
        bool(os.environ.get("NO_COLOR"))
        or os.environ.get("TERM") == "dumb"
        or stdout is None
        or not stdout.isatty()
    )
    return text if no_color else f"\x1b[31m{text}\x1b[0m"


def _decode_object(text: str) -> Any:
    """The JSON object in ``text`` as a dict, or the not-an-object marker."""
    try:
        decoded = json.loads(text)
    except ValueError:
        return _NOT_AN_OBJECT
    if decoded is None:
        return {}
    if isinstance(decoded, dict):
        return decoded
    return _NOT_AN_OBJECT


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    prefix = "-" if sign else ""
    text = "".join(str(d) for d in digits)
    point = len(digits) + exponent
    decimal_exponent = point - 1
    if decimal_exponent < -4 or decimal_exponent >= 6:
        mantissa = text[0] + (f".{text[1:]}" if len(text) > 1 else "")
        exp_sign = "-" if decimal_exponent < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(decimal_exponent):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{text}"
    if point >= len(text):
        return f"{prefix}{text}{'0' * (point - len(text))}"
    return f"{prefix}{text[:point]}.{text[point:]}"


def _format_value(value: Any) -> str:
    """Format a decoded JSON value the way the error output expects."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda item: str(item[0]))
        return "map[" + " ".join(f"{key}:{_format_value(item)}" for key, item in items) + "]"
    if isinstance(value, list):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    return str(value)


def _line_from_value(value: Any) -> DeploymentErrorLine:
    if isinstance(value, dict):
        return get_errors_from_map(value)
    return DeploymentErrorLine(message=_format_value(value))


def _errors_from_array(values: Iterable[Any]) -> list[Optional[DeploymentErrorLine]]:
    return [_line_from_value(value) for value in values]


def get_errors_from_map(error_map: Optional[dict[str, Any]]) -> DeploymentErrorLine:
    """Build the error tree from a decoded JSON error object."""
    code = ""
    message = ""
    nested: list[Optional[DeploymentErrorLine]] = []

    for key, value in (error_map or {}).items():
        lowered = str(key).lower()
        if lowered == "code":
            code = _format_value(value)
        elif lowered == "message":
            raw_message = _format_value(value)
            decoded = _decode_object(raw_message)
            if decoded is _NOT_AN_OBJECT:
                message = raw_message
            else:
                nested.append(get_errors_from_map(decoded))
        elif lowered == "error":
            nested.append(_line_from_value(value))
        elif lowered == "details":
            if isinstance(value, list):
                nested.extend(_errors_from_array(value))
            else:
                nested.append(DeploymentErrorLine(message=_format_value(value)))

    # Generic deployment failure messages say nothing the inner errors do not.
    if code in _GENERIC_FAILURE_CODES:
        return DeploymentErrorLine(code="", message="", inner=nested)

    if code and message:
        error_message = f"{code}: {message}"
    elif message:
        error_message = f"- {message}"
    else:
        error_message = ""

    return DeploymentErrorLine(code=code, message=error_message, inner=nested)


def generate_error_output(line: DeploymentErrorLine) -> list[str]:
    """The non-blank messages of an error tree, depth first."""
    lines: list[str] = []
    if line.message.strip():
        lines.append(line.message)
    for inner in line.inner:
        if inner is not None:
            lines.extend(generate_error_output(inner))
    return lines