"""Text protocol parsers for the scale and photocell devices.

Scale formats accepted (case-insensitive):

- ``s-100`` / ``S-45,5``   stable reading
- ``i-1200``               unstable reading
- ``error``, ``ERR_...``, ``disconnect``   device-side error
- ``1234.5``, ``1234,5``, ``1234.5 g``     free-form; stability guessed
  from hints left in the text (see :func:`has_unstable_hint`)

The photocell only ever answers ``0`` or ``1``.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Literal, Optional

from .models import PhotocellState

ParsedStatus = Literal["stable", "unstable", "error"]

_PREFIXED = re.compile(r"^([si])-(.+)$", re.DOTALL)
_LEADING_NUMBER = re.compile(r"^\s*([+-]?\d+[.,]?\d*)")
# Longest numeric prefix, the way a lenient float parser reads it
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)", re.IGNORECASE)

UNSTABLE_HINTS = ("u", "m", "instable")


@dataclass(frozen=True)
class ParsedWeight:
    value: float
    status: ParsedStatus


@dataclass(frozen=True)
class ParsedPhotocell:
    state: PhotocellState
    is_error: bool


WEIGHT_ERROR = ParsedWeight(value=0.0, status="error")
PHOTOCELL_ERROR = ParsedPhotocell(state=0, is_error=True)


def _float_prefix(text: str) -> Optional[float]:
    m = _FLOAT_PREFIX.match(text)
    if not m:
        return None
    return float(m.group(1))


def _is_device_error(text: str) -> bool:
    return text == "error" or "err" in text or text == "disconnect"


def has_unstable_hint(text: str) -> bool:
    """Guess instability from free-form scale output.

    Coarse on purpose: any ``u`` or ``m`` counts, which also catches unit
    suffixes such as ``um``. Kept for compatibility with devices that
    append English/French stability words.
    """
    return any(hint in text for hint in UNSTABLE_HINTS)


def parse_weight(text: str) -> ParsedWeight:
    normalized = text.strip().lower()

    if _is_device_error(normalized):
        return WEIGHT_ERROR

    m = _PREFIXED.match(normalized)
    if m:
        value = _float_prefix(m.group(2).replace(",", ".", 1))
        if value is None:
            return WEIGHT_ERROR
        return ParsedWeight(value=value, status="stable" if m.group(1) == "s" else "unstable")

    m = _LEADING_NUMBER.match(normalized)
    if not m:
        return WEIGHT_ERROR

    value = float(m.group(1).replace(",", "."))
    remainder = normalized[m.end():]
    return ParsedWeight(
        value=value,
        status="unstable" if has_unstable_hint(remainder) else "stable",
    )


def parse_photocell(text: str) -> ParsedPhotocell:
    trimmed = text.strip()
    if trimmed == "1":
        return ParsedPhotocell(state=1, is_error=False)
    if trimmed == "0":
        return ParsedPhotocell(state=0, is_error=False)
    return PHOTOCELL_ERROR
