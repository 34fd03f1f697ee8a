"""Low-level scanners for the tokens of Wavefront .obj and .mtl lines.

Functions that consume input return the parsed value together with the
unconsumed rest of the text, so callers can chain them along a line.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass

__all__ = [
    "INVALID_INDEX",
    "Index",
    "parse_int_prefix",
    "fix_index",
    "parse_raw_triple",
    "try_parse_double",
    "parse_float",
    "parse_floats",
    "split_token",
]

# Marker for an index component that was not present in a face triple.
INVALID_INDEX = -2147483648

_SPACE = " \t"
_TOKEN_END = "\0 \t\r"
_FIELD_END = "\0/ \t\r"


@dataclass(frozen=True)
class Index:
    """Vertex, texcoord and normal indices of one face corner."""

    vertex_index: int = -1
    texcoord_index: int = -1
    normal_index: int = -1


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _skip_space(text: str) -> str:
    return text.lstrip(_SPACE)


def _until(text: str, stops: str) -> int:
    for pos, c in enumerate(text):
        if c in stops:
            return pos
    return len(text)


def parse_int_prefix(text: str) -> int:
    """Read an optionally signed run of decimal digits; 0 if there are none."""
    sign = 1
    pos = 0
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        pos = 1
    value = 0
    while pos < len(text) and _is_digit(text[pos]):
        value = value * 10 + (ord(text[pos]) - 48)
        pos += 1
    return value * sign


def fix_index(idx: int, n: int) -> int:
    """Make a one-based or relative (negative) index zero-based."""
    if idx > 0:
        return idx - 1
    if idx == 0:
        return 0
    return n + idx


def parse_raw_triple(token: str) -> tuple[Index, str]:
    """Parse ``i``, ``i/j``, ``i//k`` or ``i/j/k``; return the index and the rest.

    Components that are absent are set to ``INVALID_INDEX``.
    """
    vertex = parse_int_prefix(token)
    texcoord = normal = INVALID_INDEX
    rest = token[_until(token, _FIELD_END):]
    if not rest.startswith("/"):
        return Index(vertex, texcoord, normal), rest
    rest = rest[1:]

    if rest.startswith("/"):
        rest = rest[1:]
        normal = parse_int_prefix(rest)
        rest = rest[_until(rest, _FIELD_END):]
        return Index(vertex, texcoord, normal), rest

    texcoord = parse_int_prefix(rest)
    rest = rest[_until(rest, _FIELD_END):]
    if not rest.startswith("/"):
        return Index(vertex, texcoord, normal), rest

    rest = rest[1:]
    normal = parse_int_prefix(rest)
    rest = rest[_until(rest, _FIELD_END):]
    return Index(vertex, texcoord, normal), rest


def _assemble(sign: int, mantissa: float, exponent: int) -> float:
    if not exponent:
        return sign * mantissa
    try:
        scaled = mantissa * 5.0**exponent
    except OverflowError:
        scaled = math.inf if mantissa else math.nan
    try:
        value = math.ldexp(scaled, exponent)
    except OverflowError:
        value = math.inf
    return sign * value


def try_parse_double(text: str) -> float | None:
    """Greedily parse a decimal number at the start of ``text``.

    Accepts ``[sign] digits ["." digits] [("e"|"E") [sign] digits]``; anything
    after the number is ignored. Returns ``None`` when no number can be read.
    """
    n = len(text)
    if n == 0:
        return None

    pos = 0
    sign = 1
    first = text[0]
    if first in "+-":
        sign = -1 if first == "-" else 1
        pos = 1
    elif not _is_digit(first):
        return None

    mantissa = 0.0
    read = 0
    while pos < n and _is_digit(text[pos]):
        mantissa = mantissa * 10 + (ord(text[pos]) - 48)
        pos += 1
        read += 1
    if read == 0:
        return None
    if pos >= n:
        return _assemble(sign, mantissa, 0)

    c = text[pos]
    if c == ".":
        pos += 1
        frac = 1.0
        while pos < n and _is_digit(text[pos]):
            frac *= 0.1
            mantissa += (ord(text[pos]) - 48) * frac
            pos += 1
    elif c not in "eE":
        return _assemble(sign, mantissa, 0)

    exponent = 0
    if pos < n and text[pos] in "eE":
        pos += 1
        exp_sign = 1
        if pos < n and text[pos] in "+-":
            exp_sign = -1 if text[pos] == "-" else 1
            pos += 1
        elif not (pos < n and _is_digit(text[pos])):
            return None
        read = 0
        while pos < n and _is_digit(text[pos]):
            exponent = exponent * 10 + (ord(text[pos]) - 48)
            pos += 1
            read += 1
        if read == 0:
            return None
        exponent *= exp_sign

    return _assemble(sign, mantissa, exponent)


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def parse_float(text: str) -> tuple[float, str]:
    """Parse one single-precision number after leading blanks.

    An unparsable token yields 0.0. Returns the value and the rest.
    """
    text = _skip_space(text)
    end = _until(text, _TOKEN_END)
    value = try_parse_double(text[:end])
    return _to_float32(0.0 if value is None else value), text[end:]


def parse_floats(text: str, count: int) -> tuple[tuple[float, ...], str]:
    """Parse ``count`` numbers in a row; return them and the rest."""
    values = []
    for _ in range(count):
        value, text = parse_float(text)
        values.append(value)
    return tuple(values), text


def split_token(text: str) -> tuple[str, str]:
    """Return the next blank-delimited token and the rest of the text."""
    text = _skip_space(text)
    end = _until(text, _TOKEN_END)
    return text[:end], text[end:]