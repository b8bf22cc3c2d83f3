"""Typed value readers on top of the JSON lexer."""

from __future__ import annotations

import base64
import binascii
import math
import re
import struct
import sys
from typing import Any

from easyjson.lexer import Lexer, LexerError, TokenKind

_SIGNED_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_UNSIGNED_RE = re.compile(r"[0-9]+", re.ASCII)
_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII
)
_SPECIAL_FLOAT_RE = re.compile(r"[+-]?(?:inf|infinity)|nan", re.ASCII | re.IGNORECASE)

# More significant digits than any 64-bit integer has.
_MAX_INT_DIGITS = 25


def _syntax_error(s: str) -> str:
    return f'parsing "{s}": invalid syntax'


def _range_error(s: str) -> str:
    return f'parsing "{s}": value out of range'


def _parse_int(s: str, bits: int, signed: bool) -> tuple[int, str | None]:
    """Parse a decimal integer of the given width.

    Out-of-range values are clamped to the nearest bound and reported.
    """
    pattern = _SIGNED_RE if signed else _UNSIGNED_RE
    if not pattern.fullmatch(s):
        return 0, _syntax_error(s)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    negative = s.startswith("-")
    digits = s.lstrip("+-").lstrip("0")
    if len(digits) > _MAX_INT_DIGITS:
        return (low if negative else high), _range_error(s)
    value = int(s)
    if value > high:
        return high, _range_error(s)
    if value < low:
        return low, _range_error(s)
    return value, None


def _to_float32(value: float) -> float | None:
    """Round to single precision; None if the value overflows."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return None


def _parse_float(s: str, bits: int) -> tuple[float, str | None]:
    """Parse a decimal floating point number of the given precision."""
    if _SPECIAL_FLOAT_RE.fullmatch(s):
        return float(s), None
    if not _FLOAT_RE.fullmatch(s):
        return 0.0, _syntax_error(s)
    value = float(s)
    if math.isinf(value):
        return value, _range_error(s)
    if bits == 32:
        rounded = _to_float32(value)
        if rounded is None:
            return math.copysign(math.inf, value), _range_error(s)
        value = rounded
    return value, None


class Decoder(Lexer):
    """A lexer that reads typed values: numbers, booleans, bytes and any JSON."""

    def _report(self, reason: str, data: str) -> None:
        self._add_nonfatal_error(LexerError(reason, self._start, data))

    def _string_token(self) -> bool:
        """Check that the next token is a string and unescape it."""
        self._fetch_if_needed()
        if not self.ok() or self._token.kind is not TokenKind.STRING:
            self._err_invalid_token("string")
            return False
        if not self._unescape_string_token():
            self._err_invalid_token("string")
            return False
        return True

    def string_intern(self) -> str:
        """Read a string literal and intern it."""
        if not self._string_token():
            return ""
        value = sys.intern(self._token.byte_value.decode("utf-8", errors="surrogateescape"))
        self._consume()
        return value

    def bytes(self):
        """Read a string literal and decode it from standard base64."""
        if not self._string_token():
            return None
        encoded = self._token.byte_value.replace(b"\r", b"").replace(b"\n", b"")
        try:
            decoded = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            self._fatal = LexerError(str(exc))
            return None
        self._consume()
        return decoded

    def bool(self):
        """Read a true or false keyword."""
        self._fetch_if_needed()
        if not self.ok() or self._token.kind is not TokenKind.BOOL:
            self._err_invalid_token("bool")
            return False
        value = self._token.bool_value
        self._consume()
        return value

    def integer(self, bits: int, signed: bool) -> int:
        """Read a number literal as an integer of ``bits`` width."""
        s = self._number()
        if not self.ok():
            return 0
        value, problem = _parse_int(s, bits, signed)
        if problem is not None:
            self._report(problem, s)
        return value

    def integer_str(self, bits: int, signed: bool) -> int:
        """Read an integer of ``bits`` width enclosed in a string literal."""
        s, _ = self._unsafe_string(False)
        if not self.ok():
            return 0
        value, problem = _parse_int(s, bits, signed)
        if problem is not None:
            self._report(problem, s)
        return value

    def _float(self, bits: int) -> float:
        s = self._number()
        if not self.ok():
            return 0.0
        value, problem = _parse_float(s, bits)
        if problem is not None:
            self._report(problem, s)
        return value

    def _float_str(self, bits: int) -> float:
        s, _ = self._unsafe_string(False)
        if not self.ok():
            return 0.0
        value, problem = _parse_float(s, bits)
        if problem is not None:
            self._report(problem, s)
        return value

    def float32(self) -> float:
        """Read a number literal with single precision."""
        return self._float(32)

    def float32_str(self) -> float:
        """Read a single precision number enclosed in a string literal."""
        return self._float_str(32)

    def float64(self) -> float:
        """Read a number literal with double precision."""
        return self._float(64)

    def float64_str(self) -> float:
        """Read a double precision number enclosed in a string literal."""
        return self._float_str(64)

    def json_number(self) -> str:
        """Read a number, a string holding one, or null as number text."""
        self._fetch_if_needed()
        if not self.ok():
            self._err_invalid_token("json.Number")
            return ""
        kind = self._token.kind
        if kind is TokenKind.STRING:
            return self.string()
        if kind is TokenKind.NUMBER:
            raw = self.raw()
            return "" if raw is None else raw.decode("utf-8", errors="surrogateescape")
        if kind is TokenKind.NULL:
            self.null()
            return ""
        self._err_syntax()
        return ""

    def interface(self) -> Any:
        """Read any JSON value into dicts, lists, strings, floats, booleans and None."""
        self._fetch_if_needed()
        if not self.ok():
            return None
        kind = self._token.kind
        if kind is TokenKind.STRING:
            return self.string()
        if kind is TokenKind.NUMBER:
            return self.float64()
        if kind is TokenKind.BOOL:
            return self.bool()
        if kind is TokenKind.NULL:
            self.null()
            return None

        delim = self._token.delim_value
        if delim == ord("{"):
            self._consume()
            obj: dict[str, Any] = {}
            while not self.is_delim("}"):
                key = self.string()
                self.want_colon()
                obj[key] = self.interface()
                self.want_comma()
            self.delim("}")
            return obj if self.ok() else None
        if delim == ord("["):
            self._consume()
            items: list[Any] = []
            while not self.is_delim("]"):
                items.append(self.interface())
                self.want_comma()
            self.delim("]")
            return items if self.ok() else None
        self._err_syntax()
        return None