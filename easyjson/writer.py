"""JSON writer that serializes values into a chunked buffer."""

from __future__ import annotations

import base64
import enum
import math
import re
import struct
from dataclasses import dataclass, field
from decimal import Decimal
from typing import BinaryIO

from easyjson.buffer import Buffer, ChunkReader


class Flags(enum.IntFlag):
    """Encoding options carried by a writer and honoured by encoders."""

    NIL_MAP_AS_EMPTY = 1  # Encode a missing map as '{}' rather than 'null'.
    NIL_SLICE_AS_EMPTY = 2  # Encode a missing list as '[]' rather than 'null'.


_ESCAPE_HTML_RE = re.compile(r'[\x00-\x1f"\\&<>\u2028\u2029\ud800-\udfff]')
_ESCAPE_PLAIN_RE = re.compile(r'[\x00-\x1f"\\\u2028\u2029\ud800-\udfff]')

_SHORT_ESCAPES = {
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
    '"': '\\"',
}


def _escape_char(match: re.Match[str]) -> str:
    char = match.group()
    short = _SHORT_ESCAPES.get(char)
    if short is not None:
        return short
    code = ord(char)
    if 0xD800 <= code <= 0xDFFF:
        # Invalid UTF-8 input or a lone surrogate.
        return "\\ufffd"
    return f"\\u{code:04x}"


def _as_text(s: str | bytes | bytearray | memoryview) -> str:
    if isinstance(s, str):
        return s
    return bytes(s).decode("utf-8", errors="surrogateescape")


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _shortest32(value: float) -> str:
    for precision in range(1, 10):
        text = f"{value:.{precision - 1}e}"
        if _to_float32(float(text)) == value:
            return text
    return repr(value)


def _decompose(text: str) -> tuple[str, int]:
    """Split a decimal literal into significant digits and decimal point position."""
    _, digit_tuple, exponent = Decimal(text).as_tuple()
    dp = len(digit_tuple) + int(exponent)
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    return digits, dp


def _format_g(digits: str, dp: int) -> str:
    exp = dp - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        sign = "-" if exp < 0 else "+"
        return f"{mantissa}e{sign}{abs(exp):02d}"
    integer = digits[:dp].ljust(dp, "0") if dp > 0 else "0"
    frac_len = max(len(digits) - dp, 0)
    if not frac_len:
        return integer
    frac = "".join(
        digits[i] if 0 <= i < len(digits) else "0" for i in range(dp, dp + frac_len)
    )
    return f"{integer}.{frac}"


def _format_float(value: float, bits: int) -> str:
    """Shortest representation in the style of the %g verb."""
    value = float(value)
    if bits == 32:
        value = _to_float32(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    negative = math.copysign(1.0, value) < 0
    text = _shortest32(abs(value)) if bits == 32 else repr(abs(value))
    digits, dp = _decompose(text)
    body = _format_g(digits, dp) if digits else "0"
    return ("-" if negative else "") + body


@dataclass
class Writer:
    """A JSON writer appending encoded values to a chunked buffer."""

    flags: Flags = Flags(0)
    error: Exception | None = None
    buffer: Buffer = field(default_factory=Buffer)
    no_escape_html: bool = False

    def size(self) -> int:
        """Number of bytes written so far."""
        return self.buffer.size()

    def dump_to(self, out: BinaryIO) -> int:
        """Write the data to ``out``, reset the buffer and return the byte count."""
        return self.buffer.dump_to(out)

    def build_bytes(self, reuse: bytearray | None = None) -> bytes | bytearray:
        """Return the data as one byte string; raise the recorded error if any."""
        if self.error is not None:
            raise self.error
        return self.buffer.build_bytes(reuse)

    def read_closer(self) -> ChunkReader:
        """Return a reader over the data and reset the buffer."""
        if self.error is not None:
            raise self.error
        return self.buffer.read_closer()

    def raw_byte(self, c: int | str | bytes) -> None:
        """Append a single raw byte."""
        if isinstance(c, str):
            c = ord(c)
        elif isinstance(c, (bytes, bytearray)):
            c = c[0]
        self.buffer.append_byte(c)

    def raw_string(self, s: str) -> None:
        """Append a string verbatim."""
        self.buffer.append_string(s)

    def raw(self, data: bytes | str | None, error: Exception | None = None) -> None:
        """Append raw JSON, or record ``error`` if one is given."""
        if self.error is not None:
            return
        if error is not None:
            self.error = error
        elif data:
            if isinstance(data, str):
                self.buffer.append_string(data)
            else:
                self.buffer.append_bytes(data)
        else:
            self.raw_string("null")

    def raw_text(self, data: bytes | str | None, error: Exception | None = None) -> None:
        """Append text as a quoted JSON string, or record ``error`` if one is given."""
        if self.error is not None:
            return
        if error is not None:
            self.error = error
        elif data:
            self.string(data)
        else:
            self.raw_string("null")

    def base64_bytes(self, data: bytes | bytearray | None) -> None:
        """Append data as a base64-encoded JSON string; None becomes null."""
        if data is None:
            self.buffer.append_string("null")
            return
        self.buffer.append_byte(ord('"'))
        self.buffer.append_bytes(base64.b64encode(bytes(data)))
        self.buffer.append_byte(ord('"'))

    def integer(self, n: int) -> None:
        """Append an integer."""
        self.buffer.append_string(str(int(n)))

    def integer_str(self, n: int) -> None:
        """Append an integer enclosed in quotes."""
        self.buffer.append_string(f'"{int(n)}"')

    def float32(self, n: float) -> None:
        """Append a number with single precision."""
        self.buffer.append_string(_format_float(n, 32))

    def float32_str(self, n: float) -> None:
        """Append a single precision number enclosed in quotes."""
        self.buffer.append_string(f'"{_format_float(n, 32)}"')

    def float64(self, n: float) -> None:
        """Append a number with double precision."""
        self.buffer.append_string(_format_float(n, 64))

    def float64_str(self, n: float) -> None:
        """Append a double precision number enclosed in quotes."""
        self.buffer.append_string(f'"{_format_float(n, 64)}"')

    def bool(self, v: bool) -> None:
        """Append true or false."""
        self.buffer.append_string("true" if v else "false")

    def string(self, s: str | bytes | bytearray | memoryview) -> None:
        """Append a quoted, escaped JSON string."""
        pattern = _ESCAPE_PLAIN_RE if self.no_escape_html else _ESCAPE_HTML_RE
        escaped = pattern.sub(_escape_char, _as_text(s))
        self.buffer.append_bytes(f'"{escaped}"'.encode("utf-8"))