"""A JSON lexer tuned for parsers that know which kind of value comes next."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass

_MAX_ERROR_CONTEXT_LEN = 13

_COLON = ord(":")
_COMMA = ord(",")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_MINUS = ord("-")
_PLUS = ord("+")
_DOT = ord(".")
_WHITESPACE = frozenset(b" \t\r\n")
_OPENERS = frozenset(b"{[")
_CLOSERS = frozenset(b"}]")
_DIGITS = frozenset(b"0123456789")
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_TOKEN_END = frozenset(b" \t\r\n[]{},:")

_SIMPLE_ESCAPES = {
    ord('"'): ord('"'),
    ord("/"): ord("/"),
    ord("\\"): ord("\\"),
    ord("b"): ord("\b"),
    ord("f"): ord("\f"),
    ord("n"): ord("\n"),
    ord("r"): ord("\r"),
    ord("t"): ord("\t"),
}

_REPLACEMENT_CHAR = 0xFFFD


class LexerError(Exception):
    """A problem found while parsing JSON data."""

    def __init__(self, reason: str, offset: int = 0, data: str = "") -> None:
        self.reason = reason
        self.offset = offset
        self.data = data
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"parse error: {self.reason} near offset {self.offset} of '{self.data}'"


class TokenKind(enum.Enum):
    """Kind of a scanned token."""

    UNDEF = 0  # No token.
    DELIM = 1  # One of '{', '}', '[' or ']'.
    STRING = 2  # A string literal.
    NUMBER = 3  # A number literal.
    BOOL = 4  # true or false.
    NULL = 5  # The null keyword.


@dataclass
class _Token:
    kind: TokenKind = TokenKind.UNDEF
    bool_value: bool = False
    byte_value_cloned: bool = False
    byte_value: bytes = b""
    delim_value: int = 0


def _text(data: bytes) -> str:
    """Decode token bytes, keeping invalid UTF-8 as surrogate escapes."""
    return bytes(data).decode("utf-8", errors="surrogateescape")


def _context(data: bytes) -> str:
    return bytes(data).decode("utf-8", errors="replace")


def _is_token_end(c: int) -> bool:
    return c in _TOKEN_END


def _reject_constant(name: str) -> float:
    raise ValueError(f"invalid literal {name}")


def _is_valid_json(data: bytes) -> bool:
    try:
        json.loads(_text(data), parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return False
    return True


def _find_string_len(data: bytes, begin: int) -> tuple[bool, int]:
    """Find the closing quote of a string literal starting at ``begin``.

    The length is exact when the literal holds no escapes.
    """
    pos = begin
    while True:
        idx = data.find(b'"', pos)
        if idx == -1:
            return False, len(data) - pos
        if idx == pos or data[idx - 1] != _BACKSLASH:
            return True, idx - begin
        # An even number of backslashes means the quote is not escaped.
        count = 1
        while idx - count - 1 >= pos and data[idx - count - 1] == _BACKSLASH:
            count += 1
        if count % 2 == 0:
            return True, idx - begin
        pos = idx + 1


def _getu4(data: bytes, i: int) -> int:
    """Decode a \\uXXXX sequence at ``i``; -1 if there is none."""
    if len(data) - i < 6 or data[i] != _BACKSLASH or data[i + 1] != ord("u"):
        return -1
    digits = data[i + 2:i + 6]
    if not all(c in _HEX_DIGITS for c in digits):
        return -1
    return int(digits, 16)


def _decode_escape(data: bytes, i: int) -> tuple[int, int]:
    """Decode the escape sequence at ``i``; return the code point and its length."""
    if len(data) - i < 2:
        raise ValueError("incorrect escape symbol \\ at the end of token")
    c = data[i + 1]
    simple = _SIMPLE_ESCAPES.get(c)
    if simple is not None:
        return simple, 2
    if c == ord("u"):
        rune = _getu4(data, i)
        if rune < 0:
            raise ValueError("incorrectly escaped \\uXXXX sequence")
        read = 6
        if 0xD800 <= rune < 0xE000:
            low = _getu4(data, i + read)
            if 0xD800 <= rune < 0xDC00 and 0xDC00 <= low < 0xE000:
                rune = 0x10000 + (((rune - 0xD800) << 10) | (low - 0xDC00))
                read += 6
            else:
                rune = _REPLACEMENT_CHAR
        return rune, read
    raise ValueError("incorrectly escaped bytes")


class Lexer:
    """Iterates over the JSON tokens of a byte string.

    Errors are recorded rather than raised: ``ok()`` tells whether scanning
    may go on, ``error()`` returns the fatal error, if any.
    """

    def __init__(self, data: bytes | bytearray | str, use_multiple_errors: bool = False) -> None:
        self.data = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self.use_multiple_errors = use_multiple_errors
        self._start = 0
        self._pos = 0
        self._token = _Token()
        self._first_element = False
        self._want_sep = 0
        self._fatal: Exception | None = None
        self._errors: list[LexerError] = []

    # Scanning.

    def fetch_token(self) -> None:
        """Scan the input for the next token."""
        token = self._token
        data = self.data
        token.kind = TokenKind.UNDEF
        self._start = self._pos

        if len(data) < self._pos:
            self._err_parse("Unexpected end of data")
            return

        while self._pos < len(data):
            c = data[self._pos]
            if c in (_COLON, _COMMA):
                if self._want_sep != c:
                    self._err_syntax()
                    return
                self._pos += 1
                self._start += 1
                self._want_sep = 0
            elif c in _WHITESPACE:
                self._pos += 1
                self._start += 1
            elif c == _QUOTE:
                if self._want_sep:
                    self._err_syntax()
                token.kind = TokenKind.STRING
                self._fetch_string()
                return
            elif c in _OPENERS:
                if self._want_sep:
                    self._err_syntax()
                self._first_element = True
                token.kind = TokenKind.DELIM
                token.delim_value = c
                self._pos += 1
                return
            elif c in _CLOSERS:
                if not self._first_element and self._want_sep != _COMMA:
                    self._err_syntax()
                self._want_sep = 0
                token.kind = TokenKind.DELIM
                token.delim_value = c
                self._pos += 1
                return
            elif c in _DIGITS or c == _MINUS:
                if self._want_sep:
                    self._err_syntax()
                token.kind = TokenKind.NUMBER
                self._fetch_number()
                return
            elif c == ord("n"):
                if self._want_sep:
                    self._err_syntax()
                token.kind = TokenKind.NULL
                self._fetch_keyword(b"null")
                return
            elif c == ord("t"):
                if self._want_sep:
                    self._err_syntax()
                token.kind = TokenKind.BOOL
                token.bool_value = True
                self._fetch_keyword(b"true")
                return
            elif c == ord("f"):
                if self._want_sep:
                    self._err_syntax()
                token.kind = TokenKind.BOOL
                token.bool_value = False
                self._fetch_keyword(b"false")
                return
            else:
                self._err_syntax()
                return
        self._fatal = EOFError("EOF")

    def _fetch_keyword(self, word: bytes) -> None:
        data = self.data
        end = self._pos + len(word)
        if (
            end > len(data)
            or data[self._pos:end] != word
            or (end != len(data) and not _is_token_end(data[end]))
        ):
            self._err_syntax()
            return
        self._pos = end

    def _fetch_number(self) -> None:
        has_e = after_e = has_dot = False
        self._pos += 1
        data = self.data
        for i, c in enumerate(memoryview(data)[self._pos:]):
            if c in _DIGITS:
                after_e = False
            elif c == _DOT and not has_dot:
                has_dot = True
            elif c in (ord("e"), ord("E")) and not has_e:
                has_e = has_dot = after_e = True
            elif c in (_PLUS, _MINUS) and after_e:
                after_e = False
            else:
                self._pos += i
                if not _is_token_end(c):
                    self._err_syntax()
                else:
                    self._token.byte_value = data[self._start:self._pos]
                return
        self._pos = len(data)
        self._token.byte_value = data[self._start:]

    def _fetch_string(self) -> None:
        self._pos += 1
        valid, length = _find_string_len(self.data, self._pos)
        if not valid:
            self._pos += length
            self._err_parse("unterminated string literal")
            return
        self._token.byte_value = self.data[self._pos:self._pos + length]
        self._pos += length + 1

    def _unescape_string_token(self) -> bool:
        """Replace escapes in the current string token; False on a bad escape."""
        data = self._token.byte_value
        if b"\\" not in data:
            return True
        out = bytearray()
        p = 0
        while (i := data.find(b"\\", p)) != -1:
            try:
                rune, size = _decode_escape(data, i)
            except ValueError as exc:
                self._err_parse(str(exc))
                return False
            out += data[p:i]
            out += chr(rune).encode("utf-8")
            p = i + size
        out += data[p:]
        self._token.byte_value = bytes(out)
        self._token.byte_value_cloned = True
        return True

    def _scan_token(self) -> None:
        if self._token.kind is not TokenKind.UNDEF or self._fatal is not None:
            return
        self.fetch_token()

    def _fetch_if_needed(self) -> None:
        if self._token.kind is TokenKind.UNDEF and self.ok():
            self.fetch_token()

    def _consume(self) -> None:
        self._token.kind = TokenKind.UNDEF
        self._token.byte_value_cloned = False
        self._token.delim_value = 0

    # Errors.

    def ok(self) -> bool:
        """True if no error, end of input included, was met while scanning."""
        return self._fatal is None

    def error(self) -> Exception | None:
        """The fatal error, if any."""
        return self._fatal

    def _err_parse(self, what: str) -> None:
        if self._fatal is not None:
            return
        data = self.data
        if len(data) - self._pos <= _MAX_ERROR_CONTEXT_LEN:
            context = _context(data)
        else:
            end = self._pos + _MAX_ERROR_CONTEXT_LEN - 3
            context = _context(data[self._pos:end]) + "..."
        self._fatal = LexerError(what, self._pos, context)

    def _err_syntax(self) -> None:
        self._err_parse("syntax error")

    def _err_invalid_token(self, expected: str) -> None:
        if self._fatal is not None:
            return
        if self.use_multiple_errors:
            self._pos = self._start
            self._consume()
            self.skip_recursive()
            if expected == "[":
                self._token.delim_value = ord("]")
                self._token.kind = TokenKind.DELIM
            elif expected == "{":
                self._token.delim_value = ord("}")
                self._token.kind = TokenKind.DELIM
            self._add_nonfatal_error(
                LexerError(
                    f"expected {expected}",
                    self._start,
                    _context(self.data[self._start:self._pos]),
                )
            )
            return
        value = self._token.byte_value
        if len(value) <= _MAX_ERROR_CONTEXT_LEN:
            context = _context(value)
        else:
            context = _context(value[:_MAX_ERROR_CONTEXT_LEN - 3]) + "..."
        self._fatal = LexerError(f"expected {expected}", self._pos, context)

    def add_error(self, e: Exception) -> None:
        """Record ``e`` as the fatal error unless one is already recorded."""
        if self._fatal is None:
            self._fatal = e

    def add_non_fatal_error(self, e: Exception) -> None:
        """Record a semantic error about the current token."""
        self._add_nonfatal_error(
            LexerError(str(e), self._start, _context(self.data[self._start:self._pos]))
        )

    def _add_nonfatal_error(self, err: LexerError) -> None:
        if self.use_multiple_errors:
            # Errors at the same offset are reported once.
            if self._errors and self._errors[-1].offset == err.offset:
                return
            self._errors.append(err)
            return
        self._fatal = err

    def non_fatal_errors(self) -> list[LexerError]:
        """Semantic errors collected while parsing went on."""
        return list(self._errors)

    # Navigation.

    def position(self) -> int:
        """Current unscanned position in the input."""
        return self._pos

    def delim(self, c: str | int) -> None:
        """Consume the next token, which must be the delimiter ``c``."""
        code = ord(c) if isinstance(c, str) else c
        self._fetch_if_needed()
        if not self.ok() or self._token.delim_value != code:
            self._consume()
            self._err_invalid_token(chr(code))
        else:
            self._consume()

    def is_delim(self, c: str | int) -> bool:
        """True if scanning failed or the next token is the delimiter ``c``."""
        code = ord(c) if isinstance(c, str) else c
        self._fetch_if_needed()
        return not self.ok() or self._token.delim_value == code

    def null(self) -> None:
        """Consume the next token, which must be null."""
        self._fetch_if_needed()
        if not self.ok() or self._token.kind is not TokenKind.NULL:
            self._err_invalid_token("null")
        self._consume()

    def is_null(self) -> bool:
        """True if the next token is the null keyword."""
        self._fetch_if_needed()
        return self.ok() and self._token.kind is TokenKind.NULL

    def skip(self) -> None:
        """Skip a single token."""
        self._fetch_if_needed()
        self._consume()

    def skip_recursive(self) -> None:
        """Skip the next array or object whole, or a single other token."""
        self._scan_token()
        start_pos = self._start
        delim = self._token.delim_value
        if delim == ord("{"):
            open_c, close_c = ord("{"), ord("}")
        elif delim == ord("["):
            open_c, close_c = ord("["), ord("]")
        else:
            self._consume()
            return
        self._consume()

        data = self.data
        level = 1
        in_quotes = False
        was_escape = False
        for i, c in enumerate(memoryview(data)[self._pos:]):
            if c == open_c and not in_quotes:
                level += 1
            elif c == close_c and not in_quotes:
                level -= 1
                if level == 0:
                    self._pos += i + 1
                    if not _is_valid_json(data[start_pos:self._pos]):
                        self._pos = len(data)
                        self._fatal = LexerError(
                            "skipped array/object json value is invalid", self._pos, ""
                        )
                    return
            elif c == _BACKSLASH and in_quotes:
                was_escape = not was_escape
                continue
            elif c == _QUOTE and in_quotes:
                in_quotes = was_escape
            elif c == _QUOTE:
                in_quotes = True
            was_escape = False
        self._pos = len(data)
        self._fatal = LexerError(
            "EOF reached while skipping array/object or token", self._pos, ""
        )

    def raw(self) -> bytes | None:
        """Return the next value, recursively, as its raw JSON text."""
        self.skip_recursive()
        if not self.ok():
            return None
        return self.data[self._start:self._pos]

    def is_start(self) -> bool:
        """True if nothing of the input has been scanned yet."""
        return self._pos == 0

    def consumed(self) -> None:
        """Check that only whitespace remains after the top-level value."""
        data = self.data
        if self._pos > len(data) or not self.ok():
            return
        for c in data[self._pos:]:
            if c not in _WHITESPACE:
                self.add_error(
                    LexerError(
                        f"invalid character '{chr(c)}' after top-level value",
                        self._pos,
                        _context(data[self._pos:]),
                    )
                )
                return
            self._pos += 1
            self._start += 1

    # Strings.

    def _unsafe_string(self, skip_unescape: bool) -> tuple[str, bytes]:
        self._fetch_if_needed()
        if not self.ok() or self._token.kind is not TokenKind.STRING:
            self._err_invalid_token("string")
            return "", b""
        if not skip_unescape and not self._unescape_string_token():
            self._err_invalid_token("string")
            return "", b""
        value = self._token.byte_value
        self._consume()
        return _text(value), value

    def _number(self) -> str:
        self._fetch_if_needed()
        if not self.ok() or self._token.kind is not TokenKind.NUMBER:
            self._err_invalid_token("number")
            return ""
        value = _text(self._token.byte_value)
        self._consume()
        return value

    def unsafe_string(self) -> str:
        """Read a string literal."""
        return self._unsafe_string(False)[0]

    def unsafe_bytes(self) -> bytes:
        """Read a string literal as its unescaped UTF-8 bytes."""
        return self._unsafe_string(False)[1]

    def unsafe_field_name(self, skip_unescape: bool) -> str:
        """Read an object member name, optionally leaving escapes as they are."""
        return self._unsafe_string(skip_unescape)[0]

    def string(self) -> str:
        """Read a string literal."""
        return self._unsafe_string(False)[0]

    # Separators.

    def want_comma(self) -> None:
        """Require a comma before the next token."""
        self._want_sep = _COMMA
        self._first_element = False

    def want_colon(self) -> None:
        """Require a colon before the next token."""
        self._want_sep = _COLON
        self._first_element = False