"""Marshaling entry points, raw JSON values and unknown-field passthrough."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, MutableMapping, Protocol, runtime_checkable

from easyjson.decoding import Decoder
from easyjson.lexer import Lexer
from easyjson.writer import Writer

_NULL = b"null"


@runtime_checkable
class Marshaler(Protocol):
    """An object that writes itself as JSON."""

    def marshal_easy_json(self, w: Writer) -> None: ...


@runtime_checkable
class Unmarshaler(Protocol):
    """An object that reads itself from JSON."""

    def unmarshal_easy_json(self, lexer: Lexer) -> None: ...


def _encode(v: Marshaler) -> Writer:
    w = Writer()
    v.marshal_easy_json(w)
    return w


def marshal(v: Marshaler | None) -> bytes:
    """Return the JSON encoding of ``v``; None encodes as null."""
    if v is None:
        return _NULL
    return bytes(_encode(v).build_bytes())


def marshal_to_writer(v: Marshaler | None, w: BinaryIO) -> int:
    """Write the JSON encoding of ``v`` to ``w`` and return the bytes written."""
    if v is None:
        n = w.write(_NULL)
        return len(_NULL) if n is None else n
    return _encode(v).dump_to(w)


def marshal_to_http_response(
    v: Marshaler | None, headers: MutableMapping[str, str], stream: BinaryIO
) -> int:
    """Set Content-Type and Content-Length in ``headers`` and send ``v`` to ``stream``.

    A marshaling error is raised before the headers or the stream are touched,
    so the caller can still answer with an error status.
    """
    if v is None:
        headers["Content-Type"] = "application/json"
        headers["Content-Length"] = str(len(_NULL))
        n = stream.write(_NULL)
        return len(_NULL) if n is None else n

    jw = _encode(v)
    if jw.error is not None:
        raise jw.error
    headers["Content-Type"] = "application/json"
    headers["Content-Length"] = str(jw.size())
    return jw.dump_to(stream)


def unmarshal(data: bytes | bytearray | str, v: Unmarshaler) -> None:
    """Decode the JSON in ``data`` into ``v``; raise the first error met."""
    lexer = Decoder(data)
    v.unmarshal_easy_json(lexer)
    error = lexer.error()
    if error is not None:
        raise error


def unmarshal_from_reader(r: BinaryIO, v: Unmarshaler) -> None:
    """Read everything from ``r`` and decode it as JSON into ``v``."""
    unmarshal(r.read(), v)


@dataclass
class RawMessage:
    """A raw piece of JSON kept unparsed and written out as is."""

    data: bytes = b""

    def marshal_easy_json(self, w: Writer) -> None:
        """Write the raw JSON, or null when empty."""
        if not self.data:
            w.raw_string("null")
        else:
            w.raw(self.data, None)

    def unmarshal_easy_json(self, lexer: Lexer) -> None:
        """Take the next value from the lexer as raw JSON."""
        raw = lexer.raw()
        self.data = b"" if raw is None else bytes(raw)

    def marshal_json(self) -> bytes:
        """The raw JSON, or null when empty."""
        return self.data or _NULL

    def unmarshal_json(self, data: bytes | bytearray) -> None:
        """Keep ``data`` verbatim."""
        self.data = bytes(data)

    def is_defined(self) -> bool:
        """True if any JSON is held."""
        return len(self.data) > 0


@dataclass
class UnknownFieldsProxy:
    """Collects unknown object members while decoding and writes them back."""

    unknown_fields: dict[str, bytes] = field(default_factory=dict)

    def unmarshal_unknown(self, lexer: Lexer, key: str) -> None:
        """Store the next value under ``key`` as raw JSON."""
        raw = lexer.raw()
        self.unknown_fields[key] = b"" if raw is None else bytes(raw)

    def marshal_unknowns(self, out: Writer, first: bool) -> None:
        """Write the stored members; ``first`` tells whether no member precedes them."""
        for key, value in self.unknown_fields.items():
            if first:
                first = False
            else:
                out.raw_byte(",")
            out.string(key)
            out.raw_byte(":")
            out.raw(value, None)