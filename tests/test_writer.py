import base64
import io
import json
import math
import struct

import pytest

from easyjson.writer import Flags, Writer


def _build(action, *args, **writer_kwargs):
    w = Writer(**writer_kwargs)
    getattr(w, action)(*args)
    return bytes(w.build_bytes())


def _f32(value):
    return struct.unpack("<f", struct.pack("<f", value))[0]


def test_raw_byte_and_raw_string():
    w = Writer()
    w.raw_byte(ord("["))
    w.raw_string("1,2")
    w.raw_byte("]")
    assert bytes(w.build_bytes()) == b"[1,2]"


def test_raw_appends_data():
    assert _build("raw", b'{"a":1}') == b'{"a":1}'


def test_raw_empty_is_null():
    assert _build("raw", b"") == b"null"


def test_raw_error_is_raised_by_build_bytes():
    w = Writer()
    err = ValueError("boom")
    w.raw(b"1", err)
    assert w.error is err
    with pytest.raises(ValueError, match="boom"):
        w.build_bytes()


def test_raw_ignored_after_error():
    w = Writer()
    w.raw(None, RuntimeError("first"))
    w.raw(b"2", RuntimeError("second"))
    assert str(w.error) == "first"
    assert w.size() == 0


def test_raw_text_quotes_and_escapes():
    out = _build("raw_text", b'a"b')
    assert json.loads(out) == 'a"b'
    assert out.startswith(b'"')


def test_raw_text_empty_is_null():
    assert _build("raw_text", b"") == b"null"


def test_raw_text_error_recorded():
    w = Writer()
    w.raw_text(b"x", KeyError("k"))
    with pytest.raises(KeyError):
        w.read_closer()


def test_base64_none_is_null():
    assert _build("base64_bytes", None) == b"null"


@pytest.mark.parametrize("data", [b"", b"a", b"ab", b"abc", bytes(range(256))])
def test_base64_round_trip(data):
    out = _build("base64_bytes", data)
    assert base64.b64decode(json.loads(out)) == data


@pytest.mark.parametrize("n", [0, 1, -1, 255, -128, 2**63 - 1, -(2**63), 2**64 - 1])
def test_integer(n):
    assert _build("integer", n) == str(n).encode()


@pytest.mark.parametrize("n", [0, -42, 2**64 - 1])
def test_integer_str(n):
    out = _build("integer_str", n)
    assert json.loads(out) == str(n)


def test_bool():
    w = Writer()
    w.bool(True)
    w.raw_byte(",")
    w.bool(False)
    assert bytes(w.build_bytes()) == b"true,false"


@pytest.mark.parametrize(
    "value", [0.0, 1.0, -1.5, 0.1, 1 / 3, 123456.0, 1e300, 5e-324, 2.5e-5, 1e21]
)
def test_float64_round_trip(value):
    out = _build("float64", value)
    assert float(out) == value


def test_float64_exponent_forms():
    assert _build("float64", 1e21) == b"1e+21"
    assert _build("float64", 0.00001) == b"1e-05"
    assert _build("float64", 123456.0) == b"123456"


def test_float64_zero():
    assert _build("float64", 0.0) == b"0"


def test_float64_infinity():
    assert _build("float64", math.inf) == b"+Inf"


def test_float64_str_matches_plain():
    plain = _build("float64", 2.75)
    quoted = _build("float64_str", 2.75)
    assert quoted == b'"' + plain + b'"'


def test_float32_simple():
    assert _build("float32", 0.1) == b"0.1"


@pytest.mark.parametrize("value", [0.1, 1 / 3, 3.4e38, 1e-40, -7.25, 16777217.0])
def test_float32_round_trip(value):
    out = _build("float32", value)
    assert _f32(float(out)) == _f32(value)


def test_float32_shorter_than_float64():
    assert len(_build("float32", 1 / 3)) < len(_build("float64", 1 / 3))


def test_float32_str_matches_plain():
    plain = _build("float32", 1.25)
    assert _build("float32_str", 1.25) == b'"' + plain + b'"'


@pytest.mark.parametrize(
    "text", ["", "plain", 'quote"back\\slash', "tab\tnl\nret\r", "ünïcödé ☃", "\x00\x01\x1f"]
)
def test_string_round_trip(text):
    assert json.loads(_build("string", text)) == text


def test_string_short_escapes():
    assert _build("string", "\t") == b'"\\t"'


def test_string_control_char_uses_unicode_escape():
    out = _build("string", "\x01")
    assert out.startswith(b'"\\u00')
    assert json.loads(out) == "\x01"


def test_string_escapes_html_by_default():
    out = _build("string", "<a&b>")
    assert b"<" not in out and b">" not in out and b"&" not in out
    assert json.loads(out) == "<a&b>"


def test_string_no_escape_html():
    out = _build("string", "<a&b>", no_escape_html=True)
    assert out == b'"<a&b>"'


def test_string_line_separators_escaped():
    out = _build("string", "a\u2028b\u2029")
    assert b"\\u202" in out
    assert "\u2028".encode() not in out
    assert json.loads(out) == "a\u2028b\u2029"


def test_string_invalid_utf8_replaced():
    out = _build("string", b"ok\xffend")
    assert b"\\ufffd" in out
    assert json.loads(out) == "ok\ufffdend"


def test_size_and_dump_to():
    w = Writer()
    for _ in range(500):
        w.string("test")
    expected_size = w.size()
    sink = io.BytesIO()
    written = w.dump_to(sink)
    assert written == expected_size == len(sink.getvalue())
    assert sink.getvalue() == b'"test"' * 500
    assert w.size() == 0


def test_read_closer_returns_content():
    w = Writer()
    for i in range(300):
        w.integer(i)
    reader = w.read_closer()
    data = reader.read()
    reader.close()
    assert data == "".join(str(i) for i in range(300)).encode()


def test_build_bytes_reuses_buffer():
    w = Writer()
    w.raw_string("abc")
    target = bytearray(b"old content")
    result = w.build_bytes(target)
    assert result is target
    assert bytes(target) == b"abc"


def test_flags_combination():
    w = Writer(flags=Flags.NIL_MAP_AS_EMPTY | Flags.NIL_SLICE_AS_EMPTY)
    assert Flags.NIL_SLICE_AS_EMPTY in w.flags
    assert int(w.flags) == Flags.NIL_MAP_AS_EMPTY + Flags.NIL_SLICE_AS_EMPTY