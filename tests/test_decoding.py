import base64
import json
import math
import struct

import pytest

from easyjson.decoding import Decoder
from easyjson.lexer import LexerError


def test_integer_reads_value():
    d = Decoder(b"123")
    assert d.integer(64, True) == 123
    assert d.error() is None


def test_integer_negative_signed():
    d = Decoder(b"-45")
    assert d.integer(16, True) == -45
    assert d.ok()


def test_integer_out_of_range_is_clamped_and_reported():
    d = Decoder(b"300")
    assert d.integer(8, True) == 127
    err = d.error()
    assert isinstance(err, LexerError)
    assert err.offset == 0
    assert err.data == "300"


def test_unsigned_rejects_sign():
    d = Decoder(b"-1")
    assert d.integer(8, False) == 0
    assert isinstance(d.error(), LexerError)


def test_integer_rejects_fraction():
    d = Decoder(b"1.5")
    assert d.integer(64, True) == 0
    assert isinstance(d.error(), LexerError)
    assert d.error().data == "1.5"


def test_integer_on_string_token_fails():
    d = Decoder(b'"12"')
    assert d.integer(64, True) == 0
    assert d.error().reason == "expected number"


def test_multiple_errors_are_collected():
    d = Decoder(b"[300,1]", use_multiple_errors=True)
    d.delim("[")
    values = []
    while not d.is_delim("]"):
        values.append(d.integer(8, False))
        d.want_comma()
    d.delim("]")
    assert d.error() is None
    assert len(d.non_fatal_errors()) == 1
    assert values[1] == 1
    assert d.non_fatal_errors()[0].data == "300"


def test_integer_str():
    d = Decoder(b'"42"')
    assert d.integer_str(32, True) == 42
    assert d.ok()


def test_integer_str_invalid():
    d = Decoder(b'"4x"')
    assert d.integer_str(32, True) == 0
    assert d.error().data == "4x"


def test_float64():
    d = Decoder(b"1.5")
    assert d.float64() == 1.5
    assert d.ok()


def test_float32_rounds_to_single_precision():
    d = Decoder(b"0.1")
    value = d.float32()
    assert struct.unpack("<f", struct.pack("<f", value))[0] == value
    assert value != 0.1
    assert abs(value - 0.1) < 1e-7


def test_float64_overflow_reported():
    d = Decoder(b"1e400")
    assert d.float64() == math.inf
    assert isinstance(d.error(), LexerError)


def test_float32_overflow_reported():
    d = Decoder(b"1e39")
    assert d.float32() == math.inf
    assert isinstance(d.error(), LexerError)


def test_float64_str():
    d = Decoder(b'"2.5"')
    assert d.float64_str() == 2.5
    assert d.ok()


def test_float64_str_invalid():
    d = Decoder(b'"abc"')
    assert d.float64_str() == 0.0
    assert d.error().data == "abc"


def test_float32_str():
    d = Decoder(b'"0.5"')
    assert d.float32_str() == 0.5


def test_bool_true_and_false():
    assert Decoder(b"true").bool() is True
    assert Decoder(b"false").bool() is False


def test_bool_wrong_token():
    d = Decoder(b"1")
    assert d.bool() is False
    assert d.error().reason == "expected bool"


def test_string_intern_returns_same_object():
    a = Decoder(b'"some interned key"').string_intern()
    b = Decoder(b'"some interned key"').string_intern()
    assert a == "some interned key"
    assert a is b


def test_bytes_round_trip():
    payload = b"hello\x00\xff world"
    data = b'"' + base64.b64encode(payload) + b'"'
    d = Decoder(data)
    assert d.bytes() == payload
    assert d.ok()


def test_bytes_invalid_base64():
    d = Decoder(b'"!!!"')
    assert d.bytes() is None
    assert isinstance(d.error(), LexerError)


def test_bytes_wrong_token():
    d = Decoder(b"12")
    assert d.bytes() is None
    assert d.error().reason == "expected string"


@pytest.mark.parametrize(
    "data, expected",
    [(b"1.5e3", "1.5e3"), (b'"12"', "12"), (b"null", "")],
)
def test_json_number(data, expected):
    d = Decoder(data)
    assert d.json_number() == expected
    assert d.ok()


def test_json_number_rejects_bool():
    d = Decoder(b"true")
    assert d.json_number() == ""
    assert d.error().reason == "syntax error"


def test_interface_matches_json_loads():
    data = b'{"a":[1,"x",true,null],"b":{},"c":-2.5e2,"d":"\\u00e9"}'
    d = Decoder(data)
    assert d.interface() == json.loads(data)
    assert d.ok()


def test_interface_scalars():
    assert Decoder(b'"s"').interface() == "s"
    assert Decoder(b"null").interface() is None
    assert Decoder(b"false").interface() is False


def test_interface_trailing_comma_fails():
    d = Decoder(b'{"a":1,}')
    assert d.interface() is None
    assert isinstance(d.error(), LexerError)


def test_interface_unbalanced_close():
    d = Decoder(b"}")
    assert d.interface() is None
    assert d.error().reason == "syntax error"


def test_interface_empty_input():
    d = Decoder(b"")
    assert d.interface() is None
    assert isinstance(d.error(), EOFError)


def test_interface_then_consumed():
    d = Decoder(b"[1, 2]  x")
    assert d.interface() == [1.0, 2.0]
    d.consumed()
    assert isinstance(d.error(), LexerError)