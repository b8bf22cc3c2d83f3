# easyjson

Low-level building blocks for writing and reading JSON explicitly, field by
field, without going through a generic object mapper.

## What is inside

- `easyjson.buffer`: `Buffer`, a chunked byte buffer whose chunks are
  pooled for reuse (`init(PoolConfig(...))` sets the start, pooled and maximum
  chunk sizes), and `ChunkReader`, a readable stream over a buffer's contents
  (`Buffer.read_closer()`).
- `easyjson.writer`: `Writer`, a JSON writer with methods for strings
  (`string`, which escapes `<`, `>` and `&` unless `no_escape_html` is set),
  integers (`integer`, `integer_str`), floats (`float32`, `float64` and their
  `_str` forms), `bool`, `base64_bytes` and raw fragments (`raw`, `raw_text`,
  `raw_byte`, `raw_string`). Output is collected with `build_bytes`,
  `dump_to` or `read_closer`. `Flags` (`NIL_MAP_AS_EMPTY`,
  `NIL_SLICE_AS_EMPTY`) is carried on the writer for encoders to consult.
- `easyjson.lexer`: `Lexer`, a JSON tokenizer for code that knows what it
  expects next (`delim`, `is_delim`, `null`, `is_null`, `string`,
  `unsafe_field_name`, `raw`, `skip`, `skip_recursive`, `consumed`,
  `want_comma`, `want_colon`). Errors are recorded, not raised: `ok()` and
  `error()` report them as `LexerError` with `reason`, `offset` and `data`.
  With `use_multiple_errors=True`, semantic errors are collected in
  `non_fatal_errors()` and parsing goes on.
- `easyjson.decoding`: `Decoder`, a `Lexer` with typed readers:
  `integer(bits, signed)`, `integer_str(bits, signed)`, `float32`, `float64`
  (and `_str` forms), `bool`, `bytes` (standard base64), `string_intern`,
  `json_number` and `interface` (any JSON value as dicts, lists, strings,
  floats, booleans and `None`).
- `easyjson.helpers`: `marshal`, `marshal_to_writer`,
  `marshal_to_http_response`, `unmarshal`, `unmarshal_from_reader`, the
  `Marshaler` and `Unmarshaler` protocols (`marshal_easy_json(w)` and
  `unmarshal_easy_json(lexer)`), `RawMessage` for unparsed JSON kept as is, and
  `UnknownFieldsProxy` for collecting and re-emitting unknown object members.
- `easyjson.naming`: field-name policies (`DefaultFieldNamer`,
  `SnakeCaseFieldNamer`, `LowerCamelCaseFieldNamer`, each taking a field name
  and an optional struct tag such as `json:"id,omitempty"`) and helpers
  `camel_to_snake`, `lower_first`, `join_function_name_parts`,
  `fix_pkg_path_vendoring`, `fix_alias_name`, `escape_tag` and `file_hash`.
- `easyjson.modpath`: `module_path` reads the module path out of `go.mod`
  text, `get_module_path` out of a `go.mod` file; `get_pkg_path` works out a
  package import path, asking `go env GOMOD` (when the `go` tool is installed)
  and otherwise looking under `GOPATH`.

## Example

```python
from easyjson.writer import Writer
from easyjson.decoding import Decoder

w = Writer()
w.raw_byte(ord("{"))
w.string("name")
w.raw_byte(ord(":"))
w.string("<b>")
w.raw_byte(ord("}"))
print(w.build_bytes())          # b'{"name":"\\u003cb\\u003e"}'

d = Decoder(b'{"n": 42}')
d.delim(ord("{"))
key = d.string()                # "n"
d.want_colon()
value = d.integer(64, True)     # 42
d.want_comma()
d.delim(ord("}"))
assert d.ok()
```

Marshaling your own types:

```python
from easyjson.helpers import marshal, unmarshal

class Point:
    def __init__(self, x=0, y=0):
        self.x, self.y = x, y

    def marshal_easy_json(self, w):
        w.raw_string('{"x":')
        w.integer(self.x)
        w.raw_string(',"y":')
        w.integer(self.y)
        w.raw_byte(ord("}"))

    def unmarshal_easy_json(self, lexer):
        lexer.delim("{")
        while not lexer.is_delim("}"):
            key = lexer.unsafe_field_name(False)
            lexer.want_colon()
            if key == "x":
                self.x = lexer.integer(64, True)
            elif key == "y":
                self.y = lexer.integer(64, True)
            else:
                lexer.skip_recursive()
            lexer.want_comma()
        lexer.delim("}")
        lexer.consumed()

marshal(Point(1, 2))            # b'{"x":1,"y":2}'
p = Point()
unmarshal(b'{"x": 3, "y": 4}', p)
```

`unmarshal` raises the first fatal error the lexer recorded.

## What it does not do

There is no command that reads type definitions and generates encoders and
decoders for them; encoders and decoders are written by hand against
`Writer` and `Decoder`, as above. The naming helpers only compute names.

## Running the tests

```
pip install -e .[test]
pytest
```