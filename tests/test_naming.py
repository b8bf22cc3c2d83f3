import pytest

from easyjson.naming import (
    DefaultFieldNamer,
    LowerCamelCaseFieldNamer,
    SnakeCaseFieldNamer,
    camel_to_snake,
    escape_tag,
    file_hash,
    fix_alias_name,
    fix_pkg_path_vendoring,
    join_function_name_parts,
    lower_first,
)


@pytest.mark.parametrize(
    "given, expected",
    [
        ("", ""),
        ("A", "a"),
        ("SimpleExample", "simple_example"),
        ("internalField", "internal_field"),
        ("SomeHTTPStuff", "some_http_stuff"),
        ("WriteJSON", "write_json"),
        ("HTTP2Server", "http2_server"),
        ("Some_Mixed_Case", "some_mixed_case"),
        ("do_nothing", "do_nothing"),
        ("JSONHTTPRPCServer", "jsonhttprpc_server"),
    ],
)
def test_camel_to_snake(given, expected):
    assert camel_to_snake(given) == expected


@pytest.mark.parametrize(
    "given, expected",
    [
        ("", ""),
        ("A", "a"),
        ("SimpleExample", "simpleExample"),
        ("internalField", "internalField"),
        ("SomeHTTPStuff", "someHTTPStuff"),
        ("WriteJSON", "writeJSON"),
        ("HTTP2Server", "http2Server"),
        ("JSONHTTPRPCServer", "jsonhttprpcServer"),
    ],
)
def test_lower_first(given, expected):
    assert lower_first(given) == expected


@pytest.mark.parametrize(
    "keep_first, parts, expected",
    [
        (False, [], ""),
        (False, ["a"], "A"),
        (False, ["simple", "example"], "SimpleExample"),
        (True, ["first", "example"], "firstExample"),
        (False, ["some", "UPPER", "case"], "SomeUPPERCase"),
        (False, ["number", "123"], "Number123"),
    ],
)
def test_join_function_name_parts(keep_first, parts, expected):
    assert join_function_name_parts(keep_first, *parts) == expected


@pytest.mark.parametrize(
    "given, expected",
    [
        ("", ""),
        ("time", "time"),
        ("project/vendor/subpackage", "subpackage"),
    ],
)
def test_fix_pkg_path_vendoring(given, expected):
    assert fix_pkg_path_vendoring(given) == expected


def test_fix_pkg_path_vendoring_uses_last_vendor_dir():
    assert fix_pkg_path_vendoring("a/vendor/b/vendor/c/d") == "c/d"


@pytest.mark.parametrize(
    "given, expected",
    [
        ("gopkg.in-yaml", "gopkg_in_yaml"),
        ("v1", "_v1"),
        ("values", "_values"),
        ("jwriter", "jwriter"),
    ],
)
def test_fix_alias_name(given, expected):
    assert fix_alias_name(given) == expected


def test_fix_alias_name_rejects_empty():
    with pytest.raises(ValueError):
        fix_alias_name("")


def test_escape_tag_plain():
    assert escape_tag('json:"name,omitempty"') == '`json:"name,omitempty"`'


def test_escape_tag_with_back_quote():
    assert escape_tag('json:"a`b"') == '"json:\\"a`b\\""'


def test_file_hash_known_values():
    assert file_hash("") == "811c9dc5"
    assert file_hash("a") == "50c5d7e"


def test_file_hash_is_stable_and_distinguishes():
    assert file_hash("tests/data.go") == file_hash("tests/data.go")
    assert file_hash("tests/data.go") != file_hash("tests/snake.go")


def test_default_namer_uses_tag_name():
    namer = DefaultFieldNamer()
    assert namer.json_field_name("UserName", 'json:"user,omitempty"') == "user"


def test_default_namer_falls_back_to_field_name():
    namer = DefaultFieldNamer()
    assert namer.json_field_name("UserName", 'json:",omitempty"') == "UserName"
    assert namer.json_field_name("UserName", None) == "UserName"
    assert namer.json_field_name("UserName", 'xml:"other"') == "UserName"


def test_default_namer_finds_json_among_other_keys():
    namer = DefaultFieldNamer()
    tag = 'xml:"x" json:"picked" yaml:"y"'
    assert namer.json_field_name("Field", tag) == "picked"


def test_lower_camel_namer():
    namer = LowerCamelCaseFieldNamer()
    assert namer.json_field_name("HTTPRestClient", "") == "httpRestClient"
    assert namer.json_field_name("HTTPRestClient", 'json:"client"') == "client"


def test_snake_case_namer():
    namer = SnakeCaseFieldNamer()
    assert namer.json_field_name("SomeHTTPStuff", "") == "some_http_stuff"
    assert namer.json_field_name("SomeHTTPStuff", 'json:"stuff"') == "stuff"


def test_namer_ignores_malformed_tag():
    namer = SnakeCaseFieldNamer()
    assert namer.json_field_name("WriteJSON", "json:unquoted") == "write_json"