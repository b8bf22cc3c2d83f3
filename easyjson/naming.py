"""Naming rules for generated code: JSON field names, function names and aliases."""

from __future__ import annotations

from typing import Protocol

from easyjson.modpath import _unquote

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193

_GO_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def file_hash(filename: str) -> str:
    """32-bit FNV-1 hash of ``filename`` in lower-case hex, used as a name prefix."""
    h = _FNV32_OFFSET
    for byte in filename.encode("utf-8"):
        h = (h * _FNV32_PRIME) & 0xFFFFFFFF
        h ^= byte
    return f"{h:x}"


def fix_pkg_path_vendoring(pkg_path: str) -> str:
    """Strip everything up to the last vendor directory from an import path."""
    vendor = "/vendor/"
    i = pkg_path.rfind(vendor)
    if i != -1:
        return pkg_path[i + len(vendor):]
    return pkg_path


def fix_alias_name(alias: str) -> str:
    """Make a package base name usable as an import alias."""
    if not alias:
        raise ValueError("empty alias")
    alias = alias.replace(".", "_").replace("-", "_")
    if alias[0] == "v":
        # Keep clear of generated variable names such as v1.
        alias = "_" + alias
    return alias


def _go_quote(text: str) -> str:
    out = ['"']
    for char in text:
        escaped = _GO_ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
            continue
        code = ord(char)
        if code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02x}")
        elif char.isprintable():
            out.append(char)
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def escape_tag(tag: str) -> str:
    """Write a struct field tag back as a source literal."""
    if "`" in tag:
        # A back quote cannot be enclosed in back quotes.
        return _go_quote(tag)
    return f"`{tag}`"


def _tag_lookup(tag: str, key: str) -> str | None:
    """Value stored under ``key`` in a conventional struct tag, or None."""
    while tag:
        tag = tag.lstrip(" ")
        if not tag:
            break
        i = 0
        while i < len(tag) and tag[i] > " " and tag[i] not in ':"' and tag[i] != "\x7f":
            i += 1
        if i == 0 or i + 1 >= len(tag) or tag[i] != ":" or tag[i + 1] != '"':
            break
        name = tag[:i]
        tag = tag[i + 1:]

        i = 1
        while i < len(tag) and tag[i] != '"':
            if tag[i] == "\\":
                i += 1
            i += 1
        if i >= len(tag):
            break
        quoted = tag[:i + 1]
        tag = tag[i + 1:]

        if name == key:
            try:
                return _unquote(quoted)
            except ValueError:
                return None
    return None


def _tag_json_name(tag: str | None) -> str:
    if not tag:
        return ""
    value = _tag_lookup(tag, "json") or ""
    return value.split(",", 1)[0]


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_upper(c: str) -> bool:
    return "A" <= c <= "Z"


def lower_first(s: str) -> str:
    """Lower a leading run of capitals: HTTPRestClient becomes httpRestClient."""
    out: list[str] = []
    found_lower = False
    for i, ch in enumerate(s):
        if _is_upper(ch):
            if i == 0:
                out.append(ch.lower())
            elif not found_lower:
                # Still in the leading run of capitals.
                if i + 1 < len(s) and _is_lower(s[i + 1]):
                    out.append(ch)
                else:
                    out.append(ch.lower())
            else:
                out.append(ch)
        else:
            found_lower = True
            out.append(ch)
    return "".join(out)


def camel_to_snake(name: str) -> str:
    """Convert CamelCase to snake_case, treating runs of capitals as one word."""
    out: list[str] = []
    multiple_upper = False
    last_upper = ""
    before_upper = ""

    for c in name:
        # A non-lowercase character after an uppercase one counts as uppercase too.
        is_upper = c.isupper() or (bool(last_upper) and not c.islower())

        if last_upper:
            # Delimit before the first capital of a run, or before the last one
            # of a run followed by lowercase ('S' in "HTTPServer").
            first_in_row = not multiple_upper
            last_in_row = not is_upper
            if out and (first_in_row or last_in_row) and before_upper != "_":
                out.append("_")
            out.append(last_upper.lower())

        if is_upper:
            multiple_upper = bool(last_upper)
            last_upper = c
            continue

        out.append(c)
        last_upper = ""
        before_upper = c
        multiple_upper = False

    if last_upper:
        out.append(last_upper.lower())
    return "".join(out)


def join_function_name_parts(keep_first: bool, *args: str) -> str:
    """Join parts into one identifier, capitalising each part's first letter.

    With ``keep_first`` the first part is kept as it is.
    """
    pieces: list[str] = []
    for i, part in enumerate(args):
        if i == 0 and keep_first:
            pieces.append(part)
        elif part:
            pieces.append(part[0].upper() + part[1:])
    return "".join(pieces)


class FieldNamer(Protocol):
    """A policy giving the JSON name of a struct field."""

    def json_field_name(self, name: str, tag: str | None) -> str: ...


class DefaultFieldNamer:
    """Uses the name from the json tag, or the field name unchanged."""

    def json_field_name(self, name: str, tag: str | None) -> str:
        """JSON name of field ``name`` carrying struct tag ``tag``."""
        return _tag_json_name(tag) or name


class LowerCamelCaseFieldNamer:
    """Uses the name from the json tag, or the field name in lowerCamelCase."""

    def json_field_name(self, name: str, tag: str | None) -> str:
        """JSON name of field ``name`` carrying struct tag ``tag``."""
        return _tag_json_name(tag) or lower_first(name)


class SnakeCaseFieldNamer:
    """Uses the name from the json tag, or the field name in snake_case."""

    def json_field_name(self, name: str, tag: str | None) -> str:
        """JSON name of field ``name`` carrying struct tag ``tag``."""
        return _tag_json_name(tag) or camel_to_snake(name)