"""Resolving the import path of a package from go.mod files or GOPATH."""

from __future__ import annotations

import functools
import os
import posixpath
import re
import subprocess

_ESCAPE_RE = re.compile(
    r'\\(?:([abfnrtv\\"])|x([0-9A-Fa-f]{2})|([0-7]{3})'
    r"|u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8}))"
)
_SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r",
    "t": "\t", "v": "\v", "\\": "\\", '"': '"',
}


def _unquote(text: str) -> str:
    """Unquote a double- or back-quoted string literal; raise ValueError if malformed."""
    quote = text[0]
    if len(text) < 2 or text[-1] != quote:
        raise ValueError("unterminated quoted string")
    body = text[1:-1]
    if quote == "`":
        if "`" in body:
            raise ValueError("back quote inside raw string")
        return body.replace("\r", "")
    if "\n" in body:
        raise ValueError("newline in quoted string")
    out: list[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == '"':
            raise ValueError("unescaped quote")
        if c != "\\":
            out.append(c)
            i += 1
            continue
        m = _ESCAPE_RE.match(body, i)
        if m is None:
            raise ValueError("invalid escape sequence")
        simple, hex2, octal, u4, u8 = m.groups()
        if simple:
            out.append(_SIMPLE_ESCAPES[simple])
        elif hex2:
            out.append(chr(int(hex2, 16)))
        elif octal:
            value = int(octal, 8)
            if value > 0xFF:
                raise ValueError("octal escape out of range")
            out.append(chr(value))
        else:
            value = int(u4 or u8, 16)
            if 0xD800 <= value <= 0xDFFF or value > 0x10FFFF:
                raise ValueError("invalid code point")
            out.append(chr(value))
        i = m.end()
    return "".join(out)


def module_path(mod: bytes | str) -> str:
    """Return the module path declared in go.mod text, or "" if there is none."""
    if isinstance(mod, (bytes, bytearray)):
        mod = bytes(mod).decode("utf-8", errors="replace")
    for line in mod.split("\n"):
        line = line.split("//", 1)[0].strip()
        if not line.startswith("module"):
            continue
        rest = line[len("module"):]
        stripped = rest.strip()
        if len(stripped) == len(rest) or not stripped:
            continue
        if stripped[0] in "\"`":
            try:
                return _unquote(stripped)
            except ValueError:
                return ""
        return stripped
    return ""


@functools.lru_cache(maxsize=None)
def get_module_path(go_mod_path: str) -> str:
    """Read a go.mod file and return its module path; "" if unreadable."""
    try:
        with open(go_mod_path, "rb") as handle:
            data = handle.read()
    except OSError:
        return ""
    return module_path(data)


@functools.lru_cache(maxsize=None)
def _go_mod_for_root(root: str) -> str:
    try:
        result = subprocess.run(
            ["go", "env", "GOMOD"],
            cwd=root,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return ""
    return result.stdout.decode("utf-8", errors="replace").strip()


def go_mod_path(fname: str, is_dir: bool) -> str:
    """Path of the go.mod governing ``fname``, "" if none or the toolchain is unavailable."""
    root = fname if is_dir else os.path.dirname(fname)
    return _go_mod_for_root(root)


def _to_slash(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


def _clean(path: str) -> str:
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(*parts: str) -> str:
    joined = "/".join(part for part in parts if part)
    return _clean(joined) if joined else ""


def _dirname(path: str) -> str:
    return _clean(posixpath.dirname(path))


def pkg_path_from_go_mod(fname: str, is_dir: bool, go_mod_path: str) -> str:
    """Import path of ``fname`` relative to the module declared in ``go_mod_path``."""
    module = get_module_path(go_mod_path)
    if not module:
        raise ValueError(f"cannot determine module path from {go_mod_path}")
    rel = fname.removeprefix(os.path.dirname(go_mod_path))
    joined = _join(module, _to_slash(rel))
    return _clean(joined) if is_dir else _dirname(joined)


def pkg_path_from_gopath(fname: str, is_dir: bool) -> str:
    """Import path of ``fname`` relative to a GOPATH source directory."""
    gopath = os.environ.get("GOPATH") or os.path.join(os.path.expanduser("~"), "go")
    for entry in gopath.split(os.pathsep):
        prefix = os.path.join(entry, "src") + os.sep
        try:
            rel = os.path.relpath(fname, prefix)
        except ValueError:
            continue
        if rel.startswith(".." + os.sep):
            continue
        slashed = _to_slash(rel)
        return _clean(slashed) if is_dir else _dirname(slashed)
    raise ValueError(f"file '{fname}' is not in GOPATH '{gopath}'")


def get_pkg_path(fname: str, is_dir: bool) -> str:
    """Import path of the package holding ``fname`` (a file or a directory)."""
    if not os.path.isabs(fname):
        fname = os.path.normpath(os.path.join(os.getcwd(), fname))
    mod_file = go_mod_path(fname, is_dir)
    if "go.mod" in mod_file:
        return pkg_path_from_go_mod(fname, is_dir, mod_file)
    return pkg_path_from_gopath(fname, is_dir)