"""JSON writing and lexing primitives, raw messages, naming and module-path helpers."""

__version__ = "0.1.0"

__all__ = [
    "buffer",
    "decoding",
    "helpers",
    "lexer",
    "modpath",
    "naming",
    "writer",
]