"""Tokenization for the embedded statement language."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ParseError


@dataclass(frozen=True)
class TemplateChunk:
    """Literal text or interpolated expression source inside a template literal."""

    text: str
    pos: int
    is_expr: bool = False


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int
    parts: tuple[TemplateChunk, ...] = ()


_SINGLE_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    "[": "LBRACK",
    "]": "RBRACK",
    ",": "COMMA",
    ";": "SEMI",
    ".": "DOT",
}

_KEYWORDS = {
    "if": "IF",
    "else": "ELSE",
    "true": "TRUE",
    "false": "FALSE",
    "null": "NULL",
}

# Longest operators first so that "===" never lexes as "==" followed by "=".
_OPERATORS = ("===", "!==", "==", "!=", "<=", ">=", "&&", "||", "+", "-", "*", "/", "%", "!", "<", ">")

_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?(?:[eE][+\-]?[0-9]+)?")


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _parse_escaped_codepoint(source: str, start: int) -> tuple[str, int]:
    if start >= len(source):
        raise ParseError("Escape sequence is incomplete at end of input", start - 1, start)

    esc = source[start]
    simple = {"n": "\n", "r": "\r", "t": "\t", "0": "\0", "\\": "\\", '"': '"', "'": "'", "`": "`", "$": "$"}
    if esc in simple:
        return simple[esc], start + 1

    if esc in {"x", "u"}:
        width = 2 if esc == "x" else 4
        hex_end = start + 1 + width
        if hex_end > len(source):
            raise ParseError(f"Incomplete \\{esc} escape", start - 1, len(source))
        digits = source[start + 1 : hex_end]
        if not all(ch in "0123456789abcdefABCDEF" for ch in digits):
            raise ParseError(f"Invalid \\{esc} escape", start - 1, hex_end)
        return chr(int(digits, 16)), hex_end

    raise ParseError(f"Unknown escape sequence \\{esc}", start - 1, start + 1)


def _scan_string(source: str, start: int) -> tuple[str, int]:
    quote = source[start]
    i = start + 1
    out: list[str] = []
    while i < len(source):
        ch = source[i]
        if ch == quote:
            return "".join(out), i + 1
        if ch == "\\":
            escaped, end = _parse_escaped_codepoint(source, i + 1)
            out.append(escaped)
            i = end
            continue
        if ch == "\n":
            break
        out.append(ch)
        i += 1
    raise ParseError("Unterminated string literal", start, i)


def _scan_interpolation(source: str, start: int) -> int:
    """Return the index of the ``}`` closing the interpolation opened just before ``start``."""
    depth = 0
    i = start
    while i < len(source):
        ch = source[i]
        if ch in {"'", '"'}:
            _, i = _scan_string(source, i)
            continue
        if ch == "`":
            _, _, i = _scan_template(source, i)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    raise ParseError("Unterminated template interpolation", start - 2, len(source))


def _scan_template(source: str, start: int) -> tuple[str, tuple[TemplateChunk, ...], int]:
    i = start + 1
    parts: list[TemplateChunk] = []
    buf: list[str] = []
    buf_start = i
    while i < len(source):
        ch = source[i]
        if ch == "`":
            if buf:
                parts.append(TemplateChunk("".join(buf), buf_start))
            return source[start + 1 : i], tuple(parts), i + 1
        if ch == "\\":
            escaped, end = _parse_escaped_codepoint(source, i + 1)
            buf.append(escaped)
            i = end
            continue
        if source.startswith("${", i):
            if buf:
                parts.append(TemplateChunk("".join(buf), buf_start))
                buf = []
            expr_start = i + 2
            close = _scan_interpolation(source, expr_start)
            parts.append(TemplateChunk(source[expr_start:close], expr_start, is_expr=True))
            i = close + 1
            buf_start = i
            continue
        buf.append(ch)
        i += 1
    raise ParseError("Unterminated template literal", start, len(source))


def tokenize(source: str, *, offset: int = 0) -> list[Token]:
    """Split ``source`` into tokens; ``offset`` shifts every reported position."""
    tokens: list[Token] = []
    i = 0

    def add(kind: str, text: str, start: int, end: int, parts: tuple[TemplateChunk, ...] = ()) -> None:
        if offset:
            parts = tuple(TemplateChunk(part.text, part.pos + offset, part.is_expr) for part in parts)
        tokens.append(Token(kind, text, start + offset, end + offset, parts))

    try:
        while i < len(source):
            ch = source[i]

            if ch.isspace():
                i += 1
                continue

            if source.startswith("//", i):
                while i < len(source) and source[i] not in {"\n", "\r"}:
                    i += 1
                continue

            if source.startswith("/*", i):
                close = source.find("*/", i + 2)
                if close < 0:
                    raise ParseError("Unterminated block comment", i, len(source))
                i = close + 2
                continue

            if ch in _SINGLE_TOKENS:
                add(_SINGLE_TOKENS[ch], ch, i, i + 1)
                i += 1
                continue

            if ch in {"'", '"'}:
                value, end = _scan_string(source, i)
                add("STRING", value, i, end)
                i = end
                continue

            if ch == "`":
                raw, parts, end = _scan_template(source, i)
                add("TEMPLATE", raw, i, end, parts)
                i = end
                continue

            if ch in "0123456789":
                m = _NUMBER_RE.match(source, i)
                assert m is not None
                add("NUMBER", m.group(0), i, m.end())
                i = m.end()
                continue

            if _is_ident_start(ch):
                start = i
                i += 1
                while i < len(source) and _is_ident_continue(source[i]):
                    i += 1
                ident = source[start:i]
                add(_KEYWORDS.get(ident, "NAME"), ident, start, i)
                continue

            op = next((candidate for candidate in _OPERATORS if source.startswith(candidate, i)), None)
            if op is not None:
                add("OP", op, i, i + len(op))
                i += len(op)
                continue

            if ch == "=":
                raise ParseError("Assignment is not supported; bind names with let(name, value)", i, i + 1)

            raise ParseError(f"Unexpected character {ch!r}", i, i + 1)
    except ParseError as err:
        if offset:
            raise ParseError(err.message, err.start + offset, err.end + offset, err.expected, err.found) from None
        raise

    add("EOF", "", len(source), len(source))
    return tokens
