"""
Argument decoder: raw launcher tokens to literal values.

Each raw argument is the printed form of a constant term, e.g.
``'"src/a.py"'``, ``myapp`` or ``'[{dir,"doc"},{def,{vsn,"1.0"}}]'``.
The decoder parses it with a small recursive-descent parser over a
constant-expression grammar and returns plain Python values:

=====================  ======================================
Literal                Python value
=====================  ======================================
``"text"``             ``str`` (adjacent literals concatenate)
``42``, ``16#ff``      ``int``
``$a``                 ``int`` (the code point)
``1.5e3``              ``float``
``name``, ``'Name'``   ``Atom``
``[a, b]``             ``list`` (``[a | [b]]`` also accepted)
``{a, b}``             ``tuple``
``<<"ab", 1>>``        ``bytes``
``#{k => v}``          ``dict``
=====================  ======================================

Anything that is not a compile-time constant (variables, calls, operators
other than a sign on a number, ``fun``/``case``/... expressions) is
rejected with ``DecodeError``; the decoder never returns a partial value.

Examples:
    >>> decode(['"a.src"', '[{dir, "out"}]'])
    ['a.src', [(Atom('dir'), 'out')]]
    >>> decode([Atom("myapp")])
    [Atom('myapp')]
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from docrun.errors import DecodeError

__all__ = ["Atom", "decode", "parse_literal"]


@dataclass(frozen=True, slots=True)
class Atom:
    """A symbolic constant. Never equal to a string with the same text."""

    name: str

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Atom({self.name!r})"


RESERVED_WORDS = frozenset(
    {
        "after", "and", "andalso", "band", "begin", "bnot", "bor", "bsl",
        "bsr", "bxor", "case", "catch", "cond", "div", "end", "fun", "if",
        "let", "not", "of", "or", "orelse", "receive", "rem", "try", "when",
        "xor",
    }
)

_MULTI_PUNCT = ("=:=", "=/=", "<<", ">>", "=>", ":=", "->", "<-", "<=", "||",
                "==", "/=", "=<", ">=", "++", "--")
_SINGLE_PUNCT = "[]{}(),|#-+.*/:;=<>!?"

_BASED_RE = re.compile(r"(\d+)#([0-9A-Za-z]+(?:_[0-9A-Za-z]+)*)", re.ASCII)
_FLOAT_RE = re.compile(r"\d+(?:_\d+)*\.\d+(?:_\d+)*(?:[eE][+-]?\d+(?:_\d+)*)?", re.ASCII)
_INT_RE = re.compile(r"\d+(?:_\d+)*", re.ASCII)
_HEX_RE = re.compile(r"[0-9A-Fa-f]+")

# Name characters are ASCII plus the Latin-1 letters.
_LOWER = "a-z\u00df-\u00f6\u00f8-\u00ff"
_UPPER = "A-Z\u00c0-\u00d6\u00d8-\u00de"
_ATOM_START_RE = re.compile(f"[{_LOWER}]")
_VAR_START_RE = re.compile(f"[{_UPPER}_]")
_NAME_TAIL_RE = re.compile(f"[{_LOWER}{_UPPER}0-9_@]*")

_SIMPLE_ESCAPES = {
    "b": "\b", "d": "\x7f", "e": "\x1b", "f": "\f", "n": "\n",
    "r": "\r", "s": " ", "t": "\t", "v": "\v",
}


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    value: Any
    pos: int


class _Reject(Exception):
    """Internal signal carrying a parse failure up to ``parse_literal``."""

    def __init__(self, detail: str, pos: int):
        super().__init__(detail)
        self.detail = detail
        self.pos = pos


# ── Scanner ──────────────────────────────────────────────────────────────


class _Scanner:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def tokens(self) -> list[_Token]:
        out: list[_Token] = []
        while True:
            tok = self._next()
            out.append(tok)
            if tok.kind == "eof":
                return out

    def _next(self) -> _Token:
        text = self.text
        self._skip_blanks()
        start = self.pos
        if start >= len(text):
            return _Token("eof", None, start)

        ch = text[start]
        if ch == '"':
            return _Token("string", self._quoted('"'), start)
        if ch == "'":
            return _Token("qatom", self._quoted("'"), start)
        if ch == "$":
            return _Token("char", self._char(), start)
        if "0" <= ch <= "9":
            return self._number()
        is_var = _VAR_START_RE.match(ch) is not None
        if is_var or _ATOM_START_RE.match(ch):
            match = _NAME_TAIL_RE.match(text, start + 1)
            self.pos = match.end()
            name = text[start:self.pos]
            if is_var:
                return _Token("var", name, start)
            if name in RESERVED_WORDS:
                return _Token("reserved", name, start)
            return _Token("atom", name, start)
        for punct in _MULTI_PUNCT:
            if text.startswith(punct, start):
                self.pos += len(punct)
                return _Token("punct", punct, start)
        if ch in _SINGLE_PUNCT:
            self.pos += 1
            return _Token("punct", ch, start)
        raise _Reject(f"illegal character {ch!r}", start)

    def _skip_blanks(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif ch == "%":
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            else:
                return

    def _number(self) -> _Token:
        text, start = self.text, self.pos
        match = _BASED_RE.match(text, start)
        if match:
            base = int(match.group(1))
            if not 2 <= base <= 36:
                raise _Reject(f"illegal base {base}", start)
            try:
                value = int(match.group(2).replace("_", ""), base)
            except ValueError:
                raise _Reject(f"illegal digits for base {base}", start) from None
            self.pos = match.end()
            return _Token("int", value, start)
        match = _FLOAT_RE.match(text, start)
        if match:
            self.pos = match.end()
            return _Token("float", float(match.group().replace("_", "")), start)
        match = _INT_RE.match(text, start)
        self.pos = match.end()
        return _Token("int", int(match.group().replace("_", "")), start)

    def _char(self) -> int:
        start = self.pos
        self.pos += 1
        if self.pos >= len(self.text):
            raise _Reject("unterminated character literal", start)
        if self.text[self.pos] == "\\":
            return ord(self._escape())
        ch = self.text[self.pos]
        self.pos += 1
        return ord(ch)

    def _quoted(self, quote: str) -> str:
        start = self.pos
        self.pos += 1
        chars: list[str] = []
        text = self.text
        while True:
            if self.pos >= len(text):
                what = "string" if quote == '"' else "quoted atom"
                raise _Reject(f"unterminated {what}", start)
            ch = text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(chars)
            if ch == "\\":
                chars.append(self._escape())
            else:
                chars.append(ch)
                self.pos += 1

    def _escape(self) -> str:
        """Decode the escape sequence starting at the backslash under ``pos``."""
        text = self.text
        start = self.pos
        self.pos += 1
        if self.pos >= len(text):
            raise _Reject("unterminated escape sequence", start)
        ch = text[self.pos]
        if ch in "01234567":
            end = self.pos
            while end < len(text) and end - self.pos < 3 and text[end] in "01234567":
                end += 1
            value = int(text[self.pos:end], 8)
            self.pos = end
            return chr(value)
        if ch == "x":
            if text.startswith("{", self.pos + 1):
                close = text.find("}", self.pos + 2)
                digits = text[self.pos + 2:close] if close >= 0 else ""
                self.pos = close + 1
            else:
                digits = text[self.pos + 1:self.pos + 3]
                self.pos += 3
            if not _HEX_RE.fullmatch(digits):
                raise _Reject("illegal hexadecimal escape", start)
            try:
                return chr(int(digits, 16))
            except (ValueError, OverflowError):
                raise _Reject("illegal hexadecimal escape", start) from None
        if ch == "^":
            if self.pos + 1 >= len(text):
                raise _Reject("unterminated escape sequence", start)
            ctrl = text[self.pos + 1]
            self.pos += 2
            return chr(ord(ctrl) & 31)
        self.pos += 1
        return _SIMPLE_ESCAPES.get(ch, ch)


# ── Parser ───────────────────────────────────────────────────────────────


class _Parser:
    def __init__(self, tokens: list[_Token]):
        self.tokens = tokens
        self.index = 0

    @property
    def current(self) -> _Token:
        return self.tokens[self.index]

    def advance(self) -> _Token:
        tok = self.tokens[self.index]
        if tok.kind != "eof":
            self.index += 1
        return tok

    def at(self, punct: str) -> bool:
        tok = self.current
        return tok.kind == "punct" and tok.value == punct

    def expect(self, punct: str) -> None:
        if not self.at(punct):
            self._unexpected(f"expected '{punct}'")
        self.advance()

    def _unexpected(self, detail: str | None = None) -> None:
        tok = self.current
        if tok.kind == "eof":
            raise _Reject("unexpected end of input", tok.pos)
        shown = tok.value if tok.kind in ("punct", "atom", "var", "reserved") else tok.kind
        message = f"syntax error before: {shown}"
        if detail:
            message = f"{message} ({detail})"
        raise _Reject(message, tok.pos)

    def parse(self) -> Any:
        value = self.expression()
        if self.current.kind != "eof":
            tok = self.current
            if tok.kind == "punct" and tok.value not in (",", ")", "]", "}", ">>", "|", "=>", "."):
                raise _Reject(f"operator '{tok.value}' is not allowed in a constant", tok.pos)
            self._unexpected()
        return value

    def expression(self) -> Any:
        value = self.primary()
        tok = self.current
        if tok.kind == "punct" and tok.value in ("(", ":"):
            raise _Reject("function calls are not allowed in a constant", tok.pos)
        if tok.kind == "punct" and tok.value in ("+", "-", "*", "/", "++", "--", "=", "!",
                                                  "==", "/=", "=<", "<", ">=", ">",
                                                  "=:=", "=/="):
            raise _Reject(f"operator '{tok.value}' is not allowed in a constant", tok.pos)
        if tok.kind == "reserved":
            raise _Reject(f"operator '{tok.value}' is not allowed in a constant", tok.pos)
        return value

    def primary(self) -> Any:
        tok = self.current
        kind = tok.kind
        if kind == "string":
            parts = [self.advance().value]
            while self.current.kind == "string":
                parts.append(self.advance().value)
            return "".join(parts)
        if kind in ("atom", "qatom"):
            self.advance()
            return Atom(tok.value)
        if kind in ("int", "float", "char"):
            self.advance()
            return tok.value
        if kind == "var":
            raise _Reject(f"variable '{tok.value}' is not a constant", tok.pos)
        if kind == "reserved":
            raise _Reject(f"'{tok.value}' expressions are not allowed in a constant", tok.pos)
        if kind == "punct":
            if tok.value in ("-", "+"):
                return self.signed()
            if tok.value == "[":
                return self.list_()
            if tok.value == "{":
                return self.tuple_()
            if tok.value == "<<":
                return self.binary()
            if tok.value == "#":
                return self.map_()
            if tok.value == "(":
                self.advance()
                value = self.expression()
                self.expect(")")
                return value
        self._unexpected()

    def signed(self) -> int | float:
        sign = self.advance().value
        tok = self.current
        if tok.kind not in ("int", "float", "char"):
            raise _Reject(f"operator '{sign}' is not allowed in a constant", tok.pos)
        self.advance()
        return -tok.value if sign == "-" else tok.value

    def list_(self) -> list[Any]:
        self.expect("[")
        items: list[Any] = []
        if self.at("]"):
            self.advance()
            return items
        items.append(self.expression())
        while self.at(","):
            self.advance()
            items.append(self.expression())
        if self.at("|"):
            bar = self.advance()
            tail = self.expression()
            if not isinstance(tail, list):
                raise _Reject("improper list tail is not supported", bar.pos)
            items.extend(tail)
        self.expect("]")
        return items

    def tuple_(self) -> tuple[Any, ...]:
        self.expect("{")
        items: list[Any] = []
        if not self.at("}"):
            items.append(self.expression())
            while self.at(","):
                self.advance()
                items.append(self.expression())
        self.expect("}")
        return tuple(items)

    def binary(self) -> bytes:
        self.expect("<<")
        out = bytearray()
        if not self.at(">>"):
            self.segment(out)
            while self.at(","):
                self.advance()
                self.segment(out)
        if self.at(":") or self.at("/"):
            raise _Reject("binary segment specifiers are not supported", self.current.pos)
        self.expect(">>")
        return bytes(out)

    def segment(self, out: bytearray) -> None:
        tok = self.current
        value = self.primary()
        if isinstance(value, str):
            try:
                out.extend(value.encode("latin-1"))
            except UnicodeEncodeError:
                raise _Reject("binary string segment is not latin-1", tok.pos) from None
        elif isinstance(value, int) and 0 <= value <= 255:
            out.append(value)
        else:
            raise _Reject("binary segment must be a string or an integer in 0..255", tok.pos)

    def map_(self) -> dict[Any, Any]:
        self.expect("#")
        if not self.at("{"):
            raise _Reject("records are not allowed in a constant", self.current.pos)
        self.advance()
        result: dict[Any, Any] = {}
        if not self.at("}"):
            self.association(result)
            while self.at(","):
                self.advance()
                self.association(result)
        self.expect("}")
        return result

    def association(self, result: dict[Any, Any]) -> None:
        tok = self.current
        key = self.expression()
        if self.at(":="):
            raise _Reject("':=' is not allowed in a map constant", self.current.pos)
        self.expect("=>")
        value = self.expression()
        try:
            result[key] = value
        except TypeError:
            raise _Reject("map key is not hashable", tok.pos) from None


# ── Public API ───────────────────────────────────────────────────────────


def parse_literal(text: str) -> Any:
    """Parse one constant literal expression. Raises ``DecodeError``."""
    try:
        tokens = _Scanner(text).tokens()
        return _Parser(tokens).parse()
    except _Reject as exc:
        raise DecodeError(text, f"{exc.detail} at column {exc.pos + 1}", position=exc.pos) from None
    except RecursionError:
        raise DecodeError(text, "expression nested too deeply") from None


def decode(tokens: Iterable[str | Atom]) -> list[Any]:
    """Decode raw tokens, left to right, into a list of literal values.

    An ``Atom`` token is parsed from its name. Stops at the first token that
    fails and raises ``DecodeError`` naming it.
    """
    decoded: list[Any] = []
    for token in tokens:
        text = token.name if isinstance(token, Atom) else token
        decoded.append(parse_literal(text))
    return decoded
