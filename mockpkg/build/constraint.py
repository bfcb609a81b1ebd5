"""Parsing and evaluation of Go build constraint comments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

_TAG_CHARS = re.compile(r"[A-Za-z0-9_.]+")


class ConstraintSyntaxError(ValueError):
    """Raised for a malformed ``//go:build`` or ``// +build`` line."""


@dataclass(frozen=True)
class TagExpr:
    tag: str

    def eval(self, ok: Callable[[str], bool]) -> bool:
        return ok(self.tag)


@dataclass(frozen=True)
class NotExpr:
    operand: "Expr"

    def eval(self, ok: Callable[[str], bool]) -> bool:
        return not self.operand.eval(ok)


@dataclass(frozen=True)
class AndExpr:
    left: "Expr"
    right: "Expr"

    def eval(self, ok: Callable[[str], bool]) -> bool:
        # Both sides are evaluated so every referenced tag is visited.
        left = self.left.eval(ok)
        right = self.right.eval(ok)
        return left and right


@dataclass(frozen=True)
class OrExpr:
    left: "Expr"
    right: "Expr"

    def eval(self, ok: Callable[[str], bool]) -> bool:
        left = self.left.eval(ok)
        right = self.right.eval(ok)
        return left or right


Expr = TagExpr | NotExpr | AndExpr | OrExpr


def is_go_build(line: str) -> bool:
    """Return True if ``line`` is a ``//go:build`` comment."""
    text = line.strip()
    if not text.startswith("//go:build"):
        return False
    rest = text[len("//go:build") :]
    return rest == "" or rest[0] in " \t"


def is_plus_build(line: str) -> bool:
    """Return True if ``line`` is a legacy ``// +build`` comment."""
    text = line.strip()
    if not text.startswith("//"):
        return False
    text = text[2:].strip()
    if not text.startswith("+build"):
        return False
    rest = text[len("+build") :]
    return rest == "" or rest[0] in " \t"


def parse_go_build(line: str) -> Expr:
    """Parse a ``//go:build`` line into an expression tree."""
    if not is_go_build(line):
        raise ConstraintSyntaxError("not a //go:build line")
    text = line.strip()[len("//go:build") :].strip()
    if not text:
        raise ConstraintSyntaxError("empty //go:build expression")
    return _ExprParser(text).parse()


def parse_plus_build(line: str) -> Expr:
    """Parse a ``// +build`` line.

    Space separated options are OR-ed, comma separated terms are AND-ed and a
    leading ``!`` negates a term.
    """
    if not is_plus_build(line):
        raise ConstraintSyntaxError("not a // +build line")
    text = line.strip()[2:].strip()[len("+build") :]
    fields = text.split()
    if not fields:
        raise ConstraintSyntaxError("empty // +build line")
    result: Optional[Expr] = None
    for option in fields:
        clause: Optional[Expr] = None
        for term in option.split(","):
            if not term:
                raise ConstraintSyntaxError(f"invalid // +build option {option!r}")
            negated = term.startswith("!")
            name = term[1:] if negated else term
            if not name or name.startswith("!") or not _TAG_CHARS.fullmatch(name):
                raise ConstraintSyntaxError(f"invalid // +build term {term!r}")
            expr: Expr = TagExpr(name)
            if negated:
                expr = NotExpr(expr)
            clause = expr if clause is None else AndExpr(clause, expr)
        assert clause is not None
        result = clause if result is None else OrExpr(result, clause)
    assert result is not None
    return result


class _ExprParser:
    """Recursive descent parser for ``||``, ``&&``, ``!`` and parentheses."""

    def __init__(self, text: str) -> None:
        self._tokens = _tokenize(text)
        self._pos = 0

    def parse(self) -> Expr:
        expr = self._or()
        if self._pos != len(self._tokens):
            raise ConstraintSyntaxError(f"unexpected token {self._tokens[self._pos]!r}")
        return expr

    def _peek(self) -> Optional[str]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _or(self) -> Expr:
        expr = self._and()
        while self._peek() == "||":
            self._pos += 1
            expr = OrExpr(expr, self._and())
        return expr

    def _and(self) -> Expr:
        expr = self._not()
        while self._peek() == "&&":
            self._pos += 1
            expr = AndExpr(expr, self._not())
        return expr

    def _not(self) -> Expr:
        if self._peek() == "!":
            self._pos += 1
            return NotExpr(self._not())
        return self._atom()

    def _atom(self) -> Expr:
        token = self._peek()
        if token is None:
            raise ConstraintSyntaxError("unexpected end of expression")
        self._pos += 1
        if token == "(":
            expr = self._or()
            if self._peek() != ")":
                raise ConstraintSyntaxError("missing close paren")
            self._pos += 1
            return expr
        if token in {")", "&&", "||"}:
            raise ConstraintSyntaxError(f"unexpected token {token!r}")
        return TagExpr(token)


def _tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char in " \t":
            index += 1
            continue
        if char in "()!":
            tokens.append(char)
            index += 1
            continue
        if text.startswith("&&", index) or text.startswith("||", index):
            tokens.append(text[index : index + 2])
            index += 2
            continue
        match = _TAG_CHARS.match(text, index)
        if match is None:
            raise ConstraintSyntaxError(f"invalid syntax at {text[index:]!r}")
        tokens.append(match.group(0))
        index = match.end()
    return tokens


@dataclass(frozen=True)
class HeaderConstraints:
    """Build constraint lines found in a file header, with 1-based line numbers."""

    go_build: Tuple[Tuple[int, str], ...]
    plus_build: Tuple[Tuple[int, str], ...]


def scan_header(lines: Sequence[str]) -> HeaderConstraints:
    """Collect constraint lines from the comment block preceding ``package``.

    ``// +build`` lines only count when a blank line separates them from the
    rest of the header, as with the go command.
    """
    go_build: List[Tuple[int, str]] = []
    plus_candidates: List[Tuple[int, str]] = []
    last_blank = 0
    in_block = False
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if in_block:
            if "*/" in line:
                in_block = False
                if line[line.index("*/") + 2 :].strip():
                    break
            continue
        if not line:
            last_blank = number
            continue
        if line.startswith("//"):
            if is_go_build(line):
                go_build.append((number, line))
            elif is_plus_build(line):
                plus_candidates.append((number, line))
            continue
        if line.startswith("/*"):
            rest = line[2:]
            if "*/" not in rest:
                in_block = True
            elif rest[rest.index("*/") + 2 :].strip():
                break
            continue
        break
    plus_build = tuple((number, line) for number, line in plus_candidates if number < last_blank)
    return HeaderConstraints(go_build=tuple(go_build), plus_build=plus_build)


__all__ = [
    "AndExpr",
    "ConstraintSyntaxError",
    "Expr",
    "HeaderConstraints",
    "NotExpr",
    "OrExpr",
    "TagExpr",
    "is_go_build",
    "is_plus_build",
    "parse_go_build",
    "parse_plus_build",
    "scan_header",
]
