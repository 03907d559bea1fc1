"""Single-pass tokenizer for dice notation.

Notation has no separators between terms: boundaries are inferred from a small
set of control characters met while scanning.

    a20+10+s2d10r2!-3

``a``/``s``/``+``/``-`` close the current term and open a new one, ``r`` and
``!`` close the current span but keep building the same term, and ``d`` only
changes how the current span is read.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, replace

import structlog

from .errors import InvalidDieError, InvalidIntegerError, MalformedExpressionError
from .models import Bounded, CompoundExpression, Fixed, Term


log = structlog.get_logger(__name__)

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_SEPARATOR_RE = re.compile(r"[dD]")


class Cursor(enum.Enum):
    BOUNDED = "bounded"
    BASE = "base"
    REROLL = "reroll"
    BANG = "bang"


@dataclass(frozen=True)
class _State:
    cursor: Cursor
    offset: int


def parse_int(text: str, expression: str) -> int:
    """Parse a plain ASCII integer, rejecting whitespace, underscores and overflow."""
    if not _INT_RE.fullmatch(text):
        cause = ValueError(
            "cannot parse integer from empty string" if not text else "invalid digit found in string"
        )
        raise InvalidIntegerError(text, expression, cause) from cause

    n = int(text)
    if not INT_MIN <= n <= INT_MAX:
        cause = OverflowError(f"number out of range [{INT_MIN}, {INT_MAX}]")
        raise InvalidIntegerError(text, expression, cause) from cause
    return n


def parse_pair(span: str) -> tuple[int, int]:
    """Split ``span`` into ``(count, value)``.

    ``"2d6"`` -> ``(2, 6)``, ``"20"`` -> ``(1, 20)``, ``"d8"`` -> ``(1, 8)``.

    Raises:
        MalformedExpressionError: More than one separator, or no value after it.
        InvalidIntegerError: Either half is not an integer.
    """
    parts = _SEPARATOR_RE.split(span)
    if len(parts) > 2:
        raise MalformedExpressionError(span)

    if len(parts) == 1:
        return 1, parse_int(parts[0], span)

    left, right = parts
    if not right:
        raise MalformedExpressionError(span)

    count = parse_int(left, span) if left else 1
    return count, parse_int(right, span)


def _die(faces: int, span: str) -> Bounded:
    if faces < 1:
        raise InvalidDieError(span, faces)
    return Bounded(faces)


def _finalize(term: Term, notation: str, state: _State, end: int) -> Term:
    span = notation[state.offset:end]

    if state.cursor is Cursor.BOUNDED:
        if not span:
            return term
        count, faces = parse_pair(span)
        return replace(term, count=count, value=_die(faces, span))

    if state.cursor is Cursor.BASE:
        if not span:
            return term
        count, n = parse_pair(span)
        # Advantage only means something for dice: "a20" is "a1d20".
        if term.advantage or term.disadvantage:
            return replace(term, count=count, value=_die(n, span))
        return replace(term, count=count, value=Fixed(n))

    if state.cursor is Cursor.REROLL:
        return replace(term, reroll=parse_int(span, notation) if span else 1)

    return replace(term, explode=parse_int(span, notation) if span else term.value.magnitude)


def parse(notation: str) -> CompoundExpression:
    """Parse dice notation into a :class:`CompoundExpression`.

    Fails fast: the first bad span raises and no partial expression is returned.
    """
    state = _State(Cursor.BOUNDED, 0)
    term = Term()
    terms: list[Term] = []

    for i, ch in enumerate(notation):
        c = ch.lower()

        if c in ("a", "s"):
            term = _finalize(term, notation, state, i)
            if not term.is_empty():
                terms.append(term)
            term = Term(advantage=c == "a", disadvantage=c == "s")
            state = _State(Cursor.BASE, i + 1)

        elif c in ("+", "-"):
            term = _finalize(term, notation, state, i)
            if not term.is_empty():
                terms.append(term)
            term = Term(invert=c == "-")
            state = _State(Cursor.BASE, i + 1)

        elif c == "d":
            state = _State(Cursor.BOUNDED, state.offset)

        elif c == "r":
            term = _finalize(term, notation, state, i)
            state = _State(Cursor.REROLL, i + 1)

        elif c == "!":
            term = _finalize(term, notation, state, i)
            state = _State(Cursor.BANG, i + 1)

    # The trailing term is kept even when empty.
    term = _finalize(term, notation, state, len(notation))
    terms.append(term)

    log.debug("dice.parse.ok", notation=notation, terms=len(terms))
    return CompoundExpression(terms=tuple(terms), notation=notation)


def term_notation(term: Term, *, leading: bool = False) -> str:
    if term.is_empty():
        return ""

    if term.advantage:
        prefix = "a"
    elif term.disadvantage:
        prefix = "s"
    elif term.invert:
        prefix = "-"
    elif leading and isinstance(term.value, Bounded):
        prefix = ""
    else:
        prefix = "+"

    if isinstance(term.value, Bounded):
        body = f"{term.count}d{term.value.faces}"
    else:
        body = str(term.value.n)

    if term.reroll is not None:
        body += f"r{term.reroll}"
    if term.explode is not None:
        body += f"!{term.explode}"
    return prefix + body


def to_notation(expression: CompoundExpression) -> str:
    """Render ``expression`` as normalized notation, e.g. ``a1d20+10s2d10r2!10-3``."""
    chunks: list[str] = []
    for term in expression.terms:
        chunk = term_notation(term, leading=not chunks)
        if chunk:
            chunks.append(chunk)
    return "".join(chunks)
