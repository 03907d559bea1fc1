from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import structlog

from .config import DEFAULT_MAX_RESOLUTION_STEPS, Settings, get_settings
from .errors import ResolutionLimitError, TooManyDiceError
from .models import (
    Bounded,
    CompoundExpression,
    Fixed,
    RealizedCompoundExpression,
    RealizedTerm,
    Term,
)
from .parser import parse, term_notation, to_notation
from .rng import RandomSource, RecordingSource, source_from_settings


log = structlog.get_logger(__name__)


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _draw(term: Term, faces: int, source: RandomSource) -> int:
    if term.advantage:
        return max(source.draw(faces), source.draw(faces))
    if term.disadvantage:
        return min(source.draw(faces), source.draw(faces))
    return source.draw(faces)


def resolve_die(
    term: Term,
    source: RandomSource,
    *,
    max_steps: int | None = DEFAULT_MAX_RESOLUTION_STEPS,
) -> int:
    """Roll one die of ``term``, applying explode and reroll until it settles.

    A draw at or above the explode threshold is kept and the die rolls again;
    a draw at or below the reroll threshold is thrown away and the die rolls
    again. Explode is checked first.

    Raises:
        ResolutionLimitError: ``max_steps`` draws happened without the die settling.
    """
    faces = term.value.magnitude
    accumulated = 0
    steps = 0

    while True:
        if max_steps is not None and steps >= max_steps:
            raise ResolutionLimitError(term_notation(term, leading=True), steps)
        steps += 1

        candidate = _draw(term, faces, source)
        if term.explode is not None and candidate >= term.explode:
            accumulated += candidate
            continue
        if term.reroll is not None and candidate <= term.reroll:
            continue
        return accumulated + candidate


def realize_term(
    term: Term,
    source: RandomSource,
    *,
    max_steps: int | None = DEFAULT_MAX_RESOLUTION_STEPS,
) -> RealizedTerm:
    if isinstance(term.value, Fixed):
        # Inversion is not applied to fixed modifiers.
        n = term.value.n
        return RealizedTerm(realized=n, min=n, max=n)

    faces = term.value.faces
    total = 0
    for _ in range(term.count):
        total += resolve_die(term, source, max_steps=max_steps)

    if term.invert:
        return RealizedTerm(realized=-total, min=-(term.count * faces), max=-term.count)
    return RealizedTerm(realized=total, min=term.count, max=term.count * faces)


def _combine(realized: Iterable[RealizedTerm]) -> RealizedCompoundExpression:
    terms = tuple(realized)
    total = 0
    for term in terms:
        total += term.realized
    return RealizedCompoundExpression(sum=total, terms=terms)


def realize(
    expression: CompoundExpression,
    source: RandomSource,
    *,
    max_steps: int | None = DEFAULT_MAX_RESOLUTION_STEPS,
) -> RealizedCompoundExpression:
    """Roll every term of ``expression`` in order and add them up."""
    result = _combine(realize_term(term, source, max_steps=max_steps) for term in expression.terms)
    log.debug("dice.realize.result", notation=expression.notation, sum=result.sum)
    return result


def _explain(term: Term, realized: RealizedTerm, draws: list[int], leading: bool) -> str:
    label = term_notation(term, leading=leading) or "(empty)"
    if isinstance(term.value, Bounded) and not term.is_empty():
        return f"{label}: rolls {draws} => {realized.realized}"
    return f"{label} => {realized.realized}"


def roll(
    notation: str,
    source: RandomSource | None = None,
    *,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Parse, then roll. Raises DiceError for invalid input.

    Returns a JSON-ready audit record holding every draw the roll consumed.
    """
    settings = settings or get_settings()
    expression = parse(notation)

    if settings.max_dice is not None:
        dice = sum(term.count for term in expression.terms if isinstance(term.value, Bounded))
        if dice > settings.max_dice:
            raise TooManyDiceError(dice, settings.max_dice)

    recorder = RecordingSource(source if source is not None else source_from_settings(settings))

    realized_terms: list[RealizedTerm] = []
    evaluated_terms: list[dict[str, Any]] = []
    explanation_parts: list[str] = []

    for index, term in enumerate(expression.terms):
        mark = recorder.mark()
        realized = realize_term(term, recorder, max_steps=settings.max_resolution_steps)
        draws = recorder.values_since(mark)
        realized_terms.append(realized)

        evaluated_terms.append(
            {
                "type": "die" if isinstance(term.value, Bounded) else "constant",
                "notation": term_notation(term, leading=index == 0),
                "count": term.count,
                "draws": draws,
                "realized": realized.realized,
                "min": realized.min,
                "max": realized.max,
            }
        )
        explanation_parts.append(_explain(term, realized, draws, leading=index == 0))

    result = _combine(realized_terms)
    explanation = "; ".join(explanation_parts) + f" => {result.sum}"

    record = {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "input": notation,
        "normalized_expression": to_notation(expression),
        "rng": {
            "source": recorder.name,
            "nonce": str(uuid.uuid4()),
        },
        "terms": evaluated_terms,
        "total": result.sum,
        "min": result.min,
        "max": result.max,
        "explanation": explanation,
    }
    log.info("dice.roll.result", request_id=record["request_id"], notation=notation, total=result.sum)
    return record
