from __future__ import annotations


class DiceError(ValueError):
    """User-facing dice errors (fail-fast, no roll performed)."""


class MalformedExpressionError(DiceError):
    """A term span could not be read as a count/value pair."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        super().__init__(f"[MALFORMED_EXPRESSION] Unable to parse expression: {expression!r}")


class InvalidIntegerError(DiceError):
    """A numeric span failed integer parsing or fell outside the supported range."""

    def __init__(self, text: str, expression: str, cause: Exception) -> None:
        self.text = text
        self.expression = expression
        self.cause = cause
        super().__init__(f"[INVALID_INTEGER] Bad integer: {text!r} in {expression!r}; {cause}")


class ResolutionLimitError(DiceError):
    def __init__(self, term: str, steps: int) -> None:
        self.term = term
        self.steps = steps
        super().__init__(
            f"[RESOLUTION_LIMIT] A die in {term!r} did not settle after {steps} draws. "
            "Check the reroll and explode thresholds against the die size."
        )


class RandomSourceExhausted(DiceError):
    def __init__(self, drawn: int) -> None:
        self.drawn = drawn
        super().__init__(f"[RNG_EXHAUSTED] Fixed draw sequence ran out after {drawn} draws.")


class InvalidDieError(DiceError):
    def __init__(self, expression: str, faces: int) -> None:
        self.expression = expression
        self.faces = faces
        super().__init__(
            f"[INVALID_DIE] A die needs at least one face, got {faces} in {expression!r}. Example: '2d6'."
        )


class TooManyDiceError(DiceError):
    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"[TOO_MANY_DICE] Too many dice: {count} (max {limit}). Example: '10d6'.")
