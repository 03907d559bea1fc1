from .dice import realize, realize_term, resolve_die, roll
from .errors import (
    DiceError,
    InvalidDieError,
    InvalidIntegerError,
    MalformedExpressionError,
    RandomSourceExhausted,
    ResolutionLimitError,
    TooManyDiceError,
)
from .models import (
    Bounded,
    CompoundExpression,
    Fixed,
    RealizedCompoundExpression,
    RealizedTerm,
    Term,
)
from .parser import parse, parse_pair, to_notation
from .rng import (
    RandomSource,
    RecordingSource,
    SeededRandomSource,
    SequenceRandomSource,
    SystemRandomSource,
)

__all__ = [
    "Bounded",
    "CompoundExpression",
    "DiceError",
    "Fixed",
    "InvalidDieError",
    "InvalidIntegerError",
    "MalformedExpressionError",
    "RandomSource",
    "RandomSourceExhausted",
    "RealizedCompoundExpression",
    "RealizedTerm",
    "RecordingSource",
    "ResolutionLimitError",
    "SeededRandomSource",
    "SequenceRandomSource",
    "SystemRandomSource",
    "Term",
    "TooManyDiceError",
    "parse",
    "parse_pair",
    "realize",
    "realize_term",
    "resolve_die",
    "roll",
    "to_notation",
]
