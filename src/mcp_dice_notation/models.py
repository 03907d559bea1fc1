from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True)
class Fixed:
    """A constant modifier."""

    n: int

    @property
    def magnitude(self) -> int:
        return self.n


@dataclass(frozen=True)
class Bounded:
    """A die with ``faces`` sides."""

    faces: int

    @property
    def magnitude(self) -> int:
        return self.faces


Value: TypeAlias = Fixed | Bounded


@dataclass(frozen=True)
class Term:
    count: int = 0
    value: Value = Fixed(0)
    invert: bool = False
    advantage: bool = False
    disadvantage: bool = False
    reroll: int | None = None
    explode: int | None = None

    def is_empty(self) -> bool:
        return self.count == 0


@dataclass(frozen=True)
class RealizedTerm:
    realized: int
    min: int
    max: int


@dataclass(frozen=True)
class CompoundExpression:
    terms: tuple[Term, ...]
    notation: str = ""

    def __iter__(self) -> Iterator[Term]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)


@dataclass(frozen=True)
class RealizedCompoundExpression:
    sum: int
    terms: tuple[RealizedTerm, ...]

    @property
    def min(self) -> int:
        total = 0
        for term in self.terms:
            total += term.min
        return total

    @property
    def max(self) -> int:
        total = 0
        for term in self.terms:
            total += term.max
        return total
