"""Randomness sources.

The realization engine only needs ``draw(bound) -> int`` returning a value in
``[1, bound]``. Anything with that method works, which keeps the engine
testable with fixed sequences.
"""

from __future__ import annotations

import random
import secrets
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .config import Settings
from .errors import RandomSourceExhausted


@runtime_checkable
class RandomSource(Protocol):
    def draw(self, bound: int) -> int: ...


class SystemRandomSource:
    name = "secrets.SystemRandom"

    def __init__(self) -> None:
        self._rng = secrets.SystemRandom()

    def draw(self, bound: int) -> int:
        return self._rng.randint(1, bound)


class SeededRandomSource:
    """Reproducible draws from ``random.Random(seed)``."""

    name = "random.Random"

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def draw(self, bound: int) -> int:
        return self._rng.randint(1, bound)


class SequenceRandomSource:
    """Replays preset draws in order, ignoring the bound."""

    name = "sequence"

    def __init__(self, values: Iterable[int]):
        self._values = list(values)
        self._drawn = 0

    @property
    def remaining(self) -> int:
        return len(self._values) - self._drawn

    def draw(self, bound: int) -> int:
        if self._drawn >= len(self._values):
            raise RandomSourceExhausted(self._drawn)
        value = self._values[self._drawn]
        self._drawn += 1
        return value


@dataclass
class RecordingSource:
    """Wraps another source and keeps every ``(bound, value)`` it hands out."""

    inner: RandomSource
    draws: list[tuple[int, int]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return getattr(self.inner, "name", type(self.inner).__name__)

    def draw(self, bound: int) -> int:
        value = self.inner.draw(bound)
        self.draws.append((bound, value))
        return value

    def mark(self) -> int:
        return len(self.draws)

    def values_since(self, mark: int) -> list[int]:
        return [value for _bound, value in self.draws[mark:]]


def source_from_settings(settings: Settings) -> RandomSource:
    if settings.rng_seed is not None:
        return SeededRandomSource(settings.rng_seed)
    return SystemRandomSource()
