"""Unit tests for the realization engine."""

import pytest

from mcp_dice_notation.dice import realize, realize_term, resolve_die
from mcp_dice_notation.errors import ResolutionLimitError
from mcp_dice_notation.models import Bounded, Fixed, RealizedTerm, Term
from mcp_dice_notation.parser import parse
from mcp_dice_notation.rng import RecordingSource, SeededRandomSource, SequenceRandomSource


def _realize(text, draws, **kwargs):
    return realize(parse(text), SequenceRandomSource(draws), **kwargs)


class TestRealize:
    def test_plain_dice(self) -> None:
        result = _realize("2d6", [3, 4])
        assert result.sum == 7
        assert result.terms == (RealizedTerm(realized=7, min=2, max=12),)

    def test_reroll_discards_low_draw(self) -> None:
        assert _realize("2d6r", [6, 1, 5]).sum == 11

    def test_reroll_threshold(self) -> None:
        assert _realize("1d6r2", [2, 1, 3]).sum == 3

    def test_explode_accumulates(self) -> None:
        assert _realize("2d6!", [6, 2, 5]).sum == 13

    def test_explode_threshold(self) -> None:
        assert _realize("1d6!5", [5, 6, 1]).sum == 12

    def test_explode_may_exceed_max(self) -> None:
        result = _realize("1d6!", [6, 6, 3])
        assert result.sum == 15
        assert result.terms[0].max == 6

    def test_reroll_and_explode_combine(self) -> None:
        assert _realize("1d6r2!6", [6, 1, 4]).sum == 10

    def test_advantage_keeps_higher(self) -> None:
        assert _realize("a20", [5, 12]).sum == 12

    def test_disadvantage_keeps_lower(self) -> None:
        assert _realize("s20", [5, 12]).sum == 5

    def test_advantage_with_reroll(self) -> None:
        assert _realize("a20r3", [2, 3, 1, 10]).sum == 10

    def test_inverted_dice(self) -> None:
        result = _realize("-2d6", [3, 4])
        assert result.sum == -7
        assert result.terms == (RealizedTerm(realized=-7, min=-12, max=-2),)

    def test_fixed_term_ignores_inversion(self) -> None:
        # A leading '-' on a constant is not applied when realizing.
        result = _realize("2d6-3", [1, 1])
        assert result.terms[1] == RealizedTerm(realized=3, min=3, max=3)
        assert result.sum == 5

    def test_compound_expression(self) -> None:
        draws = [4, 17, 7, 9, 10, 10, 1, 5, 3, 8]
        result = _realize("a20+10+s2d10r2!-3", draws)
        assert [t.realized for t in result.terms] == [17, 10, 20, 3]
        assert result.sum == 50
        assert result.min == 16
        assert result.max == 53

    def test_empty_expression(self) -> None:
        result = _realize("", [])
        assert result.sum == 0
        assert result.terms == (RealizedTerm(realized=0, min=0, max=0),)

    def test_zero_dice_draw_nothing(self) -> None:
        source = SequenceRandomSource([])
        assert realize_term(Term(count=0, value=Bounded(6)), source) == RealizedTerm(0, 0, 0)


class TestDeterminism:
    def test_same_draws_same_sum(self) -> None:
        expression = parse("a20+10+s2d10r2!-3")
        draws = [4, 17, 7, 9, 10, 10, 1, 5, 3, 8]
        first = realize(expression, SequenceRandomSource(draws))
        second = realize(expression, SequenceRandomSource(draws))
        assert first == second

    def test_seeded_source_repeats(self) -> None:
        expression = parse("4d6r!+2")
        first = realize(expression, SeededRandomSource(42))
        second = realize(expression, SeededRandomSource(42))
        assert first.sum == second.sum

    def test_expression_is_reusable(self) -> None:
        expression = parse("1d6")
        source = SequenceRandomSource([2, 5])
        assert realize(expression, source).sum == 2
        assert realize(expression, source).sum == 5

    def test_seeded_rolls_stay_in_bounds(self) -> None:
        expression = parse("3d6+2d4")
        source = SeededRandomSource(7)
        for _ in range(50):
            result = realize(expression, source)
            assert result.min <= result.sum <= result.max


class TestDraws:
    def test_plain_term_draws_once_per_die(self) -> None:
        recorder = RecordingSource(SequenceRandomSource([1, 2, 3]))
        realize(parse("3d6"), recorder)
        assert recorder.draws == [(6, 1), (6, 2), (6, 3)]

    def test_advantage_draws_twice_per_die(self) -> None:
        recorder = RecordingSource(SequenceRandomSource([1, 2, 3, 4]))
        realize(parse("a2d20"), recorder)
        assert len(recorder.draws) == 4

    def test_fixed_term_draws_nothing(self) -> None:
        recorder = RecordingSource(SequenceRandomSource([]))
        assert realize(parse("+5"), recorder).sum == 5
        assert recorder.draws == []


class TestResolutionLimit:
    def test_reroll_every_face_hits_limit(self) -> None:
        term = Term(count=1, value=Bounded(6), reroll=6)
        with pytest.raises(ResolutionLimitError) as exc:
            resolve_die(term, SequenceRandomSource([3] * 20), max_steps=10)
        assert exc.value.steps == 10
        assert exc.value.term == "1d6r6"

    def test_explode_every_face_hits_limit(self) -> None:
        with pytest.raises(ResolutionLimitError):
            realize(parse("1d6!1"), SeededRandomSource(1), max_steps=25)

    def test_unbounded_loop_when_limit_disabled(self) -> None:
        term = Term(count=1, value=Bounded(6), reroll=6)
        source = SequenceRandomSource([6] * 30 + [7])
        assert resolve_die(term, source, max_steps=None) == 7

    def test_fixed_terms_never_loop(self) -> None:
        term = Term(count=1, value=Fixed(4), reroll=10)
        assert realize_term(term, SequenceRandomSource([]), max_steps=1) == RealizedTerm(4, 4, 4)
