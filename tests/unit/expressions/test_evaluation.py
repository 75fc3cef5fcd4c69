from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import pytest

from pysatl_deltaq.distributions import CDF
from pysatl_deltaq.errors import (
    IncompatibleError,
    InvalidRangeError,
    UnresolvedNameError,
    ZeroWeightError,
)
from pysatl_deltaq.expressions.delta_q import (
    BlackBox,
    Choice,
    ForAll,
    ForSome,
    Literal,
    Name,
    Seq,
)
from pysatl_deltaq.expressions.evaluation import choice_fraction, evaluate


@pytest.fixture
def slow() -> CDF:
    return CDF([0.0, 0.0, 0.5, 1.0, 1.0], bin_size=0.25)


@pytest.fixture
def fast() -> CDF:
    return CDF([0.0, 1.0, 1.0, 1.0, 1.0], bin_size=0.25)


class TestChoiceFraction:
    @pytest.mark.parametrize(
        "wa, wb, expected",
        [(1.0, 1.0, 0.5), (7.0, 3.0, 0.7), (0.0, 5.0, 0.0), (2.0, 0.0, 1.0)],
    )
    def test_normalizes(self, wa, wb, expected):
        assert choice_fraction(wa, wb) == pytest.approx(expected)

    def test_zero_sum(self):
        with pytest.raises(ZeroWeightError):
            choice_fraction(0.0, 0.0)


class TestEvaluate:
    def test_literal(self, slow):
        assert evaluate(Literal(slow)) is slow

    def test_seq_is_convolution(self, slow, fast):
        assert evaluate(Seq(Literal(fast), Literal(slow))) == fast.sequence(slow)

    def test_choice_normalizes_weights(self, slow, fast):
        result = evaluate(Choice(Literal(slow), 7.0, Literal(fast), 3.0))
        assert result == slow.mixture(0.7, fast)
        assert result == CDF([0.0, 0.3, 0.65, 1.0, 1.0], bin_size=0.25)

    def test_quantifiers(self, slow, fast):
        assert evaluate(ForAll(Literal(slow), Literal(fast))) == slow.both(fast)
        assert evaluate(ForSome(Literal(slow), Literal(fast))) == slow.either(fast)

    def test_nested(self, slow, fast):
        expr = ForSome(
            Seq(Literal(fast), Literal(fast)),
            Choice(Literal(slow), 1, Literal(fast), 1),
        )
        expected = fast.sequence(fast).either(slow.mixture(0.5, fast))
        assert evaluate(expr) == expected
        assert expr.eval() == expected

    def test_name_is_unresolved(self, slow):
        with pytest.raises(UnresolvedNameError, match="Cannot evaluate a name: A") as info:
            evaluate(Seq(Literal(slow), Name("A")))
        assert info.value.name == "A"

    def test_black_box_is_unresolved(self, slow):
        with pytest.raises(UnresolvedNameError, match="black box") as info:
            evaluate(ForAll(BlackBox(), Literal(slow)))
        assert info.value.name is None

    def test_zero_weights(self, slow, fast):
        with pytest.raises(ZeroWeightError):
            evaluate(Choice(Literal(slow), 0, Literal(fast), 0))

    def test_negative_weight_gives_bad_fraction(self, slow, fast):
        with pytest.raises(InvalidRangeError, match="Fraction"):
            evaluate(Choice(Literal(slow), -1.0, Literal(fast), 3.0))

    def test_incompatible_operands(self, slow):
        other = CDF([0.0, 1.0], bin_size=0.25)
        with pytest.raises(IncompatibleError):
            evaluate(ForAll(Literal(slow), Literal(other)))

    def test_left_operand_fails_first(self, slow):
        with pytest.raises(UnresolvedNameError, match="name: A"):
            evaluate(Seq(Name("A"), Name("B")))

    def test_rejects_foreign_objects(self):
        with pytest.raises(TypeError):
            evaluate(42)  # type: ignore[arg-type]


class TestDeepExpressions:
    def test_left_nested_chain(self):
        instant = CDF([1.0, 1.0], bin_size=1.0)
        expr = Literal(instant)
        for _ in range(1500):
            expr = Seq(expr, Literal(instant))
        assert evaluate(expr) == instant

    def test_right_nested_mixed_chain(self, slow, fast):
        expr = Literal(slow)
        for i in range(1500):
            expr = ForSome(Literal(fast), expr) if i % 2 else ForAll(Literal(fast), expr)
        assert evaluate(expr) == fast

    def test_error_in_deep_chain_is_reported(self, slow):
        expr = Name("deep")
        for _ in range(1500):
            expr = Seq(Literal(slow), expr)
        with pytest.raises(UnresolvedNameError, match="Cannot evaluate a name: deep"):
            evaluate(expr)
