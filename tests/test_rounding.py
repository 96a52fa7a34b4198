from itertools import product

import pytest

from arbfloat import *
from arbfloat.bigint import BigInt


all_roundings = (ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_DOWN, ROUND_CEILING, ROUND_FLOOR)

# (rounding, lost_fraction, sign, is_odd) -> round up?
round_up_cases = {
    ROUND_HALF_EVEN: lambda lf, sign, is_odd: (lf == LostFraction.MORE_THAN_HALF or
                                               (lf == LostFraction.EXACTLY_HALF and is_odd)),
    ROUND_HALF_UP: lambda lf, sign, is_odd: lf >= LostFraction.EXACTLY_HALF,
    ROUND_DOWN: lambda lf, sign, is_odd: False,
    ROUND_CEILING: lambda lf, sign, is_odd: lf != LostFraction.EXACTLY_ZERO and not sign,
    ROUND_FLOOR: lambda lf, sign, is_odd: lf != LostFraction.EXACTLY_ZERO and sign,
}


class TestRoundingMode:

    def test_aliases(self):
        assert ROUND_HALF_EVEN is RoundingMode.NEAREST_TIES_TO_EVEN
        assert ROUND_HALF_UP is RoundingMode.NEAREST_TIES_TO_AWAY
        assert ROUND_DOWN is RoundingMode.TOWARD_ZERO
        assert ROUND_CEILING is RoundingMode.TOWARD_POSITIVE
        assert ROUND_FLOOR is RoundingMode.TOWARD_NEGATIVE
        assert len(RoundingMode) == 5

    @pytest.mark.parametrize('rounding, lost_fraction, sign, is_odd',
                             product(all_roundings, LostFraction, (False, True), (False, True)))
    def test_round_up(self, rounding, lost_fraction, sign, is_odd):
        expected = round_up_cases[rounding](lost_fraction, sign, is_odd)
        assert round_up(rounding, lost_fraction, sign, is_odd) is expected

    def test_round_up_exact_never_rounds(self):
        for rounding in all_roundings:
            assert not round_up(rounding, LostFraction.EXACTLY_ZERO, False, True)

    def test_unknown_rounding(self):
        with pytest.raises(ValueError):
            round_up(99, LostFraction.EXACTLY_HALF, False, False)


class TestLostFraction:

    @pytest.mark.parametrize('value, bits, answer', (
        (0b10000, 4, LostFraction.EXACTLY_ZERO),
        (0b10100, 4, LostFraction.LESS_THAN_HALF),
        (0b11000, 4, LostFraction.EXACTLY_HALF),
        (0b11001, 4, LostFraction.MORE_THAN_HALF),
        (0b11100, 4, LostFraction.MORE_THAN_HALF),
        (0b11100, 0, LostFraction.EXACTLY_ZERO),
        (1, 200, LostFraction.LESS_THAN_HALF),
        (1 << 63, 64, LostFraction.EXACTLY_HALF),
        ((1 << 63) | (1 << 10), 64, LostFraction.MORE_THAN_HALF),
    ))
    def test_lost_fraction_from_rshift(self, value, bits, answer):
        assert lost_fraction_from_rshift(BigInt.from_int(value, 2), bits) == answer


class TestRoundSignificand:

    def test_no_rounding(self):
        significand = BigInt.from_int(0b100, 1)
        assert round_significand(significand, LostFraction.EXACTLY_HALF, ROUND_HALF_EVEN,
                                 False, 3) == (significand, False)

    def test_increment(self):
        significand = BigInt.from_int(0b101, 1)
        result, carried = round_significand(significand, LostFraction.EXACTLY_HALF,
                                            ROUND_HALF_UP, False, 3)
        assert result.to_int() == 0b110
        assert not carried

    @pytest.mark.parametrize('rounding, sign', ((ROUND_HALF_EVEN, False),
                                                (ROUND_CEILING, False),
                                                (ROUND_FLOOR, True)))
    def test_carry(self, rounding, sign):
        significand = BigInt.from_int(0b111, 1)
        result, carried = round_significand(significand, LostFraction.MORE_THAN_HALF,
                                            rounding, sign, 3)
        assert result.to_int() == 0b100
        assert carried

    def test_carry_at_limb_boundary(self):
        # A 64-bit precision needs the second limb for the carry
        significand = BigInt.from_int((1 << 64) - 1, 2)
        result, carried = round_significand(significand, LostFraction.MORE_THAN_HALF,
                                            ROUND_HALF_EVEN, False, 64)
        assert result.to_int() == 1 << 63
        assert carried
