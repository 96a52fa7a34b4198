#
# Rounding of over-wide significands
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

from enum import IntEnum

from .bigint import BigInt


__all__ = ('RoundingMode', 'LostFraction',
           'ROUND_HALF_EVEN', 'ROUND_HALF_UP', 'ROUND_DOWN', 'ROUND_CEILING', 'ROUND_FLOOR',
           'lost_fraction_from_rshift', 'round_up', 'round_significand')


class RoundingMode(IntEnum):
    NEAREST_TIES_TO_EVEN = 0
    NEAREST_TIES_TO_AWAY = 1
    TOWARD_ZERO = 2
    TOWARD_POSITIVE = 3
    TOWARD_NEGATIVE = 4


# Names as used by the decimal module
ROUND_HALF_EVEN = RoundingMode.NEAREST_TIES_TO_EVEN
ROUND_HALF_UP = RoundingMode.NEAREST_TIES_TO_AWAY
ROUND_DOWN = RoundingMode.TOWARD_ZERO
ROUND_CEILING = RoundingMode.TOWARD_POSITIVE
ROUND_FLOOR = RoundingMode.TOWARD_NEGATIVE


class LostFraction(IntEnum):
    '''How the bits discarded from a significand compare with half its ULP.'''
    EXACTLY_ZERO = 0
    LESS_THAN_HALF = 1
    EXACTLY_HALF = 2
    MORE_THAN_HALF = 3


def lost_fraction_from_rshift(significand, bits):
    '''Return the fraction lost if significand, a BigInt, were shifted right by bits.'''
    if bits <= 0:
        return LostFraction.EXACTLY_ZERO
    # The first lost bit is the guard bit; the remainder are summarised by their sticky OR
    half_bit = significand.test_bit(bits - 1)
    rest = significand.any_bits_below(bits - 1)
    return LostFraction(half_bit * 2 + rest)


def round_up(rounding, lost_fraction, sign, is_odd):
    '''Return True if, when an operation is inexact, the result should be rounded up (i.e.,
    away from zero by incrementing the significand).

    sign is the sign of the number, and is_odd indicates if the LSB of the new
    significand is set, which is needed for ties-to-even rounding.
    '''
    if lost_fraction == LostFraction.EXACTLY_ZERO:
        return False

    if rounding == RoundingMode.NEAREST_TIES_TO_EVEN:
        if lost_fraction == LostFraction.EXACTLY_HALF:
            return is_odd
        return lost_fraction == LostFraction.MORE_THAN_HALF
    elif rounding == RoundingMode.NEAREST_TIES_TO_AWAY:
        return lost_fraction != LostFraction.LESS_THAN_HALF
    elif rounding == RoundingMode.TOWARD_ZERO:
        return False
    elif rounding == RoundingMode.TOWARD_POSITIVE:
        return not sign
    elif rounding == RoundingMode.TOWARD_NEGATIVE:
        return bool(sign)
    raise ValueError(f'unknown rounding mode {rounding!r}')


def round_significand(significand, lost_fraction, rounding, sign, precision):
    '''Round a truncated significand given the fraction lost when truncating it.

    Returns a pair (significand, carried).  carried is True if rounding up overflowed
    precision bits, in which case the significand has been shifted right one bit and the
    caller must increment the exponent.  The significand must have room for one bit
    beyond precision.
    '''
    if not round_up(rounding, lost_fraction, sign, significand.is_odd()):
        return significand, False
    significand, carry = significand.add(BigInt.one(significand.limbs))
    assert not carry
    if significand.msb_index() > precision:
        # The significand was all ones and is now a power of two; the shift is exact
        return significand.shift_right(1)[0], True
    return significand, False
