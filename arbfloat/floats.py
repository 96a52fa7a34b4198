#
# Binary floating point arithmetic with arbitrary exponent and significand widths
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

import logging
from collections import namedtuple
from enum import IntEnum
from fractions import Fraction
from math import floor
from struct import Struct
from typing import NamedTuple

from .bigint import BigInt, Compare, limbs_for_bits
from .rounding import (
    LostFraction, ROUND_HALF_EVEN, ROUND_DOWN, ROUND_CEILING, ROUND_FLOOR,
    lost_fraction_from_rshift, round_up, round_significand,
)
from .text import (
    DefaultDecFormat, decimal_digits, digits_to_bigint, log2_10, parse_decimal,
    power_of_ten,
)


__all__ = ('Category', 'FloatFormat', 'Float', 'FP16', 'FP32', 'FP64', 'FP128', 'FP256')


logger = logging.getLogger(__name__)

pack_double = Struct('<d').pack
unpack_double = Struct('<d').unpack
pack_u64 = Struct('<Q').pack
unpack_u64 = Struct('<Q').unpack


class Category(IntEnum):
    ZERO = 0
    INFINITY = 1
    NAN = 2
    NORMAL = 3
    SUBNORMAL = 4


class FloatFormat(NamedTuple):
    '''A binary floating point format with an exponent field of exponent_bits bits and a
    stored significand field of mantissa_bits bits.  Its precision, the significand
    width including the leading bit, is one more than mantissa_bits.

    Arithmetic operations are methods of the destination format.  Their operands can be
    of any format; the result is correctly rounded to this format in the requested
    rounding mode.
    '''
    exponent_bits: int
    mantissa_bits: int
    # The significand width including the leading integer bit
    precision: int
    e_max: int
    e_min: int
    e_bias: int
    # The number of substrate limbs of a significand, with room for a rounding carry
    limbs: int
    # The number of decimal digits that guarantee a decimal round-trip
    decimal_precision: int

    @classmethod
    def from_widths(cls, exponent_bits, mantissa_bits):
        if not isinstance(exponent_bits, int) or not isinstance(mantissa_bits, int):
            raise TypeError('widths must be integers')
        if exponent_bits < 2:
            raise ValueError('exponent_bits must be at least 2')
        if mantissa_bits < 1:
            raise ValueError('mantissa_bits must be at least 1')
        precision = mantissa_bits + 1
        e_bias = (1 << (exponent_bits - 1)) - 1
        return cls(exponent_bits, mantissa_bits, precision, e_bias, 1 - e_bias, e_bias,
                   limbs_for_bits(precision + 1), 2 + floor(precision / log2_10))

    @property
    def int_bit(self):
        return 1 << (self.precision - 1)

    @property
    def interchange_width(self):
        '''The width in bits of the interchange encoding.'''
        return 1 + self.exponent_bits + self.mantissa_bits

    def __repr__(self):
        return f'FloatFormat(exponent_bits={self.exponent_bits}, ' \
            f'mantissa_bits={self.mantissa_bits})'

    ##
    ## Value constructors
    ##

    def _make_value(self, category, sign, exponent=0, significand=None):
        if significand is None:
            significand = BigInt.zero(self.limbs)
        return Float(self, category, bool(sign), exponent, significand)

    def make_zero(self, sign=False):
        '''Returns a zero of the given sign.'''
        return self._make_value(Category.ZERO, sign)

    def make_infinity(self, sign=False):
        '''Returns an infinity of the given sign.'''
        return self._make_value(Category.INFINITY, sign)

    def make_nan(self, sign=False):
        '''Returns a NaN of the given sign.'''
        return self._make_value(Category.NAN, sign)

    def make_largest_finite(self, sign=False):
        '''Returns the finite number of maximal magnitude with the given sign.'''
        significand = BigInt.from_int((1 << self.precision) - 1, self.limbs)
        return self._make_value(Category.NORMAL, sign, self.e_max, significand)

    def make_smallest_normal(self, sign=False):
        '''Returns the normal number of minimal magnitude with the given sign.'''
        significand = BigInt.from_int(self.int_bit, self.limbs)
        return self._make_value(Category.NORMAL, sign, self.e_min, significand)

    def make_smallest_subnormal(self, sign=False):
        '''Returns the subnormal number of minimal magnitude with the given sign.'''
        return self._make_value(Category.SUBNORMAL, sign, self.e_min, BigInt.one(self.limbs))

    def _make_finite(self, sign, exponent, significand):
        '''Return a finite number from a significand of at most precision bits.'''
        size = significand.msb_index()
        if size == 0:
            return self.make_zero(sign)
        category = Category.NORMAL if size == self.precision else Category.SUBNORMAL
        return self._make_value(category, sign, exponent, significand.resize(self.limbs))

    ##
    ## Normalization
    ##

    def normalize(self, sign, exponent, significand, rounding=ROUND_HALF_EVEN):
        '''Return the value (-1)^sign * significand * 2^exponent rounded to this format.

        significand is a BigInt of any width.  Inexact intermediate results must carry at
        least two bits beyond this format's precision with their sticky bit jammed into
        the LSB.
        '''
        if not isinstance(significand, BigInt):
            raise TypeError('significand must be a BigInt')
        size = significand.msb_index()
        if size == 0:
            return self.make_zero(sign)

        # Shift the significand so the MSB is in the precision-th position; if the
        # resulting exponent would be too small shift more, forming a subnormal.
        exponent += self.precision - 1
        rshift = max(size - self.precision, self.e_min - exponent)
        if rshift > 0:
            lost_fraction = lost_fraction_from_rshift(significand, rshift)
            significand = significand.shift_right(rshift)[0].resize(self.limbs)
        else:
            lost_fraction = LostFraction.EXACTLY_ZERO
            significand = significand.resize(self.limbs).shift_left(-rshift)
        exponent += rshift

        significand, carried = round_significand(significand, lost_fraction, rounding,
                                                 sign, self.precision)
        exponent += carried

        if exponent > self.e_max:
            logger.debug('overflow to infinity in %r: exponent %d exceeds %d',
                         self, exponent, self.e_max)
            return self.make_infinity(sign)
        if significand.is_zero():
            logger.debug('underflow to zero in %r', self)
        return self._make_finite(sign, exponent, significand)

    ##
    ## Interchange encoding
    ##

    def _check_bits(self, bits):
        if not isinstance(bits, int):
            raise TypeError('bits must be an integer')
        if not 0 <= bits < (1 << self.interchange_width):
            raise ValueError(f'bits {bits:#x} out of range for {self!r}')

    def classify(self, bits):
        '''Return the category of an interchange-format bit pattern.'''
        self._check_bits(bits)
        exponent_mask = (1 << self.exponent_bits) - 1
        exponent_field = (bits >> self.mantissa_bits) & exponent_mask
        fraction = bits & (self.int_bit - 1)
        if exponent_field == exponent_mask:
            return Category.NAN if fraction else Category.INFINITY
        if exponent_field == 0:
            return Category.SUBNORMAL if fraction else Category.ZERO
        return Category.NORMAL

    def from_bits(self, bits):
        '''Decode an interchange-format bit pattern.'''
        category = self.classify(bits)
        sign = bool(bits >> (self.exponent_bits + self.mantissa_bits))
        if category == Category.ZERO:
            return self.make_zero(sign)
        if category == Category.INFINITY:
            return self.make_infinity(sign)
        if category == Category.NAN:
            return self.make_nan(sign)
        fraction = bits & (self.int_bit - 1)
        if category == Category.SUBNORMAL:
            return self._make_value(category, sign, self.e_min,
                              BigInt.from_int(fraction, self.limbs))
        biased = (bits >> self.mantissa_bits) & ((1 << self.exponent_bits) - 1)
        return self._make_value(category, sign, biased - self.e_bias,
                          BigInt.from_int(fraction | self.int_bit, self.limbs))

    def to_bits(self, value):
        '''Encode a value of this format as an interchange-format bit pattern.  NaNs encode
        as quiet NaNs.'''
        if value.fmt != self:
            raise ValueError(f'{value!r} is not of format {self!r}')
        bits = value.sign << (self.exponent_bits + self.mantissa_bits)
        exponent_mask = (1 << self.exponent_bits) - 1
        if value.category == Category.NAN:
            bits |= (exponent_mask << self.mantissa_bits) | (self.int_bit >> 1)
        elif value.category == Category.INFINITY:
            bits |= exponent_mask << self.mantissa_bits
        elif value.category == Category.SUBNORMAL:
            bits |= value.significand.to_int()
        elif value.category == Category.NORMAL:
            bits |= (value.exponent + self.e_bias) << self.mantissa_bits
            bits |= value.significand.to_int() - self.int_bit
        return bits

    ##
    ## Conversions
    ##

    def convert(self, value, rounding=ROUND_HALF_EVEN):
        '''Return value, of any format, correctly rounded to this format.'''
        if value.fmt == self:
            return value
        if not value.is_finite() or value.is_zero():
            return self._make_value(value.category, value.sign)
        return self.normalize(value.sign, value.exponent_int(), value.significand, rounding)

    def from_int(self, value, rounding=ROUND_HALF_EVEN):
        '''Return the integer value correctly rounded to this format.  Zero converts to +0.'''
        if not isinstance(value, int):
            raise TypeError('from_int requires an integer')
        return self.normalize(value < 0, 0, BigInt.from_int(abs(value)), rounding)

    def from_float(self, value, rounding=ROUND_HALF_EVEN):
        '''Return the Python float value converted to this format.  The conversion is exact
        if this format is at least as wide as a double.'''
        if not isinstance(value, float):
            raise TypeError('from_float requires a float')
        return self.convert(FP64.from_bits(unpack_u64(pack_double(value))[0]), rounding)

    def from_fraction(self, value, rounding=ROUND_HALF_EVEN):
        '''Return the rational value correctly rounded to this format.'''
        if not isinstance(value, Fraction):
            raise TypeError('from_fraction requires a Fraction')
        return self._from_ratio(value < 0, BigInt.from_int(abs(value.numerator)),
                                BigInt.from_int(value.denominator), 0, rounding)

    def from_string(self, string, rounding=ROUND_HALF_EVEN):
        '''Convert a decimal string to a correctly-rounded number of this format.  Raises
        ParseError if the string is malformed.'''
        parts = parse_decimal(string)
        if parts.kind == 'inf':
            return self.make_infinity(parts.sign)
        if parts.kind == 'nan':
            return self.make_nan(parts.sign)
        return self._from_decimal(parts.sign, parts.digits, parts.exponent, rounding)

    def from_value(self, value, rounding=ROUND_HALF_EVEN):
        '''Convert an int, float, Fraction, string or Float to this format.'''
        if isinstance(value, Float):
            return self.convert(value, rounding)
        if isinstance(value, int):
            return self.from_int(value, rounding)
        if isinstance(value, float):
            return self.from_float(value, rounding)
        if isinstance(value, Fraction):
            return self.from_fraction(value, rounding)
        if isinstance(value, str):
            return self.from_string(value, rounding)
        raise TypeError(f'cannot convert {type(value).__name__} to a Float')

    def _underflow_value(self, sign, rounding):
        '''Return the result of rounding a non-zero value smaller than half the smallest
        subnormal.'''
        if round_up(rounding, LostFraction.LESS_THAN_HALF, sign, False):
            return self.make_smallest_subnormal(sign)
        return self.make_zero(sign)

    def _from_decimal(self, sign, digits, exponent, rounding):
        '''Return int(digits) * 10^exponent correctly rounded.'''
        if digits == '0':
            return self.make_zero(sign)

        # The value lies in [10^(frac_exp - 1), 10^frac_exp).  Dispose of values that
        # obviously overflow or underflow before doing big arithmetic.
        frac_exp = exponent + len(digits)
        if (frac_exp - 1) * log2_10 >= self.e_max + 1:
            logger.debug('decimal exponent %d overflows %r', frac_exp, self)
            return self.make_infinity(sign)
        if frac_exp * log2_10 <= self.e_min - self.precision:
            logger.debug('decimal exponent %d underflows %r', frac_exp, self)
            return self._underflow_value(sign, rounding)

        significand = digits_to_bigint(digits)
        if exponent >= 0:
            limbs = significand.limbs + limbs_for_bits(int(exponent * log2_10) + 2)
            significand = significand.resize(limbs)
            significand = significand.multiply(power_of_ten(exponent, limbs))
            return self.normalize(sign, 0, significand, rounding)
        return self._from_ratio(sign, significand, power_of_ten(-exponent), 0, rounding)

    def _from_ratio(self, sign, numerator, denominator, exponent, rounding):
        '''Return numerator / denominator * 2^exponent correctly rounded, where numerator and
        denominator are BigInts and the denominator is non-zero.'''
        num_size = numerator.msb_index()
        if num_size == 0:
            return self.make_zero(sign)
        den_size = denominator.msb_index()
        # Extend the dividend so the quotient has two bits beyond our precision
        shift = max(0, self.precision + 3 + den_size - num_size)
        limbs = max(limbs_for_bits(num_size + shift + 1), denominator.limbs)
        dividend = numerator.resize(limbs).shift_left(shift)
        quotient, remainder = dividend.divide(denominator.resize(limbs))
        quotient = quotient.jam(not remainder.is_zero())
        return self.normalize(sign, exponent - shift, quotient, rounding)

    def to_float(self, value):
        '''Return value rounded to a double as a Python float.'''
        value = FP64.convert(value)
        return unpack_double(pack_u64(FP64.to_bits(value)))[0]

    def convert_for_arith(self, value):
        '''Convert value to something capable of doing arithmetic with this format.

        Float values are returned unmodified.  Python floats are returned as an FP64.
        Python ints are converted to this format.  Otherwise None is returned.
        '''
        if isinstance(value, Float):
            return value
        if isinstance(value, float):
            return FP64.from_float(value)
        if isinstance(value, int):
            return self.from_int(value)
        return None

    ##
    ## Arithmetic
    ##

    def _propagate_nan(self, lhs, rhs=None):
        '''Return a NaN with the sign of the first NaN operand.'''
        if lhs.is_nan():
            return self.make_nan(lhs.sign)
        return self.make_nan(rhs.sign)

    def _invalid(self, operation):
        logger.debug('invalid operation %s in %r', operation, self)
        return self.make_nan()

    def add(self, lhs, rhs, rounding=ROUND_HALF_EVEN):
        '''Return the sum LHS + RHS in this format.'''
        return self._add_sub(lhs, rhs, False, rounding)

    def subtract(self, lhs, rhs, rounding=ROUND_HALF_EVEN):
        '''Return the difference LHS - RHS in this format.'''
        return self._add_sub(lhs, rhs, True, rounding)

    def _add_sub(self, lhs, rhs, is_subtract, rounding):
        rhs_sign = rhs.sign ^ is_subtract

        if lhs.is_nan() or rhs.is_nan():
            return self._propagate_nan(lhs, rhs)

        if lhs.is_infinite():
            if rhs.is_infinite() and lhs.sign != rhs_sign:
                return self._invalid('subtract' if is_subtract else 'add')
            return self.make_infinity(lhs.sign)
        if rhs.is_infinite():
            return self.make_infinity(rhs_sign)

        if rhs.is_zero():
            if lhs.is_zero():
                # Zeroes of like sign keep their sign, otherwise the sum is +0 except when
                # rounding toward negative infinity
                if lhs.sign == rhs_sign:
                    return self.make_zero(lhs.sign)
                return self.make_zero(rounding == ROUND_FLOOR)
            return self.normalize(lhs.sign, lhs.exponent_int(), lhs.significand, rounding)
        if lhs.is_zero():
            return self.normalize(rhs_sign, rhs.exponent_int(), rhs.significand, rounding)

        # Both operands are finite and non-zero.  Position the operand with the larger
        # leading bit so its MSB is at bit width, leaving at least 3 bits clear below its
        # LSB.  The other operand is shifted right if necessary with its sticky bit jammed.
        lhs_exp, rhs_exp = lhs.exponent_int(), rhs.exponent_int()
        lhs_top = lhs_exp + lhs.significand.msb_index() - 1
        rhs_top = rhs_exp + rhs.significand.msb_index() - 1
        width = max(lhs.fmt.precision, rhs.fmt.precision, self.precision) + 2
        exponent = max(lhs_top, rhs_top) - width
        limbs = limbs_for_bits(width + 2)
        lhs_sig = _align(lhs.significand, lhs_exp - exponent, limbs)
        rhs_sig = _align(rhs.significand, rhs_exp - exponent, limbs)

        if lhs.sign == rhs_sign:
            significand, carry = lhs_sig.add(rhs_sig)
            assert not carry
            sign = lhs.sign
        else:
            if lhs_sig < rhs_sig:
                significand = rhs_sig.sub(lhs_sig)[0]
                sign = rhs_sign
            else:
                significand = lhs_sig.sub(rhs_sig)[0]
                sign = lhs.sign
            if significand.is_zero():
                # Exact cancellation
                return self.make_zero(rounding == ROUND_FLOOR)

        return self.normalize(sign, exponent, significand, rounding)

    def multiply(self, lhs, rhs, rounding=ROUND_HALF_EVEN):
        '''Returns the product of LHS and RHS in this format.'''
        sign = lhs.sign ^ rhs.sign

        if lhs.is_nan() or rhs.is_nan():
            return self._propagate_nan(lhs, rhs)

        if lhs.is_infinite() or rhs.is_infinite():
            if lhs.is_zero() or rhs.is_zero():
                return self._invalid('multiply')
            return self.make_infinity(sign)

        if lhs.is_zero() or rhs.is_zero():
            return self.make_zero(sign)

        limbs = max(lhs.significand.limbs, rhs.significand.limbs)
        product = lhs.significand.resize(limbs).multiply(rhs.significand.resize(limbs))
        return self.normalize(sign, lhs.exponent_int() + rhs.exponent_int(), product,
                              rounding)

    def divide(self, lhs, rhs, rounding=ROUND_HALF_EVEN):
        '''Return LHS / RHS in this format.'''
        sign = lhs.sign ^ rhs.sign

        if lhs.is_nan() or rhs.is_nan():
            return self._propagate_nan(lhs, rhs)

        if lhs.is_infinite():
            if rhs.is_infinite():
                return self._invalid('divide')
            return self.make_infinity(sign)

        if rhs.is_infinite():
            return self.make_zero(sign)

        if rhs.is_zero():
            if lhs.is_zero():
                return self._invalid('divide')
            logger.debug('division by zero in %r', self)
            return self.make_infinity(sign)

        if lhs.is_zero():
            return self.make_zero(sign)

        return self._from_ratio(sign, lhs.significand, rhs.significand,
                                lhs.exponent_int() - rhs.exponent_int(), rounding)

    def sqrt(self, value, rounding=ROUND_HALF_EVEN):
        '''Return the square root of value in this format.'''
        if value.is_nan():
            return self._propagate_nan(value)

        if value.is_zero():
            return self.make_zero(value.sign)

        if value.sign:
            return self._invalid('sqrt')

        if value.is_infinite():
            return self.make_infinity()

        significand, exponent = value.significand, value.exponent_int()
        size = significand.msb_index()
        # The radicand must have an even exponent and enough bits that its root has two
        # bits beyond our precision.
        shift = max(0, 2 * (self.precision + 2) + 1 - size)
        if (exponent - shift) & 1:
            shift += 1
        limbs = limbs_for_bits(size + shift + 2)
        radicand = significand.resize(limbs).shift_left(shift)
        root, remainder = _isqrt(radicand)
        root = root.jam(not remainder.is_zero())
        return self.normalize(False, (exponent - shift) // 2, root, rounding)

    ##
    ## Other operations
    ##

    def scaleb(self, value, N, rounding=ROUND_HALF_EVEN):
        '''Return value * 2^N for an integer N, in this format.'''
        if not isinstance(N, int):
            raise TypeError('scaleb requires an integer scale')
        if not value.is_finite() or value.is_zero():
            return self._make_value(value.category, value.sign)
        return self.normalize(value.sign, value.exponent_int() + N, value.significand,
                              rounding)

    def round_to_integral(self, value, rounding=ROUND_HALF_EVEN):
        '''Return value rounded to an integral value in this format.  The operand is
        rounded to an integer at its own precision before being placed in this format.'''
        if not value.is_finite() or value.is_zero():
            return self._make_value(value.category, value.sign)
        significand, exponent = value.significand, value.exponent_int()
        if exponent < 0:
            lost_fraction = lost_fraction_from_rshift(significand, -exponent)
            significand = significand.shift_right(-exponent)[0]
            if round_up(rounding, lost_fraction, value.sign, significand.is_odd()):
                significand = significand.add(BigInt.one(significand.limbs))[0]
            exponent = 0
        return self.normalize(value.sign, exponent, significand, rounding)

    def next_up(self, value):
        '''Return the smallest number of this format that compares greater than value.'''
        return self._next_up(value, False)

    def next_down(self, value):
        '''Return the largest number of this format that compares less than value.'''
        return self._next_up(value, True)

    def _next_up(self, value, flip_sign):
        '''Implement next_up, or next_down if flip_sign is True, in which case everything is
        seen from the point of view of the negated value.

        A value of another format is first rounded toward the step direction so no
        number of this format is skipped.
        '''
        value = self.convert(value, ROUND_CEILING if flip_sign else ROUND_FLOOR)
        sign = value.sign ^ flip_sign

        if value.is_nan():
            return value
        if value.is_infinite():
            if sign:
                return self.make_largest_finite(value.sign)
            return value
        if value.is_zero():
            return self.make_smallest_subnormal(flip_sign)

        one = BigInt.one(self.limbs)
        significand, exponent = value.significand, value.exponent
        if sign:
            # Decrement the magnitude
            if significand.to_int() == self.int_bit and exponent > self.e_min:
                significand = BigInt.from_int((1 << self.precision) - 1, self.limbs)
                exponent -= 1
            else:
                significand = significand.sub(one)[0]
        else:
            # Increment the magnitude
            significand = significand.add(one)[0]
            if significand.msb_index() > self.precision:
                significand = significand.shift_right(1)[0]
                exponent += 1
                if exponent > self.e_max:
                    return self.make_infinity(value.sign)
        return self._make_finite(value.sign, exponent, significand)


def _align(significand, shift, limbs):
    '''Return significand shifted left by shift bits, or right if negative with any lost
    bits jammed into the LSB, with the given number of limbs.'''
    if shift >= 0:
        return significand.resize(limbs).shift_left(shift)
    significand, sticky = significand.shift_right(-shift)
    return significand.resize(limbs).jam(sticky)


def _isqrt(radicand):
    '''Return (root, remainder) where root is the integer square root of radicand.

    This is the digit-by-digit method in base 2; it determines one bit of the root per
    step so the loop count is fixed by the radicand's width.
    '''
    limbs = radicand.limbs
    root = BigInt.zero(limbs)
    remainder = radicand
    size = radicand.msb_index()
    if size == 0:
        return root, remainder
    # The highest power of 4 not exceeding the radicand
    position = (size - 1) & ~1
    bit = BigInt.one(limbs).shift_left(position)
    for _ in range(position // 2 + 1):
        trial = root.add(bit)[0]
        if remainder >= trial:
            remainder = remainder.sub(trial)[0]
            root = root.shift_right(1)[0].add(bit)[0]
        else:
            root = root.shift_right(1)[0]
        bit = bit.shift_right(2)[0]
    return root, remainder


class Float(namedtuple('Float', 'fmt category sign exponent significand')):
    '''An immutable floating point number of a FloatFormat.

    Finite non-zero numbers have the value

            (-1)^sign * significand * 2^(exponent - (precision - 1))

    where significand is a BigInt.  exponent is the exponent of the leading significand
    bit; for normal numbers that bit is set, and subnormal numbers have an exponent of
    e_min with the bit clear.  Zeroes, infinities and NaNs have an exponent of zero and a
    zero significand, which nothing reads.
    '''

    def __new__(cls, fmt, category, sign, exponent, significand):
        '''Validate and create a floating point number.'''
        if not isinstance(significand, BigInt):
            raise TypeError('significand must be a BigInt')
        if not isinstance(exponent, int):
            raise TypeError('exponent must be an integer')
        if significand.limbs != fmt.limbs:
            raise ValueError(f'significand must have {fmt.limbs} limbs')
        category = Category(category)
        size = significand.msb_index()
        if category == Category.NORMAL:
            if size != fmt.precision:
                raise ValueError('normal significand must have its leading bit set')
            if not fmt.e_min <= exponent <= fmt.e_max:
                raise ValueError(f'exponent {exponent:,d} out of range')
        elif category == Category.SUBNORMAL:
            if not 0 < size < fmt.precision:
                raise ValueError('subnormal significand must be non-zero with its leading '
                                 'bit clear')
            if exponent != fmt.e_min:
                raise ValueError('subnormal exponent must be e_min')
        elif size or exponent:
            raise ValueError(f'{category.name} must have zero exponent and significand')
        return super().__new__(cls, fmt, category, bool(sign), exponent, significand)

    ##
    ## Non-computational operations
    ##

    def is_zero(self):
        return self.category == Category.ZERO

    def is_infinite(self):
        return self.category == Category.INFINITY

    def is_nan(self):
        return self.category == Category.NAN

    def is_subnormal(self):
        return self.category == Category.SUBNORMAL

    def is_normal(self):
        return self.category == Category.NORMAL

    def is_finite(self):
        return self.category not in (Category.INFINITY, Category.NAN)

    def is_negative(self):
        return self.sign

    def number_class(self):
        '''Return a string describing the class of the number.'''
        if self.category == Category.NAN:
            return 'NaN'
        name = {Category.ZERO: 'Zero', Category.INFINITY: 'Infinity',
                Category.NORMAL: 'Normal', Category.SUBNORMAL: 'Subnormal'}[self.category]
        return ('-' if self.sign else '+') + name

    def exponent_int(self):
        '''Return the exponent of our significand interpreted as an integer.'''
        return self.exponent - (self.fmt.precision - 1)

    def significand_bits(self):
        '''Return the significand, including its leading bit, as a string of binary
        digits.'''
        return self.significand.bits(self.fmt.precision)

    def as_integer_ratio(self):
        '''Return a pair (n, d) of integers whose ratio is exactly equal to the value, with
        a positive denominator and in lowest terms.'''
        if self.is_nan():
            raise ValueError('cannot convert NaN to integer ratio')
        if self.is_infinite():
            raise OverflowError('cannot convert infinity to integer ratio')
        n, d = self.significand.to_int(), 1
        exponent = self.exponent_int()
        if n:
            if exponent > 0:
                n <<= exponent
            else:
                # Strip common powers of two
                shift = min(-exponent, (n & -n).bit_length() - 1)
                n >>= shift
                d <<= -exponent - shift
        return -n if self.sign else n, d

    def dump(self):
        '''Return the raw fields for diagnostics, e.g. FP[+ E=+3 M=11110000000].'''
        sign = '-' if self.sign else '+'
        if self.category == Category.NAN:
            return f'FP[{sign} NaN]'
        if self.category == Category.INFINITY:
            return f'FP[{sign} Inf]'
        if self.category == Category.ZERO:
            return f'FP[{sign} Zero]'
        return f'FP[{sign} E={self.exponent:+d} M={self.significand_bits()}]'

    def to_decimal_string(self, precision=0, text_format=None, rounding=ROUND_HALF_EVEN):
        '''Return a decimal string.

        If precision is 0 the shortest string that reads back as the same number is
        returned.  If it is positive, that many significant digits are output, rounded
        with rounding.  If it is -1, the exact value is output.
        '''
        text_format = text_format or DefaultDecFormat
        if not self.is_finite():
            return text_format.format_non_finite(self.sign, self.is_nan())
        if self.is_zero():
            exponent, digits = 0, '0'
        else:
            is_boundary = self.significand.to_int() == self.fmt.int_bit and \
                self.exponent > self.fmt.e_min
            exponent, digits = decimal_digits(self.significand, self.exponent_int(),
                                              is_boundary, precision, rounding,
                                              self.sign)
        if precision == 0:
            precision = self.fmt.decimal_precision - 1
        else:
            precision = len(digits)
        return text_format.format_decimal(self.sign, exponent, digits, precision)

    def to_float(self):
        '''Return the value rounded to a Python float.'''
        return self.fmt.to_float(self)

    def compare(self, other):
        '''Return a Compare enum comparing self with other, which may be of any format.'''
        if self.is_nan() or other.is_nan():
            return Compare.UNORDERED

        if self.is_zero() and other.is_zero():
            return Compare.EQUAL

        if self.sign != other.sign:
            return Compare.LESS_THAN if self.sign else Compare.GREATER_THAN

        # Same sign; compare magnitudes then flip for negative numbers
        result = self._compare_magnitude(other)
        if self.sign and result != Compare.EQUAL:
            result = Compare(2 - result)
        return result

    def _compare_magnitude(self, other):
        for value, ranking in ((self, Compare.GREATER_THAN), (other, Compare.LESS_THAN)):
            if value.is_infinite():
                if self.category == other.category:
                    return Compare.EQUAL
                return ranking
        for value, ranking in ((self, Compare.LESS_THAN), (other, Compare.GREATER_THAN)):
            if value.is_zero():
                return ranking

        lhs_size = self.significand.msb_index()
        rhs_size = other.significand.msb_index()
        lhs_top = self.exponent_int() + lhs_size
        rhs_top = other.exponent_int() + rhs_size
        if lhs_top != rhs_top:
            return Compare.LESS_THAN if lhs_top < rhs_top else Compare.GREATER_THAN

        # Left-align the significands and compare
        size = max(lhs_size, rhs_size)
        limbs = limbs_for_bits(size)
        lhs = self.significand.resize(limbs).shift_left(size - lhs_size)
        rhs = other.significand.resize(limbs).shift_left(size - rhs_size)
        return lhs.compare(rhs)

    ##
    ## Arithmetic in our format with an explicit rounding mode
    ##

    def add(self, other, rounding=ROUND_HALF_EVEN):
        return self.fmt.add(self, other, rounding)

    def subtract(self, other, rounding=ROUND_HALF_EVEN):
        return self.fmt.subtract(self, other, rounding)

    def multiply(self, other, rounding=ROUND_HALF_EVEN):
        return self.fmt.multiply(self, other, rounding)

    def divide(self, other, rounding=ROUND_HALF_EVEN):
        return self.fmt.divide(self, other, rounding)

    def sqrt(self, rounding=ROUND_HALF_EVEN):
        return self.fmt.sqrt(self, rounding)

    def next_up(self):
        return self.fmt.next_up(self)

    def next_down(self):
        return self.fmt.next_down(self)

    def scaleb(self, N, rounding=ROUND_HALF_EVEN):
        return self.fmt.scaleb(self, N, rounding)

    def round_to_integral(self, rounding=ROUND_HALF_EVEN):
        return self.fmt.round_to_integral(self, rounding)

    ##
    ## Python operators
    ##

    def __repr__(self):
        return self.to_decimal_string()

    def __str__(self):
        return self.to_decimal_string()

    def __bool__(self):
        return not self.is_zero()

    def __float__(self):
        return self.to_float()

    def __int__(self):
        return self.round_to_integral(ROUND_DOWN).as_integer_ratio()[0]

    def __hash__(self):
        if self.is_nan():
            return 0
        if self.is_infinite():
            return hash(float('-inf') if self.sign else float('inf'))
        return hash(Fraction(*self.as_integer_ratio()))

    def __neg__(self):
        return self._replace(sign=not self.sign)

    def __pos__(self):
        return self

    def __abs__(self):
        return self._replace(sign=False)

    def __add__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.add(self, other)

    def __radd__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.add(other, self)

    def __sub__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.subtract(self, other)

    def __rsub__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.subtract(other, self)

    def __mul__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.multiply(self, other)

    def __rmul__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.multiply(other, self)

    def __truediv__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.divide(self, other)

    def __rtruediv__(self, other):
        other = self.fmt.convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.fmt.divide(other, self)

    def __eq__(self, other):
        result = compare_any(self, other)
        return NotImplemented if result is None else result == Compare.EQUAL

    def __ne__(self, other):
        result = compare_any(self, other)
        return NotImplemented if result is None else result != Compare.EQUAL

    def __lt__(self, other):
        result = compare_any(self, other)
        return NotImplemented if result is None else result == Compare.LESS_THAN

    def __le__(self, other):
        result = compare_any(self, other)
        return NotImplemented if result is None else \
            result in (Compare.LESS_THAN, Compare.EQUAL)

    def __gt__(self, other):
        result = compare_any(self, other)
        return NotImplemented if result is None else result == Compare.GREATER_THAN

    def __ge__(self, other):
        result = compare_any(self, other)
        return NotImplemented if result is None else \
            result in (Compare.GREATER_THAN, Compare.EQUAL)


def compare_any(value, other):
    '''LHS is a Float.  RHS is any type.  Returns None if other is not a Float, float, int
    or Fraction.'''
    if isinstance(other, Float):
        return value.compare(other)
    if isinstance(other, float):
        return value.compare(FP64.from_float(other))
    if isinstance(other, (int, Fraction)):
        # Compare exactly as fractions; non-finite values compare as they do with zero
        if not value.is_finite():
            return value.compare(value.fmt.make_zero())
        lhs = Fraction(*value.as_integer_ratio())
        if lhs == other:
            return Compare.EQUAL
        return Compare.LESS_THAN if lhs < other else Compare.GREATER_THAN
    return None


FP16 = FloatFormat.from_widths(5, 10)
FP32 = FloatFormat.from_widths(8, 23)
FP64 = FloatFormat.from_widths(11, 52)
FP128 = FloatFormat.from_widths(15, 112)
FP256 = FloatFormat.from_widths(19, 236)
