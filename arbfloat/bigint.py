#
# Fixed-width unsigned big integers used to hold floating point significands
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

from enum import IntEnum

import attr

from .errors import DivideByZeroSignal, SubstrateError


__all__ = ('BigInt', 'Compare', 'LIMB_BITS', 'limbs_for_bits')


LIMB_BITS = 64
LIMB_MASK = (1 << LIMB_BITS) - 1


class Compare(IntEnum):
    '''The result of a comparison.  Big integers never compare UNORDERED.'''
    LESS_THAN = 0
    EQUAL = 1
    GREATER_THAN = 2
    UNORDERED = 3


def limbs_for_bits(bits):
    '''Return the number of limbs needed to hold an unsigned integer of the given bit width.'''
    return max(1, (bits + LIMB_BITS - 1) // LIMB_BITS)


#
# Helpers operating in place on lists of limbs, least significant first.
#

def _compare_parts(lhs, rhs):
    '''Return -1, 0 or 1 as LHS is less than, equal to or greater than RHS.'''
    for a, b in zip(reversed(lhs), reversed(rhs)):
        if a != b:
            return -1 if a < b else 1
    return 0


def _subtract_in_place(lhs, rhs):
    '''Subtract RHS from LHS modulo the width.  Return the borrow out.'''
    borrow = 0
    for n, (a, b) in enumerate(zip(lhs, rhs)):
        diff = a - b - borrow
        borrow = 1 if diff < 0 else 0
        lhs[n] = diff & LIMB_MASK
    return borrow


def _shift_left_one(parts, incoming):
    '''Shift left one bit, shifting INCOMING into the LSB.  Return the bit shifted out.'''
    carry = incoming
    for n, part in enumerate(parts):
        parts[n] = ((part << 1) & LIMB_MASK) | carry
        carry = part >> (LIMB_BITS - 1)
    return carry


@attr.s(slots=True, frozen=True, repr=False, order=False)
class BigInt:
    '''An unsigned integer of fixed width stored as a tuple of 64-bit limbs, least
    significant limb first.

    Instances are immutable; every operation returns new values.  Binary operations
    require both operands to have the same number of limbs.  Arithmetic wraps modulo
    2^width and reports carries and borrows to the caller, who decides what they mean.
    '''
    parts = attr.ib(converter=tuple)

    @classmethod
    def zero(cls, limbs):
        return cls((0, ) * limbs)

    @classmethod
    def one(cls, limbs):
        return cls((1, ) + (0, ) * (limbs - 1))

    @classmethod
    def from_int(cls, value, limbs=None):
        '''Return a BigInt holding the non-negative integer value.  If limbs is None the
        narrowest width that holds it is used.'''
        if not isinstance(value, int):
            raise TypeError('BigInt.from_int requires an integer')
        if value < 0:
            raise ValueError('BigInt values are unsigned')
        if limbs is None:
            limbs = limbs_for_bits(value.bit_length())
        parts = []
        for _ in range(limbs):
            parts.append(value & LIMB_MASK)
            value >>= LIMB_BITS
        if value:
            raise SubstrateError(f'value does not fit in {limbs} limbs')
        return cls(parts)

    def to_int(self):
        '''Return the value as a Python integer.'''
        result = 0
        for part in reversed(self.parts):
            result = (result << LIMB_BITS) | part
        return result

    @property
    def limbs(self):
        return len(self.parts)

    @property
    def width(self):
        '''The width in bits.'''
        return len(self.parts) * LIMB_BITS

    def _check_width(self, other):
        if len(self.parts) != len(other.parts):
            raise SubstrateError(f'width mismatch: {len(self.parts)} and '
                                 f'{len(other.parts)} limbs')

    ##
    ## Queries
    ##

    def is_zero(self):
        return not any(self.parts)

    def is_odd(self):
        return bool(self.parts[0] & 1)

    def msb_index(self):
        '''Return the 1-based index of the most significant set bit, or 0 if zero.'''
        for n in range(len(self.parts) - 1, -1, -1):
            part = self.parts[n]
            if part:
                return n * LIMB_BITS + part.bit_length()
        return 0

    def test_bit(self, index):
        '''Return True if the bit at the given 0-based index is set.  Bits outside the width
        are clear.'''
        if index < 0 or index >= self.width:
            return False
        word, bit = divmod(index, LIMB_BITS)
        return bool((self.parts[word] >> bit) & 1)

    def any_bits_below(self, count):
        '''Return True if any of the lowest count bits is set.'''
        if count <= 0:
            return False
        words, bits = divmod(min(count, self.width), LIMB_BITS)
        if any(self.parts[:words]):
            return True
        return bool(bits) and bool(self.parts[words] & ((1 << bits) - 1))

    def bits(self, count):
        '''Return the lowest count bits as a string of binary digits, most significant
        first.'''
        return ''.join('1' if self.test_bit(n) else '0' for n in reversed(range(count)))

    def compare(self, other):
        self._check_width(other)
        return Compare(_compare_parts(self.parts, other.parts) + 1)

    def __lt__(self, other):
        return self.compare(other) == Compare.LESS_THAN

    def __le__(self, other):
        return self.compare(other) != Compare.GREATER_THAN

    def __gt__(self, other):
        return self.compare(other) == Compare.GREATER_THAN

    def __ge__(self, other):
        return self.compare(other) != Compare.LESS_THAN

    def __repr__(self):
        return f'BigInt({hex(self.to_int())}, limbs={len(self.parts)})'

    ##
    ## Width changes
    ##

    def resize(self, limbs):
        '''Return the value with the given number of limbs.  Narrowing must not drop set
        bits.'''
        count = len(self.parts)
        if limbs >= count:
            return BigInt(self.parts + (0, ) * (limbs - count))
        if any(self.parts[limbs:]):
            raise SubstrateError(f'cannot narrow {self!r} to {limbs} limbs')
        return BigInt(self.parts[:limbs])

    def jam(self, sticky):
        '''Return the value with its LSB set if sticky is true.  This folds the bits lost
        below the LSB into it so they still count for rounding.'''
        if not sticky or self.parts[0] & 1:
            return self
        return BigInt((self.parts[0] | 1, ) + self.parts[1:])

    ##
    ## Arithmetic
    ##

    def add(self, other):
        '''Return a pair (sum, carry) where sum is taken modulo 2^width.'''
        self._check_width(other)
        carry = 0
        parts = []
        for a, b in zip(self.parts, other.parts):
            total = a + b + carry
            parts.append(total & LIMB_MASK)
            carry = total >> LIMB_BITS
        return BigInt(parts), bool(carry)

    def sub(self, other):
        '''Return a pair (difference, borrow) where difference is taken modulo 2^width.'''
        self._check_width(other)
        parts = list(self.parts)
        borrow = _subtract_in_place(parts, other.parts)
        return BigInt(parts), bool(borrow)

    def shift_left(self, count):
        '''Shift left by count bits.  Bits shifted beyond the width are lost.'''
        if count < 0:
            raise SubstrateError(f'negative shift count {count}')
        limbs = len(self.parts)
        if count >= self.width:
            return BigInt.zero(limbs)
        words, bits = divmod(count, LIMB_BITS)
        parts = [0] * words + list(self.parts[:limbs - words])
        if bits:
            carry = 0
            for n, part in enumerate(parts):
                parts[n] = ((part << bits) & LIMB_MASK) | carry
                carry = part >> (LIMB_BITS - bits)
        return BigInt(parts)

    def shift_right(self, count):
        '''Shift right by count bits.  Return a pair (result, sticky) where sticky is True
        if any set bit was shifted out.'''
        if count < 0:
            raise SubstrateError(f'negative shift count {count}')
        if count == 0:
            return self, False
        limbs = len(self.parts)
        if count >= self.width:
            return BigInt.zero(limbs), not self.is_zero()
        sticky = self.any_bits_below(count)
        words, bits = divmod(count, LIMB_BITS)
        parts = list(self.parts[words:]) + [0] * words
        if bits:
            for n in range(limbs):
                high = parts[n + 1] if n + 1 < limbs else 0
                parts[n] = (parts[n] >> bits) | ((high << (LIMB_BITS - bits)) & LIMB_MASK)
        return BigInt(parts), sticky

    def multiply(self, other):
        '''Return the exact product, which has twice the width of the operands.'''
        self._check_width(other)
        limbs = len(self.parts)
        result = [0] * (2 * limbs)
        for i, a in enumerate(self.parts):
            if not a:
                continue
            carry = 0
            for j, b in enumerate(other.parts):
                total = result[i + j] + a * b + carry
                result[i + j] = total & LIMB_MASK
                carry = total >> LIMB_BITS
            result[i + limbs] = carry
        return BigInt(result)

    def divide(self, other):
        '''Return a pair (quotient, remainder) of truncating division.

        This is restoring binary long division; it takes one step per quotient bit.
        '''
        self._check_width(other)
        if other.is_zero():
            raise DivideByZeroSignal('big integer division by zero')
        limbs = len(self.parts)
        if _compare_parts(self.parts, other.parts) < 0:
            return BigInt.zero(limbs), self

        dividend_size = self.msb_index()
        divisor_size = other.msb_index()
        # The leading divisor_size - 1 bits of the dividend are less than the divisor
        remainder = list(self.shift_right(dividend_size - divisor_size + 1)[0].parts)
        quotient = [0] * limbs
        for index in range(dividend_size - divisor_size, -1, -1):
            word, bit = divmod(index, LIMB_BITS)
            overflow = _shift_left_one(remainder, (self.parts[word] >> bit) & 1)
            # If a bit was shifted out the true remainder exceeds the divisor, and the
            # wrapped subtraction below delivers the correct difference.
            if overflow or _compare_parts(remainder, other.parts) >= 0:
                _subtract_in_place(remainder, other.parts)
                quotient[word] |= 1 << bit
        return BigInt(quotient), BigInt(remainder)

    def mul_small(self, factor):
        '''Multiply by a non-negative integer less than 2^64.  Return a pair (product,
        carry) where carry is the part of the product beyond the width.'''
        if not 0 <= factor <= LIMB_MASK:
            raise SubstrateError(f'factor {factor} is not a single limb')
        carry = 0
        parts = []
        for part in self.parts:
            total = part * factor + carry
            parts.append(total & LIMB_MASK)
            carry = total >> LIMB_BITS
        return BigInt(parts), carry

    def divmod_small(self, divisor):
        '''Divide by a positive integer less than 2^64.  Return a pair (quotient,
        remainder) with the remainder a Python integer.'''
        if not 0 <= divisor <= LIMB_MASK:
            raise SubstrateError(f'divisor {divisor} is not a single limb')
        if divisor == 0:
            raise DivideByZeroSignal('big integer division by zero')
        parts = list(self.parts)
        remainder = 0
        for n in range(len(parts) - 1, -1, -1):
            parts[n], remainder = divmod((remainder << LIMB_BITS) | parts[n], divisor)
        return BigInt(parts), remainder
