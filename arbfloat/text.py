#
# Conversion between binary floating point significands and decimal text
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

import re
from collections import namedtuple
from math import log2

import attr

from .bigint import BigInt, Compare, limbs_for_bits
from .errors import ParseError, SubstrateError
from .rounding import LostFraction, round_up


__all__ = ('TextFormat', 'DefaultDecFormat', 'Dec_g_Format', 'DecimalParts',
           'parse_decimal', 'decimal_digits', 'digits_to_bigint', 'power_of_ten')


log2_10 = log2(10)

# The largest power of ten that fits in a limb, and its exponent
CHUNK_DIGITS = 19
CHUNK_POWER = 10 ** CHUNK_DIGITS


@attr.s(slots=True, kw_only=True, frozen=True)
class TextFormat:
    '''Controls the output of conversion to decimal strings.'''

    # The minimum number of digits to output in the exponent of a finite number.  Defaults
    # to 1.  0 suppresses the exponent by adding leading or trailing zeroes to the
    # significand as needed (as for the printf 'f' format specifier in the C programming
    # language).  If negative, apply the rule for the printf 'g' format specifier to
    # decide whether to display an exponent or not, in which case the minimum number of
    # digits in the exponent is the absolute value.
    exp_digits = attr.ib(default=1)
    # If True positive exponents display a '+'.
    force_exp_sign = attr.ib(default=True)
    # If True, numbers with a clear sign bit are preceded with a '+'.
    force_leading_sign = attr.ib(default=False)
    # If True, display a floating point followed by a zero even though none is needed.  For
    # example, "5" and "1e2" would display as "5.0" and "1.0e2".
    force_point = attr.ib(default=False)
    # If True, the exponent character is in upper case.  This does not affect the text of
    # the inf and nan indicators below which are copied unmodified.
    upper_case = attr.ib(default=False)
    # If True, trailing insignificant zeroes are stripped
    rstrip_zeroes = attr.ib(default=False)
    # The string output for infinity
    inf = attr.ib(default='Infinity')
    # The string output for NaNs
    nan = attr.ib(default='NaN')

    def leading_sign(self, sign):
        '''Return the leading sign string.'''
        return '-' if sign else '+' if self.force_leading_sign else ''

    def exponent_str(self, exponent):
        '''Return the formatted exponent.'''
        sign = '-' if exponent < 0 else '+' if self.force_exp_sign else ''
        main = str(abs(exponent))
        zeroes = '0' * (abs(self.exp_digits) - len(main))
        return f'{sign}{zeroes}{main}'

    def format_non_finite(self, sign, is_nan):
        '''Returns the output text for infinities and NaNs.'''
        return self.leading_sign(sign) + (self.nan if is_nan else self.inf)

    def format_decimal(self, sign, exponent, digits, precision=None):
        '''Format a finite number.  digits holds its significant decimal digits and the
        leading digit has weight 10^exponent.  precision is the significant digit count
        used by the 'g' rule; it defaults to the number of digits.
        '''
        precision = precision or len(digits)
        assert precision > 0

        if self.rstrip_zeroes:
            digits = digits.rstrip('0') or '0'

        use_exponent = self.exp_digits != 0
        if self.exp_digits < 0 and -4 <= exponent < precision:
            use_exponent = False

        if use_exponent:
            exp_char = 'E' if self.upper_case else 'e'
            body = self._place_point(digits, 1) + exp_char + self.exponent_str(exponent)
        elif exponent < 0:
            body = '0.' + '0' * (-exponent - 1) + digits
        else:
            body = self._place_point(digits.ljust(exponent + 1, '0'), exponent + 1)
        return self.leading_sign(sign) + body

    def _place_point(self, digits, integer_digits):
        '''Return digits with a decimal point after the first integer_digits of them.'''
        if integer_digits < len(digits):
            return f'{digits[:integer_digits]}.{digits[integer_digits:]}'
        return digits + '.0' if self.force_point else digits


# Output in the style of Python's repr() of floats
DefaultDecFormat = TextFormat(exp_digits=-2, force_point=True, inf='inf', nan='nan')
# Intended to match the output of Python's g format specifier at the same precision
Dec_g_Format = TextFormat(exp_digits=-2, rstrip_zeroes=True, inf='inf', nan='nan')


DecimalParts = namedtuple('DecimalParts', 'sign kind digits exponent')
DecimalParts.__doc__ = '''A parsed decimal string.  kind is 'finite', 'inf' or 'nan'.  For
finite numbers the magnitude is int(digits) * 10^exponent, with digits free of leading and
trailing zeroes (a zero is the single digit '0' with exponent 0).'''


DEC_FLOAT_REGEX = re.compile(
    # sign[opt]
    '([-+]?)('
    # (dec-integer[opt].fraction or dec-integer.[opt])
    '(([0-9]*)\\.([0-9]+)|([0-9]+)\\.?)'
    # e sign[opt]dec-exponent   [opt]
    '(e([-+]?[0-9]+))?|'
    # inf or infinity
    '(inf(inity)?)|'
    # nan
    '(nan))$',
    re.ASCII | re.IGNORECASE
)


def parse_decimal(string):
    '''Parse a decimal floating point number.  Surrounding whitespace is ignored.  Raises
    ParseError if the string is malformed.'''
    if not isinstance(string, str):
        raise TypeError('parse_decimal requires a string')

    match = DEC_FLOAT_REGEX.match(string.strip())
    if match is None:
        raise ParseError(string)

    groups = match.groups()
    sign = groups[0] == '-'
    if groups[8]:
        return DecimalParts(sign, 'inf', '', 0)
    if groups[10]:
        return DecimalParts(sign, 'nan', '', 0)

    # If a fraction was specified, the integer and fraction parts are in groups[3],
    # groups[4].  If no fraction was specified the integer is in groups[5].
    if groups[5] is None:
        int_str, frac_str = groups[3], groups[4]
    else:
        int_str, frac_str = groups[5], ''
    exponent = int(groups[7] or 0) - len(frac_str)
    digits = (int_str + frac_str).rstrip('0')
    exponent += len(int_str) + len(frac_str) - len(digits)
    digits = digits.lstrip('0')
    if not digits:
        return DecimalParts(sign, 'finite', '0', 0)
    return DecimalParts(sign, 'finite', digits, exponent)


def _scale(value, factor):
    '''Multiply a BigInt by a small factor; it is a fault for the product to overflow.'''
    value, carry = value.mul_small(factor)
    if carry:
        raise SubstrateError('decimal scaling overflowed its width')
    return value


def digits_to_bigint(digits, limbs=None):
    '''Convert a string of decimal digits to a BigInt by repeated multiplication by ten.'''
    if limbs is None:
        limbs = limbs_for_bits(int(len(digits) * log2_10) + 1)
    value = BigInt.zero(limbs)
    for start in range(0, len(digits), CHUNK_DIGITS):
        chunk = digits[start: start + CHUNK_DIGITS]
        value = _scale(value, 10 ** len(chunk))
        value, carry = value.add(BigInt.from_int(int(chunk), limbs))
        if carry:
            raise SubstrateError('decimal digits overflowed their width')
    return value


def power_of_ten(exponent, limbs=None):
    '''Return 10^exponent as a BigInt.'''
    if limbs is None:
        limbs = limbs_for_bits(int(exponent * log2_10) + 2)
    value = BigInt.one(limbs)
    chunks, rest = divmod(exponent, CHUNK_DIGITS)
    for _ in range(chunks):
        value = _scale(value, CHUNK_POWER)
    return _scale(value, 10 ** rest)


def _digit_divmod(value, divisor):
    '''Return (quotient, remainder) of value / divisor where the quotient is known to be a
    single decimal digit.'''
    digit = 0
    while value >= divisor:
        value = value.sub(divisor)[0]
        digit += 1
    assert digit < 10
    return digit, value


def _increment_digits(digits):
    '''Add one to the last of a bytearray of ASCII digits in place.  Return 1 if the
    carry ripples out of the first digit, which then becomes 1, else 0.'''
    for pos in range(len(digits) - 1, -1, -1):
        if digits[pos] != 57:
            digits[pos] += 1
            return 0
        digits[pos] = 48
    digits[0] = 49
    return 1


def decimal_digits(significand, exponent, is_boundary, precision, rounding, sign):
    '''Convert the non-zero value significand * 2^exponent to decimal.

    significand is a BigInt.  is_boundary is True if the significand is the smallest of
    its binade, i.e. the gap to the next lower value is half the gap to the next higher.
    If precision is zero the shortest string of digits that reads back as the same value
    is generated.  If it is positive that many digits are generated, rounded with the
    given rounding mode and sign.  If it is -1 the exact expansion is generated.

    Returns a pair (exponent, digits) where exponent is the decimal exponent of the
    leading digit.

    See "How to Print Floating-Point Numbers Accurately" by Steele and White, in
    particular Table 3.
    '''
    assert not significand.is_zero()
    e_p = exponent
    size = significand.msb_index()
    limbs = limbs_for_bits(max(size + max(0, e_p), max(0, -e_p) + 1) + 16)
    one = BigInt.one(limbs)
    R = significand.resize(limbs).shift_left(max(0, e_p))
    M = one.shift_left(max(0, e_p))
    S = one.shift_left(max(0, -e_p))

    # The value is R / S with M the weight of one ULP.  Scale R by ten until R / S
    # reaches 0.1, so the first digit extracted is significant.
    exponent = -1
    while True:
        R10 = _scale(R, 10)
        if R10 >= S:
            break
        exponent -= 1
        R = R10
        M = _scale(M, 10)

    # Scale S until the value plus half an ULP is below one, so no digit exceeds nine
    two_R_plus_M = R.shift_left(1).add(M)[0]
    while two_R_plus_M >= S.shift_left(1):
        S = _scale(S, 10)
        exponent += 1

    if precision:
        # A fixed count of digits, or all of them for -1
        digits = bytearray()
        count = precision
        while count and not R.is_zero():
            U, R = _digit_divmod(_scale(R, 10), S)
            digits.append(U + 48)
            count -= 1

        if not R.is_zero():
            comparison = R.shift_left(1).compare(S)
            lost_fraction = (LostFraction.LESS_THAN_HALF, LostFraction.EXACTLY_HALF,
                             LostFraction.MORE_THAN_HALF)[comparison]

            if round_up(rounding, lost_fraction, sign, bool(digits[-1] & 1)):
                exponent += _increment_digits(digits)
    else:
        # Stop once the remainder is within half an ULP of either neighbouring digit
        # string; below a power of two the lower gap is half the upper.  An even
        # significand reads back under ties-to-even so the bounds become inclusive.
        low_shift = 2 if is_boundary else 1
        is_even = not significand.is_odd()
        digits = bytearray()

        while True:
            U, R = _digit_divmod(_scale(R, 10), S)
            M = _scale(M, 10)
            threshold = M.add(one)[0] if is_even else M
            low = R.shift_left(low_shift) < threshold
            high = S.sub(R)[0].shift_left(1) < threshold
            if low or high:
                break
            digits.append(U + 48)

        if low and not high:
            pass
        elif high and not low:
            U += 1
        else:
            comparison = R.shift_left(1).compare(S)
            if comparison == Compare.GREATER_THAN:
                U += 1
            elif comparison == Compare.EQUAL:
                U += (U & 1)
        digits.append(U + 48)

    digits = digits.decode()
    digits += '0' * (precision - len(digits))

    return exponent, digits
