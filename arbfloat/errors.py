#
# Exceptions raised by arbitrary-width binary floating point arithmetic
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

__all__ = ('FloatError', 'ParseError', 'DivideByZeroSignal', 'SubstrateError')


class FloatError(ArithmeticError):
    '''Base class of all exceptions raised by this package.

    Exceptional floating point results (invalid operations, division by zero, overflow
    and underflow) are never raised; they are delivered as NaNs, infinities, subnormals
    and zeroes.  Only malformed input and internal faults are raised.
    '''


class ParseError(FloatError, ValueError):
    '''Raised when a string is not a well-formed decimal floating point number.'''

    def __init__(self, string):
        super().__init__(f'invalid floating point number: {string!r}')
        self.string = string


class DivideByZeroSignal(FloatError, ZeroDivisionError):
    '''Raised by the significand substrate when asked to divide by zero.

    The arithmetic layer checks for zero divisors before dividing, so this should never
    escape a floating point operation.
    '''


class SubstrateError(FloatError, RuntimeError):
    '''An internal-consistency fault in big-integer arithmetic, such as mismatched widths
    or a truncation that would lose set bits.  It indicates a defect, not bad input.'''
