#
# Binary floating point arithmetic with arbitrary exponent and significand widths
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

from .bigint import Compare
from .errors import *
from .floats import *
from .rounding import *
from .text import TextFormat, DefaultDecFormat, Dec_g_Format


__all__ = (('Compare', 'TextFormat', 'DefaultDecFormat', 'Dec_g_Format')
           + errors.__all__ + floats.__all__ + rounding.__all__)
