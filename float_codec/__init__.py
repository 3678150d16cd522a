"""
FloatCodec - IEEE-754 binary16 / binary32 / binary64 bit pattern codec
"""
from .core import (
    FloatFormat, FloatClass, FloatFields,
    HALF, SINGLE, DOUBLE,
    classify, NaNMode
)
from .codec import (
    decode, encode,
    decode_half, encode_half,
    decode_single, encode_single,
    decode_double, encode_double,
    unpack, pack, is_canonical,
    round_half_even
)
from .encoding import *

__version__ = "0.1.0"
