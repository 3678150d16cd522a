"""
Core components - Format descriptors, bit-field helpers, NaN mode control
"""
from .formats import (
    FloatFormat, FloatClass, FloatFields,
    HALF, SINGLE, DOUBLE,
    check_bits, split_fields, join_fields, classify,
    float64_to_bits, bits_to_float64
)
from .nan_mode import NaNMode
