"""
Encoding/Decoding components - Array / Pulse <-> Bit pattern conversion
"""
from .converters import (
    decode_array, encode_array,
    bits_to_pulse, pulse_to_bits,
    float_to_pulse, pulse_to_float,
    float16_to_pulse, pulse_to_float16,
    float32_to_pulse, pulse_to_float32,
    float64_to_pulse, pulse_to_float64,
    to_binary_string
)

__all__ = [
    'decode_array', 'encode_array',
    'bits_to_pulse', 'pulse_to_bits',
    'float_to_pulse', 'pulse_to_float',
    'float16_to_pulse', 'pulse_to_float16',
    'float32_to_pulse', 'pulse_to_float32',
    'float64_to_pulse', 'pulse_to_float64',
    'to_binary_string',
]
