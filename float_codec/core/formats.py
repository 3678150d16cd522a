"""
IEEE-754 格式描述 (Float Formats)
=================================

描述 binary16 / binary32 / binary64 三种存储格式，并提供位字段工具。

格式布局 (MSB first):
- FP16: [S | E4..E0 | M9..M0], bias=15
- FP32: [S | E7..E0 | M22..M0], bias=127
- FP64: [S | E10..E0 | M51..M0], bias=1023

所有字段 (sign / exponent / fraction) 都是通过掩码和移位计算的只读视图，
不单独存储。

作者: FloatCodec Project
许可: MIT License
"""
import struct
from collections import namedtuple


class FloatClass:
    """浮点值分类枚举

    分类完全由 exponent / fraction 字段决定:
    - ZERO:      E=0,   M=0
    - SUBNORMAL: E=0,   M≠0
    - NORMAL:    0 < E < 全1
    - INFINITY:  E=全1, M=0
    - NAN:       E=全1, M≠0
    """
    ZERO = 'zero'
    SUBNORMAL = 'subnormal'
    NORMAL = 'normal'
    INFINITY = 'infinity'
    NAN = 'nan'


FloatFields = namedtuple('FloatFields', ['sign', 'exponent', 'fraction'])


class FloatFormat:
    """IEEE-754 二进制交换格式

    Args:
        name: 格式名称 ('half' / 'single' / 'double')
        exponent_bits: 指数位宽
        fraction_bits: 尾数位宽 (不含隐含位)
    """
    _registry = {}

    def __init__(self, name, exponent_bits: int, fraction_bits: int):
        self.name = name
        self.exponent_bits = exponent_bits
        self.fraction_bits = fraction_bits
        self.width = 1 + exponent_bits + fraction_bits
        self.bias = (1 << (exponent_bits - 1)) - 1

        self.max_exponent = (1 << exponent_bits) - 1
        self.sign_mask = 1 << (self.width - 1)
        self.exponent_mask = self.max_exponent << fraction_bits
        self.fraction_mask = (1 << fraction_bits) - 1
        self.quiet_bit = 1 << (fraction_bits - 1)
        self.bits_mask = (1 << self.width) - 1

    def __repr__(self):
        return (f"FloatFormat({self.name!r}, exponent_bits={self.exponent_bits}, "
                f"fraction_bits={self.fraction_bits})")

    # ---- 特殊位模式 ----
    def zero(self, sign=0):
        return sign << (self.width - 1)

    def infinity(self, sign=0):
        return (sign << (self.width - 1)) | self.exponent_mask

    def canonical_nan(self, sign=0):
        """规范 quiet NaN: E=全1，尾数仅最高位为 1"""
        return (sign << (self.width - 1)) | self.exponent_mask | self.quiet_bit

    @property
    def smallest_subnormal(self):
        return 1

    @property
    def smallest_normal(self):
        return 1 << self.fraction_bits

    @property
    def largest_finite(self):
        return self.exponent_mask - 1

    # ---- 查找 ----
    @classmethod
    def register(cls, fmt, *aliases):
        for key in (fmt.name, fmt.width) + aliases:
            cls._registry[key] = fmt
        return fmt

    @classmethod
    def by_name(cls, name):
        """按名称查找格式 (例如 'half', 'fp32', 'float64')"""
        fmt = cls._registry.get(name.lower() if isinstance(name, str) else None)
        if fmt is None:
            raise ValueError(
                f"Unknown float format: {name!r}. "
                f"Expected one of: 'half', 'single', 'double'"
            )
        return fmt

    @classmethod
    def by_width(cls, width):
        """按总位宽查找格式 (16 / 32 / 64)"""
        fmt = cls._registry.get(width) if isinstance(width, int) else None
        if fmt is None:
            raise ValueError(f"Unsupported width: {width}. Expected 16, 32 or 64")
        return fmt

    @classmethod
    def resolve(cls, fmt):
        """接受 FloatFormat、名称或位宽，返回 FloatFormat"""
        if isinstance(fmt, FloatFormat):
            return fmt
        if isinstance(fmt, str):
            return cls.by_name(fmt)
        return cls.by_width(fmt)


HALF = FloatFormat.register(FloatFormat('half', 5, 10), 'fp16', 'float16', 'binary16')
SINGLE = FloatFormat.register(FloatFormat('single', 8, 23), 'fp32', 'float32', 'binary32')
DOUBLE = FloatFormat.register(FloatFormat('double', 11, 52), 'fp64', 'float64', 'binary64')


def check_bits(fmt, bits):
    """校验位模式是否是 fmt 位宽内的无符号整数

    Raises:
        TypeError: bits 不是整数
        ValueError: bits 超出 [0, 2^width) 范围
    """
    if isinstance(bits, bool):
        raise TypeError("Bit pattern must be an integer, got bool")
    if not isinstance(bits, int):
        # numpy 整数标量经 __index__ 转为 int
        try:
            bits = bits.__index__()
        except AttributeError:
            raise TypeError(f"Bit pattern must be an integer, got {type(bits).__name__}") from None
    if bits < 0 or bits > fmt.bits_mask:
        raise ValueError(
            f"Bit pattern 0x{bits:X} out of range for {fmt.name} "
            f"(expected 0 <= bits < 2**{fmt.width})"
        )
    return bits


def split_fields(fmt, bits):
    """提取 sign / exponent / fraction 三个字段"""
    sign = (bits >> (fmt.width - 1)) & 0x1
    exponent = (bits >> fmt.fraction_bits) & fmt.max_exponent
    fraction = bits & fmt.fraction_mask
    return FloatFields(sign, exponent, fraction)


def join_fields(fmt, sign, exponent, fraction):
    """组装三个字段为位模式 (不做范围检查)"""
    return (sign << (fmt.width - 1)) | (exponent << fmt.fraction_bits) | fraction


def classify(fmt, bits):
    """根据字段判断位模式的分类 (FloatClass)"""
    _, exponent, fraction = split_fields(fmt, check_bits(fmt, bits))
    if exponent == fmt.max_exponent:
        return FloatClass.INFINITY if fraction == 0 else FloatClass.NAN
    if exponent == 0:
        return FloatClass.ZERO if fraction == 0 else FloatClass.SUBNORMAL
    return FloatClass.NORMAL


# ---- 原生 binary64 重解释 (大端规范化，与主机字节序无关) ----
def float64_to_bits(value):
    """Python float -> binary64 位模式"""
    return struct.unpack('>Q', struct.pack('>d', value))[0]


def bits_to_float64(bits):
    """binary64 位模式 -> Python float"""
    return struct.unpack('>d', struct.pack('>Q', bits & 0xFFFFFFFFFFFFFFFF))[0]
