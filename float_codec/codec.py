"""
FloatCodec - IEEE-754 位模式编解码
==================================

在 16 / 32 / 64 位 IEEE-754 位模式与 Python float 之间转换。

统一算法 (位操作):
- decode: 掩码/移位取出 sign / exponent / fraction，按分类用 ldexp 精确重建。
  half 与 single 的值在 binary64 中总能精确表示。
- encode: 先取输入 binary64 的位模式，归一化为 significand × 2^(e-52)，
  significand ∈ [2^52, 2^53)，再按目标格式截位。

舍入策略:
- 规格化尾数截位与非规格化右移统一使用 round-half-to-even。
- 尾数进位溢出时指数 +1，可能进一步溢出为 Inf。
- 低于最小非规格化数所在量级 (右移量超过 fraction 位宽) 的值直接编码为带符号零。

NaN:
- 默认 (NaNMode.CANONICAL) 不保留载荷: decode 得到同符号 quiet NaN，
  encode 输出规范 quiet NaN。
- NaNMode.PRESERVE 下载荷位经 binary64 尾数高位传递，位精确往返。
- unpack / pack 在字段层面无损，可直接搬运任意 NaN 载荷。

作者: FloatCodec Project
许可: MIT License
"""
import math

from .core.formats import (
    FloatFormat, FloatFields, HALF, SINGLE, DOUBLE,
    check_bits, split_fields, join_fields,
    float64_to_bits, bits_to_float64
)
from .core.nan_mode import NaNMode

# binary64 源格式常量
_F64_FRACTION_BITS = 52
_F64_BIAS = 1023
_F64_MAX_EXPONENT = 0x7FF
_F64_FRACTION_MASK = (1 << _F64_FRACTION_BITS) - 1


def round_half_even(value: int, shift: int) -> int:
    """value / 2^shift，round-half-to-even

    Args:
        value: 非负整数 (带隐含位的 significand)
        shift: 右移位数，<= 0 时为精确左移
    """
    if shift <= 0:
        return value << -shift
    truncated = value >> shift
    remainder = value & ((1 << shift) - 1)
    half = 1 << (shift - 1)
    if remainder > half or (remainder == half and truncated & 1):
        truncated += 1
    return truncated


def _decode_nan(fmt, sign, fraction, nan_mode):
    if NaNMode.is_preserve(nan_mode):
        payload = fraction << (_F64_FRACTION_BITS - fmt.fraction_bits)
    else:
        payload = 1 << (_F64_FRACTION_BITS - 1)
    return bits_to_float64((sign << 63) | (_F64_MAX_EXPONENT << _F64_FRACTION_BITS) | payload)


def decode(fmt, bits, nan_mode=None) -> float:
    """位模式 -> float

    Args:
        fmt: FloatFormat / 格式名 / 位宽
        bits: [0, 2^width) 内的无符号整数
        nan_mode: NaN 载荷策略覆盖，None 跟随 NaNMode 当前模式

    Returns:
        float: 精确值 (half / single 提升为 binary64)
    """
    fmt = FloatFormat.resolve(fmt)
    if nan_mode is not None:
        NaNMode.validate(nan_mode)
    sign, exponent, fraction = split_fields(fmt, check_bits(fmt, bits))

    if exponent == fmt.max_exponent:
        if fraction == 0:
            return -math.inf if sign else math.inf
        return _decode_nan(fmt, sign, fraction, nan_mode)

    if exponent == 0:
        # Zero / Subnormal: fraction × 2^(1 - bias - fraction_bits)
        value = math.ldexp(fraction, 1 - fmt.bias - fmt.fraction_bits)
    else:
        # Normal: (2^fraction_bits + fraction) × 2^(exponent - bias - fraction_bits)
        significand = (1 << fmt.fraction_bits) | fraction
        value = math.ldexp(significand, exponent - fmt.bias - fmt.fraction_bits)

    return -value if sign else value


def encode(fmt, value, nan_mode=None) -> int:
    """float -> 位模式

    Args:
        fmt: FloatFormat / 格式名 / 位宽
        value: 可经 float() 转换的实数 (含 NaN / Inf / 带符号零)
        nan_mode: NaN 载荷策略覆盖，None 跟随 NaNMode 当前模式

    Returns:
        int: [0, 2^width) 内的位模式
    """
    fmt = FloatFormat.resolve(fmt)
    if nan_mode is not None:
        NaNMode.validate(nan_mode)
    source = float64_to_bits(float(value))
    sign = source >> 63
    src_exponent = (source >> _F64_FRACTION_BITS) & _F64_MAX_EXPONENT
    src_fraction = source & _F64_FRACTION_MASK

    # ===== Inf / NaN =====
    if src_exponent == _F64_MAX_EXPONENT:
        if src_fraction == 0:
            return fmt.infinity(sign)
        if NaNMode.is_preserve(nan_mode):
            payload = src_fraction >> (_F64_FRACTION_BITS - fmt.fraction_bits)
            # 截断后载荷为 0 会变成 Inf，强制置 quiet 位
            return fmt.infinity(sign) | (payload or fmt.quiet_bit)
        return fmt.canonical_nan(sign)

    # ===== 带符号零 =====
    if src_exponent == 0 and src_fraction == 0:
        return fmt.zero(sign)

    # ===== 归一化: significand ∈ [2^52, 2^53) =====
    if src_exponent == 0:
        norm_shift = _F64_FRACTION_BITS + 1 - src_fraction.bit_length()
        significand = src_fraction << norm_shift
        e = 1 - _F64_BIAS - norm_shift
    else:
        significand = src_fraction | (1 << _F64_FRACTION_BITS)
        e = src_exponent - _F64_BIAS

    biased = e + fmt.bias
    drop = _F64_FRACTION_BITS - fmt.fraction_bits

    if biased >= fmt.max_exponent:
        return fmt.infinity(sign)

    if biased <= 0:
        # ===== Subnormal 路径 =====
        shift = 1 - biased
        if shift > fmt.fraction_bits:
            return fmt.zero(sign)
        # 舍入进位到 2^fraction_bits 时恰好是最小规格化数 (E=1, M=0)
        magnitude = round_half_even(significand, drop + shift)
    else:
        # ===== Normal 路径 =====
        # rounded ∈ [2^fb, 2^(fb+1)]，进位由加法自然传到 exponent
        rounded = round_half_even(significand, drop)
        magnitude = ((biased - 1) << fmt.fraction_bits) + rounded
        if magnitude >= fmt.exponent_mask:
            return fmt.infinity(sign)

    return (sign << (fmt.width - 1)) | magnitude


# ---- 分格式接口 ----
def decode_half(bits, nan_mode=None) -> float:
    return decode(HALF, bits, nan_mode)


def encode_half(value, nan_mode=None) -> int:
    return encode(HALF, value, nan_mode)


def decode_single(bits, nan_mode=None) -> float:
    return decode(SINGLE, bits, nan_mode)


def encode_single(value, nan_mode=None) -> int:
    return encode(SINGLE, value, nan_mode)


def decode_double(bits, nan_mode=None) -> float:
    return decode(DOUBLE, bits, nan_mode)


def encode_double(value, nan_mode=None) -> int:
    return encode(DOUBLE, value, nan_mode)


# ---- 字段级无损往返 ----
def unpack(fmt, bits) -> FloatFields:
    """位模式 -> FloatFields(sign, exponent, fraction)，包括 NaN 载荷在内完全无损"""
    fmt = FloatFormat.resolve(fmt)
    return split_fields(fmt, check_bits(fmt, bits))


def pack(fmt, fields) -> int:
    """FloatFields -> 位模式

    Raises:
        ValueError: 任一字段超出其位宽
    """
    fmt = FloatFormat.resolve(fmt)
    sign, exponent, fraction = fields
    for name, field, limit in (('sign', sign, 1),
                               ('exponent', exponent, fmt.max_exponent),
                               ('fraction', fraction, fmt.fraction_mask)):
        if not 0 <= field <= limit:
            raise ValueError(f"{name} field {field} out of range for {fmt.name} (0..{limit})")
    return join_fields(fmt, sign, exponent, fraction)


def is_canonical(fmt, bits) -> bool:
    """除载荷不为规范 quiet NaN 的 NaN 以外，所有位模式都是规范的"""
    fmt = FloatFormat.resolve(fmt)
    _, exponent, fraction = split_fields(fmt, check_bits(fmt, bits))
    if exponent == fmt.max_exponent and fraction != 0:
        return fraction == fmt.quiet_bit
    return True
