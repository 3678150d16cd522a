"""
批量转换器 - 数组 / 脉冲张量 <-> 位模式
======================================

在 FloatCodec 标量编解码之上提供批量接口:
- numpy 数组的 encode / decode
- 脉冲 (pulse) 表示: MSB first 的 0/1 张量 [..., width]，
  布局为 [S, E.., M..]，例如 FP16: [S, E4..E0, M9..M0]

位模式数组统一使用无符号整数 (FP64 为 uint64)，torch 对 uint64
支持有限，因此位模式侧走 numpy，脉冲侧走 torch。

作者: FloatCodec Project
"""
import numpy as np
import torch

from ..core.formats import FloatFormat, HALF, SINGLE, DOUBLE, check_bits
from ..codec import decode, encode

_UINT_DTYPES = {16: np.uint16, 32: np.uint32, 64: np.uint64}


def _as_bit_array(fmt, bits):
    """任意整数输入 -> uint64 numpy 数组 (范围已校验)"""
    typed = isinstance(bits, (np.ndarray, torch.Tensor))
    if isinstance(bits, torch.Tensor):
        bits = bits.detach().cpu().numpy()
    arr = np.asarray(bits)

    # 空批次: np.asarray([]) 的 dtype 是 float64
    if arr.size == 0:
        return np.zeros(arr.shape, dtype=np.uint64)
    if arr.dtype == object:
        # 超出 int64 的 Python int 列表
        return np.vectorize(lambda b: check_bits(fmt, b), otypes=[np.uint64])(arr)
    if not np.issubdtype(arr.dtype, np.integer):
        raise TypeError(f"Bit patterns must be integers, got dtype {arr.dtype}")

    # 有符号同宽数组 (例如 tensor.view(torch.int16)) 按位重解释为无符号
    if typed and arr.dtype.kind == 'i' and arr.dtype.itemsize * 8 == fmt.width:
        arr = arr.view(f'u{arr.dtype.itemsize}')

    if arr.size and (arr.min() < 0 or int(arr.max()) > fmt.bits_mask):
        raise ValueError(
            f"Bit patterns out of range for {fmt.name} "
            f"(expected 0 <= bits < 2**{fmt.width})"
        )
    return arr.astype(np.uint64)


def decode_array(fmt, bits, nan_mode=None):
    """位模式数组 -> float64 数组 (形状不变)"""
    fmt = FloatFormat.resolve(fmt)
    arr = _as_bit_array(fmt, bits)
    out = np.array([decode(fmt, int(b), nan_mode) for b in arr.ravel()], dtype=np.float64)
    return out.reshape(arr.shape)


def encode_array(fmt, values, nan_mode=None):
    """浮点数组 -> 位模式数组 (uint16 / uint32 / uint64)"""
    fmt = FloatFormat.resolve(fmt)
    if isinstance(values, torch.Tensor):
        values = values.detach().cpu().double().numpy()
    arr = np.asarray(values, dtype=np.float64)
    out = np.array([encode(fmt, v, nan_mode) for v in arr.ravel()], dtype=_UINT_DTYPES[fmt.width])
    return out.reshape(arr.shape)


def bits_to_pulse(fmt, bits, device=None):
    """位模式 -> 脉冲张量

    Args:
        fmt: FloatFormat / 格式名 / 位宽
        bits: 整数、整数序列、numpy 数组或整数张量
        device: 输出设备

    Returns:
        pulse: [..., width] float32 张量，MSB first
    """
    fmt = FloatFormat.resolve(fmt)
    arr = _as_bit_array(fmt, bits)
    shifts = np.arange(fmt.width - 1, -1, -1, dtype=np.uint64)
    pulse = (arr[..., None] >> shifts) & np.uint64(1)
    return torch.from_numpy(pulse.astype(np.float32)).to(device)


def pulse_to_bits(fmt, pulse):
    """脉冲张量 -> 位模式 numpy 数组 (uint64)

    脉冲值 > 0.5 视为 1。
    """
    fmt = FloatFormat.resolve(fmt)
    if pulse.shape[-1] != fmt.width:
        raise ValueError(
            f"Pulse width {pulse.shape[-1]} does not match {fmt.name} (expected {fmt.width})"
        )
    spikes = (pulse.detach().cpu().numpy() > 0.5).astype(np.uint64)
    shifts = np.arange(fmt.width - 1, -1, -1, dtype=np.uint64)
    return np.bitwise_or.reduce(spikes << shifts, axis=-1)


def float_to_pulse(fmt, values, device=None, nan_mode=None):
    """浮点值 -> 脉冲张量 [..., width]"""
    fmt = FloatFormat.resolve(fmt)
    if device is None and isinstance(values, torch.Tensor):
        device = values.device
    return bits_to_pulse(fmt, encode_array(fmt, values, nan_mode), device=device)


def pulse_to_float(fmt, pulse, nan_mode=None):
    """脉冲张量 -> float64 张量 [...]

    输出保持 float64，FP64 的值不经过任何截断。
    """
    fmt = FloatFormat.resolve(fmt)
    values = decode_array(fmt, pulse_to_bits(fmt, pulse), nan_mode)
    return torch.from_numpy(values).to(pulse.device)


def float16_to_pulse(values, device=None):
    return float_to_pulse(HALF, values, device=device)


def pulse_to_float16(pulse):
    return pulse_to_float(HALF, pulse)


def float32_to_pulse(values, device=None):
    return float_to_pulse(SINGLE, values, device=device)


def pulse_to_float32(pulse):
    return pulse_to_float(SINGLE, pulse)


def float64_to_pulse(values, device=None):
    return float_to_pulse(DOUBLE, values, device=device)


def pulse_to_float64(pulse):
    return pulse_to_float(DOUBLE, pulse)


def to_binary_string(fmt, bits, sep=''):
    """位模式 -> 二进制字符串

    sep 非空时在 sign / exponent / fraction 之间插入分隔符，
    例如 to_binary_string('half', 0x3C00, ' ') == '0 01111 0000000000'
    """
    fmt = FloatFormat.resolve(fmt)
    text = format(check_bits(fmt, bits), f'0{fmt.width}b')
    if not sep:
        return text
    exp_end = 1 + fmt.exponent_bits
    return sep.join([text[:1], text[1:exp_end], text[exp_end:]])
