"""
NaN 载荷策略测试
================

验证 NaNMode 的三层控制 (全局 / 上下文 / 调用级) 以及 PRESERVE 模式下
NaN 载荷的位精确往返。
"""
import math
import sys
import os
import threading

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from float_codec import (
    NaNMode, decode, encode, decode_half, encode_half,
    decode_single, encode_single, decode_double, encode_double,
    HALF, SINGLE, DOUBLE
)
from float_codec.core.formats import float64_to_bits


def test_default_mode_is_canonical():
    assert NaNMode.get_global_mode() == NaNMode.CANONICAL
    assert NaNMode.get_mode() == NaNMode.CANONICAL
    assert not NaNMode.is_preserve()


def test_context_manager():
    print("\n--- 上下文切换 ---")
    with NaNMode.preserve():
        assert NaNMode.get_mode() == NaNMode.PRESERVE
        with NaNMode.canonical():
            assert NaNMode.get_mode() == NaNMode.CANONICAL
        assert NaNMode.get_mode() == NaNMode.PRESERVE
    assert NaNMode.get_mode() == NaNMode.CANONICAL
    print("  嵌套上下文恢复 ✓")


def test_context_is_thread_local():
    seen = []
    with NaNMode.preserve():
        worker = threading.Thread(target=lambda: seen.append(NaNMode.get_mode()))
        worker.start()
        worker.join()
    assert seen == [NaNMode.CANONICAL]


def test_global_mode():
    NaNMode.set_global_mode(NaNMode.PRESERVE)
    try:
        assert NaNMode.get_mode() == NaNMode.PRESERVE
        assert encode_half(decode_half(0x7D00)) == 0x7D00
        # 调用级覆盖优先
        assert encode_half(decode_half(0x7D00), nan_mode=NaNMode.CANONICAL) == 0x7E00
    finally:
        NaNMode.set_global_mode(NaNMode.CANONICAL)


def test_invalid_mode():
    for call in (lambda: NaNMode.set_global_mode('keep'),
                 lambda: NaNMode.validate(None),
                 lambda: encode_half(math.nan, nan_mode='payload'),
                 lambda: encode_half(1.0, nan_mode='bogus'),
                 lambda: decode_half(0x3C00, nan_mode='bogus'),
                 lambda: decode_single(0x00000001, nan_mode='keep'),
                 lambda: encode_double(-0.0, nan_mode='keep')):
        try:
            call()
        except ValueError:
            pass
        else:
            raise AssertionError("invalid NaN mode should raise ValueError")

    try:
        with NaNMode.mode('signalling'):
            pass
    except ValueError:
        pass
    else:
        raise AssertionError("NaNMode.mode('signalling') should raise ValueError")
    assert NaNMode.get_mode() == NaNMode.CANONICAL


def test_preserve_roundtrip_all_formats():
    print("\n--- PRESERVE 载荷往返 ---")
    cases = [
        (HALF, [0x7C01, 0x7D00, 0xFD55, 0x7E00, 0xFFFF]),
        (SINGLE, [0x7F800001, 0x7FA00000, 0xFFC00001, 0x7FFFFFFF]),
        (DOUBLE, [0x7FF0000000000001, 0x7FF4000000000000, 0xFFF8000000000123]),
    ]
    with NaNMode.preserve():
        for fmt, patterns in cases:
            for bits in patterns:
                value = decode(fmt, bits)
                assert math.isnan(value)
                assert encode(fmt, value) == bits, f"{fmt.name} 0x{bits:X}"
            print(f"  {fmt.name:<7} {len(patterns)} 个 NaN 载荷位精确往返 ✓")


def test_preserve_payload_layout():
    # FP16 载荷位放在 binary64 尾数的高 10 位
    value = decode_half(0x7C01, nan_mode=NaNMode.PRESERVE)
    assert float64_to_bits(value) == 0x7FF0000000000000 | (1 << 42)
    value = decode_single(0xFFA00000, nan_mode=NaNMode.PRESERVE)
    assert float64_to_bits(value) == 0xFFF0000000000000 | (0x200000 << 29)


def test_preserve_truncated_payload_stays_nan():
    # 载荷只在低位: 截断到 FP16 后为 0，强制 quiet 位
    low_payload_nan = decode_double(0x7FF0000000000001, nan_mode=NaNMode.PRESERVE)
    assert encode_half(low_payload_nan, nan_mode=NaNMode.PRESERVE) == 0x7E00
    assert encode_single(low_payload_nan, nan_mode=NaNMode.PRESERVE) == 0x7FC00000
    assert encode_double(low_payload_nan, nan_mode=NaNMode.PRESERVE) == 0x7FF0000000000001


def test_cross_format_payload():
    with NaNMode.preserve():
        assert encode_single(decode_half(0x7D00)) == 0x7FA00000
        assert encode_half(decode_single(0x7FA00000)) == 0x7D00


if __name__ == "__main__":
    test_default_mode_is_canonical()
    test_context_manager()
    test_context_is_thread_local()
    test_global_mode()
    test_invalid_mode()
    test_preserve_roundtrip_all_formats()
    test_preserve_payload_layout()
    test_preserve_truncated_payload_stays_nan()
    test_cross_format_payload()
    print("\nALL NAN MODE TESTS PASSED.")
