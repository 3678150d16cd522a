"""
NaNMode - NaN 载荷策略控制器
============================

控制 decode / encode 遇到 NaN 时如何处理尾数中的载荷 (payload) 位。

模式说明
--------
- **CANONICAL**: 规范模式 (默认)。decode 得到同符号的 quiet NaN，
  encode 总是输出规范 quiet NaN (E=全1，尾数仅最高位为 1)。
- **PRESERVE**: 载荷保留模式。decode 把载荷位放到 binary64 尾数的高位，
  encode 再取回高位，使 decode -> encode 位精确往返。

控制层次
--------
1. 全局模式 - 整个进程的默认行为
2. 上下文管理器 - 局部临时切换 (线程隔离)
3. 调用级覆盖 - decode/encode 的 nan_mode 参数

使用示例
--------
```python
from float_codec import NaNMode, decode_half, encode_half

encode_half(decode_half(0x7D00))            # 0x7E00 (规范 NaN)

with NaNMode.preserve():
    encode_half(decode_half(0x7D00))        # 0x7D00

encode_half(decode_half(0x7D00, nan_mode=NaNMode.PRESERVE),
            nan_mode=NaNMode.PRESERVE)      # 0x7D00
```

作者: FloatCodec Project
"""

import threading
from contextlib import contextmanager


class NaNMode:
    """NaN 载荷策略控制器

    优先级: 调用级覆盖 > 上下文模式 > 全局模式

    Attributes:
        CANONICAL: 规范 quiet NaN 模式常量
        PRESERVE: 载荷保留模式常量
    """

    CANONICAL = 'canonical'
    PRESERVE = 'preserve'

    _local = threading.local()
    _global_mode = CANONICAL

    @classmethod
    def _get_context_stack(cls):
        if not hasattr(cls._local, 'context_stack'):
            cls._local.context_stack = []
        return cls._local.context_stack

    @classmethod
    def validate(cls, mode):
        """验证模式是否有效"""
        if mode not in (cls.CANONICAL, cls.PRESERVE):
            raise ValueError(
                f"Invalid NaN mode: {mode!r}. Use NaNMode.CANONICAL or NaNMode.PRESERVE"
            )
        return mode

    @classmethod
    def get_mode(cls, override=None):
        """获取当前有效模式

        Args:
            override: 调用级覆盖，None 表示跟随上下文/全局

        Returns:
            str: CANONICAL 或 PRESERVE
        """
        if override is not None:
            return cls.validate(override)
        stack = cls._get_context_stack()
        if stack:
            return stack[-1]
        return cls._global_mode

    @classmethod
    def set_global_mode(cls, mode):
        cls._global_mode = cls.validate(mode)

    @classmethod
    def get_global_mode(cls):
        return cls._global_mode

    @classmethod
    @contextmanager
    def mode(cls, mode):
        """上下文管理器: 临时切换到指定模式，退出后恢复"""
        stack = cls._get_context_stack()
        stack.append(cls.validate(mode))
        try:
            yield
        finally:
            stack.pop()

    @classmethod
    @contextmanager
    def canonical(cls):
        with cls.mode(cls.CANONICAL):
            yield

    @classmethod
    @contextmanager
    def preserve(cls):
        with cls.mode(cls.PRESERVE):
            yield

    @classmethod
    def is_preserve(cls, override=None):
        return cls.get_mode(override) == cls.PRESERVE
