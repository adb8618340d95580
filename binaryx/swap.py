"""基本类型字节序交换.

本模块提供按固定宽度反转字节序的纯函数.
浮点数的交换通过位模式重解释完成, 从不对数值本身做算术运算.
"""

import struct

_MASK16 = 0xFFFF
_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF

# 预编译的位模式重解释器
_F32 = struct.Struct("<f")
_U32 = struct.Struct("<I")
_F64 = struct.Struct("<d")
_U64 = struct.Struct("<Q")


def _to_signed(value: int, bits: int) -> int:
    if value & (1 << (bits - 1)):
        return value - (1 << bits)
    return value


def swap_identity(value):
    """单字节类型 (int8/uint8/bool) 不需要交换."""
    return value


def swap_u16(value: int) -> int:
    """交换无符号16位整数的两个字节."""
    value &= _MASK16
    return ((value >> 8) & 0xFF) | ((value & 0xFF) << 8)


def swap_s16(value: int) -> int:
    """交换有符号16位整数的两个字节."""
    return _to_signed(swap_u16(value), 16)


def swap_u32(value: int) -> int:
    """反转无符号32位整数的四个字节."""
    value &= _MASK32
    return (
        ((value >> 24) & 0xFF)
        | ((value >> 8) & 0xFF00)
        | ((value & 0xFF00) << 8)
        | ((value & 0xFF) << 24)
    )


def swap_s32(value: int) -> int:
    """反转有符号32位整数的四个字节."""
    return _to_signed(swap_u32(value), 32)


def swap_u64(value: int) -> int:
    """反转无符号64位整数的八个字节."""
    value &= _MASK64
    return (
        ((value >> 56) & 0xFF)
        | ((value >> 40) & 0xFF00)
        | ((value >> 24) & 0xFF0000)
        | ((value >> 8) & 0xFF000000)
        | ((value & 0xFF000000) << 8)
        | ((value & 0xFF0000) << 24)
        | ((value & 0xFF00) << 40)
        | ((value & 0xFF) << 56)
    )


def swap_s64(value: int) -> int:
    """反转有符号64位整数的八个字节."""
    return _to_signed(swap_u64(value), 64)


def swap_f32(value: float) -> float:
    """反转单精度浮点数的字节序.

    先把值重解释为32位整数, 反转后再重解释回浮点数.

    Note:
        Python 的 float 是双精度, 交换结果若是 signalling NaN 会在转换中被静默.
        编解码器因此在存储字 (`uint32`) 上完成交换, 不经过本函数.
    """
    bits = _U32.unpack(_F32.pack(value))[0]
    return _F32.unpack(_U32.pack(swap_u32(bits)))[0]


def swap_f64(value: float) -> float:
    """反转双精度浮点数的字节序 (位模式重解释)."""
    bits = _U64.unpack(_F64.pack(value))[0]
    return _F64.unpack(_U64.pack(swap_u64(bits)))[0]
