"""测试基本类型字节序交换函数."""

import math
import struct

import pytest

from binaryx.swap import (
    swap_f32,
    swap_f64,
    swap_identity,
    swap_s16,
    swap_s32,
    swap_s64,
    swap_u16,
    swap_u32,
    swap_u64,
)

# --- 整数 ---


def test_swap_u16() -> None:
    """swap_u16() 应交换两个字节."""
    assert swap_u16(0x1234) == 0x3412
    assert swap_u16(0x00FF) == 0xFF00


def test_swap_u32() -> None:
    """swap_u32() 应完全反转四个字节."""
    assert swap_u32(0x12345678) == 0x78563412
    assert swap_u32(0x000000FF) == 0xFF000000


def test_swap_u64() -> None:
    """swap_u64() 应完全反转八个字节."""
    assert swap_u64(0x0102030405060708) == 0x0807060504030201
    assert swap_u64(0xFF) == 0xFF00000000000000


def test_swap_signed_keeps_sign_bit_position() -> None:
    """有符号交换的结果应按相同宽度解释为有符号数."""
    assert swap_s16(0x1234) == 0x3412
    assert swap_s16(0x0080) == -32768
    assert swap_s16(-1) == -1
    assert swap_s32(0x12345678) == 0x78563412
    assert swap_s32(0x000000FF) == -16777216
    assert swap_s64(0x80) == -(2**63)


def test_swap_identity() -> None:
    """单字节类型的交换不改变值."""
    assert swap_identity(0x7F) == 0x7F
    assert swap_identity(True) is True


@pytest.mark.parametrize(
    ("func", "value"),
    [
        (swap_u16, 0xBEEF),
        (swap_s16, -12345),
        (swap_u32, 0xDEADBEEF),
        (swap_s32, -123456789),
        (swap_u64, 0xFEEDFACECAFEBEEF),
        (swap_s64, -(2**40) - 7),
    ],
)
def test_swap_twice_is_identity(func, value) -> None:
    """交换两次应得到原值."""
    assert func(func(value)) == value


def test_swap_matches_struct_byte_order() -> None:
    """交换结果应与 struct 的大小端互转一致."""
    value = 0x0A0B0C0D
    expected = struct.unpack(">I", struct.pack("<I", value))[0]
    assert swap_u32(value) == expected


# --- 浮点数 ---


def test_swap_f32_reinterprets_bits() -> None:
    """swap_f32() 应反转位模式而不是对数值做运算."""
    swapped = swap_f32(1.0)
    assert struct.pack("<f", swapped) == struct.pack(">f", 1.0)
    assert swap_f32(2.0) != -2.0
    assert swap_f32(swapped) == 1.0


def test_swap_f64_reinterprets_bits() -> None:
    """swap_f64() 应反转双精度位模式."""
    swapped = swap_f64(1.0)
    assert struct.pack("<d", swapped) == struct.pack(">d", 1.0)
    assert swap_f64(swapped) == 1.0


def test_swap_f64_of_nan_pattern() -> None:
    """交换后得到 NaN 的位模式时不应抛出异常."""
    # 0x...F87F 反转后为 quiet NaN 0x7FF8...
    bits = 0x000000000000F87F
    value = struct.unpack("<d", struct.pack("<Q", bits))[0]
    assert math.isnan(swap_f64(value))
