"""BinaryX数据类型模块.

本模块定义了记录字段支持的所有数据类型, 包括定宽标量
(INT16、FLOAT32 等) 和不参与字节序交换的定长字节区 (FixedBytes).
"""

import abc
import math
import struct
from collections.abc import Callable
from functools import lru_cache
from typing import Any, ClassVar

from pydantic_core import core_schema

from . import swap as _swap
from .exceptions import BinaryValueError

Buffer = bytes | bytearray | memoryview


class BinaryType(abc.ABC):
    """记录字段类型的基类.

    所有具体类型 (如 `INT32`, `FLOAT64`, `FixedBytes.of(16)`) 都继承自此类.
    类型本身从不实例化, 只通过类方法使用.
    """

    # 占用的字节数
    size: ClassVar[int] = 0
    # 对应的 Python 值类型
    python_type: ClassVar[type] = object
    # 定长字节区从不交换字节序
    is_opaque: ClassVar[bool] = False

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        return core_schema.any_schema()

    @classmethod
    @abc.abstractmethod
    def unpack(cls, data: Buffer, offset: int = 0, swap: bool = False) -> Any:
        """从字节解析.

        Args:
            data: 输入字节数据, 至少包含 `offset + size` 个字节.
            offset: 起始偏移量.
            swap: 是否反转字节序.

        Returns:
            Any: 解析出的值.
        """
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def pack(cls, value: Any, swap: bool = False) -> bytes:
        """序列化为恰好 `size` 个字节.

        Raises:
            BinaryValueError: 值无法用该类型表示时.
        """
        raise NotImplementedError

    @classmethod
    def validate(cls, value: Any) -> Any:
        """验证值是否符合类型要求, 返回规范化后的值.

        Raises:
            ValueError: 值无效时.
            TypeError: 类型不匹配时.
        """
        return value

    @classmethod
    @abc.abstractmethod
    def zero(cls) -> Any:
        """该类型的零值."""
        raise NotImplementedError


class Scalar(BinaryType):
    """定宽标量 (抽象基类).

    每个标量由两个 struct 格式描述:
    `fmt` 是值本身的格式, `word_fmt` 是交换函数作用的存储字格式.
    整数的存储字就是值本身, 浮点数的存储字是同宽度的无符号整数.
    """

    fmt: ClassVar[str] = ""
    word_fmt: ClassVar[str] = ""
    swap_word: ClassVar[Callable[[Any], Any]] = staticmethod(_swap.swap_identity)

    _value_struct: ClassVar[struct.Struct]
    _word_struct: ClassVar[struct.Struct]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.fmt:
            # 始终以本机序 (小端) 读写, 交换由 swap_word 完成
            cls._value_struct = struct.Struct("<" + cls.fmt)
            cls._word_struct = struct.Struct("<" + (cls.word_fmt or cls.fmt))
            cls.size = cls._value_struct.size

    @classmethod
    def unpack(cls, data: Buffer, offset: int = 0, swap: bool = False) -> Any:
        """从字节解析."""
        if not swap:
            return cls._value_struct.unpack_from(data, offset)[0]
        word = cls._word_struct.unpack_from(data, offset)[0]
        raw = cls._word_struct.pack(cls.swap_word(word))
        return cls._value_struct.unpack(raw)[0]

    @classmethod
    def pack(cls, value: Any, swap: bool = False) -> bytes:
        """序列化为字节."""
        try:
            raw = cls._value_struct.pack(value)
        except (struct.error, OverflowError, TypeError) as e:
            raise BinaryValueError(
                f"Cannot pack {value!r} as {cls.__name__}: {e}"
            ) from e
        if not swap:
            return raw
        word = cls._word_struct.unpack(raw)[0]
        return cls._word_struct.pack(cls.swap_word(word))

    @classmethod
    def swap(cls, value: Any) -> Any:
        """返回字节序反转后的值."""
        return cls.unpack(cls.pack(value, swap=True))

    @classmethod
    def zero(cls) -> Any:
        """该类型的零值."""
        return cls.python_type()


class Integer(Scalar):
    """定宽整数 (抽象基类)."""

    python_type = int
    min_value: ClassVar[int] = 0
    max_value: ClassVar[int] = 0

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        return core_schema.int_schema(ge=cls.min_value, le=cls.max_value)

    @classmethod
    def validate(cls, value: Any) -> Any:
        """验证整数范围."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        if not cls.min_value <= value <= cls.max_value:
            raise ValueError(
                f"{cls.__name__} value out of range "
                f"[{cls.min_value}, {cls.max_value}]: {value}"
            )
        return value


class INT8(Integer):
    """1 字节有符号整数.

    范围: -128 到 127. 单字节, 从不交换.
    """

    fmt = "b"
    min_value = -(2**7)
    max_value = 2**7 - 1


class UINT8(Integer):
    """1 字节无符号整数.

    范围: 0 到 255. 单字节, 从不交换.
    """

    fmt = "B"
    max_value = 2**8 - 1


class INT16(Integer):
    """2 字节有符号整数 (Short)."""

    fmt = "h"
    swap_word = staticmethod(_swap.swap_s16)
    min_value = -(2**15)
    max_value = 2**15 - 1


class UINT16(Integer):
    """2 字节无符号整数 (UShort)."""

    fmt = "H"
    swap_word = staticmethod(_swap.swap_u16)
    max_value = 2**16 - 1


class INT32(Integer):
    """4 字节有符号整数 (Int).

    Python `int` 字段和枚举字段的默认类型.
    """

    fmt = "i"
    swap_word = staticmethod(_swap.swap_s32)
    min_value = -(2**31)
    max_value = 2**31 - 1


class UINT32(Integer):
    """4 字节无符号整数 (UInt)."""

    fmt = "I"
    swap_word = staticmethod(_swap.swap_u32)
    max_value = 2**32 - 1


class INT64(Integer):
    """8 字节有符号整数 (Long)."""

    fmt = "q"
    swap_word = staticmethod(_swap.swap_s64)
    min_value = -(2**63)
    max_value = 2**63 - 1


class UINT64(Integer):
    """8 字节无符号整数 (ULong)."""

    fmt = "Q"
    swap_word = staticmethod(_swap.swap_u64)
    max_value = 2**64 - 1


class BOOL(Scalar):
    """布尔类型.

    占用 1 字节, True -> 1, False -> 0. 从不交换.
    """

    fmt = "?"
    python_type = bool

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        return core_schema.bool_schema()

    @classmethod
    def validate(cls, value: Any) -> Any:
        """验证布尔值."""
        if not isinstance(value, bool):
            raise TypeError(f"Expected bool, got {type(value).__name__}")
        return value


class Float(Scalar):
    """浮点数 (抽象基类)."""

    python_type = float

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        return core_schema.no_info_after_validator_function(
            cls.validate, core_schema.float_schema()
        )

    @classmethod
    def validate(cls, value: Any) -> Any:
        """验证浮点数."""
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise TypeError(f"Expected float, got {type(value).__name__}")
        return float(value)


class FLOAT32(Float):
    """单精度浮点数 (Single).

    占用 4 字节. 验证时数值会被舍入到单精度,
    保证编码再解码后与原值相等.
    """

    fmt = "f"
    word_fmt = "I"
    swap_word = staticmethod(_swap.swap_u32)

    @classmethod
    def validate(cls, value: Any) -> Any:
        """验证并舍入到单精度."""
        value = super().validate(value)
        if not math.isfinite(value):
            return value
        try:
            return cls._value_struct.unpack(cls._value_struct.pack(value))[0]
        except OverflowError as e:
            raise ValueError(f"FLOAT32 value out of range: {value}") from e


class FLOAT64(Float):
    """双精度浮点数 (Double).

    占用 8 字节. Python `float` 字段的默认类型.
    """

    fmt = "d"
    word_fmt = "Q"
    swap_word = staticmethod(_swap.swap_u64)


class FixedBytes(BinaryType):
    """定长字节区 (如内嵌的定长字符数组).

    内容按原样复制, 无论字段或记录如何标注字节序都不会被交换.
    使用 `FixedBytes.of(n)` 获取长度为 n 的具体类型.
    """

    python_type = bytes
    is_opaque = True

    @staticmethod
    @lru_cache(maxsize=None, typed=True)
    def of(size: int) -> type["FixedBytes"]:
        """创建长度为 `size` 的定长字节区类型.

        Raises:
            ValueError: 如果 `size` 不是正整数.
        """
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise ValueError(f"FixedBytes size must be a positive int, got {size!r}")
        return type(f"FixedBytes{size}", (FixedBytes,), {"size": size})

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        return core_schema.bytes_schema(min_length=cls.size, max_length=cls.size)

    @classmethod
    def unpack(cls, data: Buffer, offset: int = 0, swap: bool = False) -> bytes:
        """原样复制 `size` 个字节, 忽略 `swap`."""
        return bytes(data[offset : offset + cls.size])

    @classmethod
    def pack(cls, value: Any, swap: bool = False) -> bytes:
        """原样输出, 忽略 `swap`."""
        try:
            return bytes(cls.validate(value))
        except (TypeError, ValueError) as e:
            raise BinaryValueError(str(e)) from e

    @classmethod
    def validate(cls, value: Any) -> Any:
        """验证长度恰好为 `size`."""
        if not isinstance(value, bytes | bytearray | memoryview):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        if len(value) != cls.size:
            raise ValueError(
                f"{cls.__name__} requires exactly {cls.size} bytes, got {len(value)}"
            )
        return bytes(value)

    @classmethod
    def zero(cls) -> bytes:
        """全零字节."""
        return bytes(cls.size)


SCALAR_TYPES: tuple[type[Scalar], ...] = (
    BOOL,
    INT8,
    UINT8,
    INT16,
    UINT16,
    INT32,
    UINT32,
    INT64,
    UINT64,
    FLOAT32,
    FLOAT64,
)
