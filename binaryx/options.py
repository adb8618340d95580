"""字节序与编解码选项.

该模块定义了字节序枚举 `ByteOrder` 以及控制流式读写行为的选项标志 `Option`.
"""

from enum import IntEnum, IntFlag


class ByteOrder(IntEnum):
    """多字节标量的存储字节序.

    `UNDEFINED` 表示未指定, 交由外层上下文决定.
    如果没有任何上下文给出字节序, 则按本机序 (小端) 处理.
    """

    LITTLE_ENDIAN = 0
    BIG_ENDIAN = 1
    UNDEFINED = 2


# 本机字节序: 所有交换判断都以小端为基准
NATIVE_BYTE_ORDER = ByteOrder.LITTLE_ENDIAN


class Option(IntFlag):
    """BinaryX 配置选项标志.

    可以使用位运算组合多个选项.
    """

    # 默认行为: 流式读写失败时记录日志并返回默认值
    NONE = 0x0000

    # 严格模式: 流式读写失败时直接抛出异常
    STRICT = 0x0001
