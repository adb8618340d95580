"""BinaryX解码器实现.

该模块提供用于零复制读取的`DataReader`和
将字节还原为记录的`RecordDecoder`.
"""

from typing import Any, TypeVar

from .config import Config
from .exceptions import (
    BinaryArgumentError,
    BinaryUnderflowError,
)
from .log import get_hexdump, logger
from .struct import Record, get_descriptor

R = TypeVar("R", bound=Record)


class DataReader:
    """二进制数据的零复制读取器.

    包装memoryview以提供按偏移量读取的功能,而无需
    不必要时复制数据.
    """

    __slots__ = ("_pos", "_view", "length")

    _view: memoryview
    _pos: int
    length: int

    def __init__(self, data: bytes | bytearray | memoryview, offset: int = 0):
        """初始化DataReader.

        Args:
            data: 要读取的二进制数据.
            offset: 起始偏移量.

        Raises:
            BinaryArgumentError: 如果数据为 None, 不是字节序列, 或偏移量为负数.
        """
        if data is None:
            raise BinaryArgumentError("data cannot be None")
        if not isinstance(data, bytes | bytearray | memoryview):
            raise BinaryArgumentError(
                f"data must be bytes, bytearray or memoryview, "
                f"got {type(data).__name__}"
            )
        if offset < 0:
            raise BinaryArgumentError(f"offset cannot be less than 0, got {offset}")

        self._view = memoryview(data).cast("B")
        self._pos = offset
        self.length = len(self._view)

    def read_view(self, length: int) -> memoryview:
        """读取 `length` 个字节并返回 memoryview 切片.

        Raises:
            BinaryUnderflowError: 如果没有足够的数据可用.
        """
        available = max(0, self.length - self._pos)
        if length > available:
            raise BinaryUnderflowError(
                f"Not enough data: need {length} bytes at offset {self._pos}, "
                f"{available} available",
                required=length,
                available=available,
                loc=[self._pos],
            )
        start = self._pos
        self._pos += length
        return self._view[start : self._pos]

    @property
    def position(self) -> int:
        """当前读取位置."""
        return self._pos

    @property
    def eof(self) -> bool:
        """检查是否到达数据末尾."""
        return self._pos >= self.length


class RecordDecoder:
    """定长记录解码器.

    先按声明的布局读取每个字段的本机序值,
    再按字节序决策对需要的字段反转字节, 最后一次性构建记录.
    """

    __slots__ = ("_config",)

    _config: Config

    def __init__(self, config: Config):
        self._config = config

    def decode(
        self,
        data: bytes | bytearray | memoryview,
        target: type[R],
        offset: int = 0,
    ) -> R:
        """从 `offset` 处解码一条记录.

        Raises:
            BinaryArgumentError: 参数无效.
            UnsupportedKindError: target 不是 Record 子类.
            BinaryUnderflowError: 数据长度不足.
        """
        get_descriptor(target)
        reader = DataReader(data, offset)
        return self.decode_from(reader, target)

    def decode_from(self, reader: DataReader, target: type[R]) -> R:
        """从读取器当前位置解码一条记录并前移读取位置."""
        descriptor = get_descriptor(target)
        size = descriptor.size
        start = reader.position
        logger.debug(
            "[RecordDecoder] 开始解码 %s (%d 字节, 偏移 %d)",
            target.__name__,
            size,
            start,
        )

        try:
            view = reader.read_view(size)
        except BinaryUnderflowError as e:
            logger.error("[RecordDecoder] 解码错误: %s", e)
            logger.debug("%s", get_hexdump(reader._view, start))
            raise

        values: dict[str, Any] = {}
        for field, swap in zip(
            descriptor.fields, descriptor.swap_plan(self._config.byte_order)
        ):
            values[field.name] = field.unpack(view, 0, swap)

        try:
            result = target.model_validate(values)
        except Exception as e:
            logger.error("[RecordDecoder] 验证失败 %s: %s", target.__name__, e)
            raise

        logger.debug("[RecordDecoder] 成功解码 %d 个字段", len(values))
        return result
