"""BinaryX编码器实现.

该模块提供用于缓冲管理的`DataWriter`和
将记录序列化为定长字节的`RecordEncoder`.
"""

from typing import Any

from .config import Config
from .exceptions import BinaryEncodeError, UnsupportedKindError
from .log import logger
from .struct import Record, get_descriptor


class DataWriter:
    """定长记录的写入器."""

    __slots__ = ("_buffer",)

    _buffer: bytearray

    def __init__(self):
        self._buffer = bytearray()

    def get_bytes(self) -> bytes:
        """返回累积的字节."""
        return bytes(self._buffer)

    def write(self, data: bytes) -> None:
        """追加原始字节."""
        self._buffer.extend(data)

    def __len__(self) -> int:
        return len(self._buffer)


class RecordEncoder:
    """定长记录编码器.

    在工作缓冲区中按字段顺序写入每个字段的当前值,
    需要交换的字段先反转字节. 输入记录本身不会被修改.
    """

    __slots__ = ("_config",)

    _config: Config

    def __init__(self, config: Config):
        self._config = config

    def encode(self, obj: Any) -> bytes:
        """编码入口.

        Raises:
            UnsupportedKindError: obj 不是 Record 实例.
            BinaryValueError: 字段值超出其类型的表示范围.
        """
        if not isinstance(obj, Record):
            raise UnsupportedKindError(
                f"Cannot encode {type(obj).__name__}: expected a Record instance"
            )

        descriptor = get_descriptor(obj)
        writer = DataWriter()
        logger.debug(
            "[RecordEncoder] 开始编码 %s (%d 字节)",
            type(obj).__name__,
            descriptor.size,
        )

        try:
            for field, swap in zip(
                descriptor.fields, descriptor.swap_plan(self._config.byte_order)
            ):
                writer.write(field.pack(getattr(obj, field.name), swap))
        except BinaryEncodeError as e:
            logger.error("Encoding failed: %s", e)
            raise

        if len(writer) != descriptor.size:
            raise BinaryEncodeError(
                f"Encoded {len(writer)} bytes, expected {descriptor.size}"
            )
        logger.debug("[RecordEncoder] 成功编码 %d 个字段", len(descriptor.fields))
        return writer.get_bytes()
