"""BinaryX流式处理模块.

该模块提供包装文件类对象的 `BinaryReader` 和 `BinaryWriter`.
支持以流的默认字节序或逐次调用指定的字节序读写标量和记录.
流的打开与关闭由调用方负责.
"""

import io
from collections.abc import Generator
from typing import IO, Any, TypeVar

from . import types
from .api import sizeof
from .config import Config
from .decoder import RecordDecoder
from .encoder import RecordEncoder
from .exceptions import BinaryDecodeError, BinaryUnderflowError, UnsupportedKindError
from .log import logger
from .options import ByteOrder, Option
from .struct import Record

T = TypeVar("T", bound=Record)


class _BinaryStream:
    """读写器共用的位置管理和字节序选择."""

    def __init__(
        self,
        stream: IO[bytes],
        byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN,
        option: Option = Option.NONE,
    ):
        self._stream = stream
        self.byte_order = ByteOrder(byte_order)
        self.option = Option(option)

    @property
    def stream(self) -> IO[bytes]:
        """底层文件类对象."""
        return self._stream

    @property
    def position(self) -> int:
        """当前流位置."""
        return self._stream.tell()

    @position.setter
    def position(self, value: int) -> None:
        self._stream.seek(value, io.SEEK_SET)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """移动流位置, 返回新位置."""
        return self._stream.seek(offset, whence)

    def _resolve(self, byte_order: ByteOrder | None) -> ByteOrder:
        if byte_order is None:
            return self.byte_order
        return ByteOrder(byte_order)

    def _swap(self, byte_order: ByteOrder | None) -> bool:
        return self._resolve(byte_order) == ByteOrder.BIG_ENDIAN

    def _config(self, byte_order: ByteOrder | None) -> Config:
        return Config.from_params(byte_order=self._resolve(byte_order), option=self.option)


class BinaryReader(_BinaryStream):
    """可同时读取大端和小端数据的二进制读取器.

    Usage:
        >>> reader = BinaryReader(fp, byte_order=ByteOrder.BIG_ENDIAN)
        >>> magic = reader.read_uint32()
        >>> version = reader.read_uint16(ByteOrder.LITTLE_ENDIAN)
        >>> header = reader.read_record(Header)
    """

    def __init__(
        self,
        stream: IO[bytes],
        byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN,
        option: Option = Option.NONE,
    ):
        """初始化读取器.

        Args:
            stream: 可读的二进制文件类对象.
            byte_order: 流的默认字节序.
            option: `Option.STRICT` 时记录读取失败直接抛出异常,
                否则记录日志并返回零值记录.
        """
        super().__init__(stream, byte_order, option)

    @property
    def length(self) -> int:
        """流的总长度."""
        current = self._stream.tell()
        end = self._stream.seek(0, io.SEEK_END)
        self._stream.seek(current, io.SEEK_SET)
        return end

    @property
    def remaining(self) -> int:
        """从当前位置到流末尾的字节数."""
        return max(0, self.length - self.position)

    def read_bytes(self, length: int) -> bytes:
        """读取恰好 `length` 个原始字节.

        Raises:
            BinaryUnderflowError: 流中剩余数据不足.
        """
        data = self._stream.read(length) or b""
        if len(data) < length:
            raise BinaryUnderflowError(
                f"Not enough data: need {length} bytes, got {len(data)}",
                required=length,
                available=len(data),
            )
        return data

    def _read_scalar(
        self, binary_type: type[types.Scalar], byte_order: ByteOrder | None
    ) -> Any:
        data = self.read_bytes(binary_type.size)
        return binary_type.unpack(data, 0, self._swap(byte_order))

    def read_bool(self, byte_order: ByteOrder | None = None) -> bool:
        """读取布尔值."""
        return self._read_scalar(types.BOOL, byte_order)

    def read_int8(self, byte_order: ByteOrder | None = None) -> int:
        """读取有符号8位整数."""
        return self._read_scalar(types.INT8, byte_order)

    def read_uint8(self, byte_order: ByteOrder | None = None) -> int:
        """读取无符号8位整数."""
        return self._read_scalar(types.UINT8, byte_order)

    def read_int16(self, byte_order: ByteOrder | None = None) -> int:
        """读取有符号16位整数."""
        return self._read_scalar(types.INT16, byte_order)

    def read_uint16(self, byte_order: ByteOrder | None = None) -> int:
        """读取无符号16位整数."""
        return self._read_scalar(types.UINT16, byte_order)

    def read_int32(self, byte_order: ByteOrder | None = None) -> int:
        """读取有符号32位整数."""
        return self._read_scalar(types.INT32, byte_order)

    def read_uint32(self, byte_order: ByteOrder | None = None) -> int:
        """读取无符号32位整数."""
        return self._read_scalar(types.UINT32, byte_order)

    def read_int64(self, byte_order: ByteOrder | None = None) -> int:
        """读取有符号64位整数."""
        return self._read_scalar(types.INT64, byte_order)

    def read_uint64(self, byte_order: ByteOrder | None = None) -> int:
        """读取无符号64位整数."""
        return self._read_scalar(types.UINT64, byte_order)

    def read_float32(self, byte_order: ByteOrder | None = None) -> float:
        """读取4字节浮点数."""
        return self._read_scalar(types.FLOAT32, byte_order)

    def read_float64(self, byte_order: ByteOrder | None = None) -> float:
        """读取8字节双精度浮点数."""
        return self._read_scalar(types.FLOAT64, byte_order)

    def read_record(self, target: type[T], byte_order: ByteOrder | None = None) -> T:
        """读取 `sizeof(target)` 个字节并解码为记录.

        非严格模式下, 数据不足, I/O 错误和解码错误都只记录日志,
        并返回 `target.zeroed()`.
        数据不足时不消耗任何字节, 流位置保持不变.

        Args:
            target: 目标 `Record` 子类.
            byte_order: 本次调用的默认字节序, None 时使用流的默认字节序.

        Raises:
            UnsupportedKindError: target 不是 Record 子类 (任何模式下都抛出).
            BinaryUnderflowError: 严格模式下数据不足.
        """
        config = self._config(byte_order)
        size = sizeof(target)
        try:
            # 先检查长度, 数据不足时不移动流位置
            available = self.remaining
            if available < size:
                raise BinaryUnderflowError(
                    f"Not enough data: need {size} bytes, got {available}",
                    required=size,
                    available=available,
                )
            data = self.read_bytes(size)
            return RecordDecoder(config).decode(data, target)
        except (BinaryDecodeError, OSError, ValueError) as e:
            if config.is_strict:
                raise
            logger.warning("读取记录 %s 失败, 返回零值记录: %s", target.__name__, e)
            return target.zeroed()

    def iter_records(
        self, target: type[T], byte_order: ByteOrder | None = None
    ) -> Generator[T, None, None]:
        """从当前位置开始连续读取记录, 直到流末尾.

        非严格模式下, 末尾不完整的记录被丢弃并记录日志.

        Yields:
            每条记录的实例.
        """
        size = sizeof(target)
        if size == 0:
            raise UnsupportedKindError(f"{target.__name__} has no fields to iterate")
        config = self._config(byte_order)
        decoder = RecordDecoder(config)

        while True:
            try:
                data = self._stream.read(size) or b""
            except (OSError, ValueError) as e:
                if config.is_strict:
                    raise
                logger.warning("读取记录 %s 失败, 停止迭代: %s", target.__name__, e)
                return
            if not data:
                return
            if len(data) < size:
                e = BinaryUnderflowError(
                    f"Trailing partial record: need {size} bytes, got {len(data)}",
                    required=size,
                    available=len(data),
                )
                if config.is_strict:
                    raise e
                logger.warning("丢弃末尾不完整的记录 %s: %s", target.__name__, e)
                return
            try:
                record = decoder.decode(data, target)
            except (BinaryDecodeError, ValueError) as e:
                if config.is_strict:
                    raise
                logger.warning("解码记录 %s 失败, 返回零值记录: %s", target.__name__, e)
                record = target.zeroed()
            yield record


class BinaryWriter(_BinaryStream):
    """可同时写入大端和小端数据的二进制写入器.

    写入失败时异常直接传递给调用方.
    """

    def __init__(
        self,
        stream: IO[bytes],
        byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN,
    ):
        """初始化写入器.

        Args:
            stream: 可写的二进制文件类对象.
            byte_order: 流的默认字节序.
        """
        super().__init__(stream, byte_order, Option.STRICT)

    def write_bytes(self, data: bytes | bytearray | memoryview) -> None:
        """直接写入原始字节."""
        self._stream.write(bytes(data))

    def _write_scalar(
        self,
        binary_type: type[types.Scalar],
        value: Any,
        byte_order: ByteOrder | None,
    ) -> None:
        self._stream.write(binary_type.pack(value, self._swap(byte_order)))

    def write_bool(self, value: bool, byte_order: ByteOrder | None = None) -> None:
        """写入布尔值."""
        self._write_scalar(types.BOOL, value, byte_order)

    def write_int8(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入有符号8位整数."""
        self._write_scalar(types.INT8, value, byte_order)

    def write_uint8(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入无符号8位整数."""
        self._write_scalar(types.UINT8, value, byte_order)

    def write_int16(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入有符号16位整数."""
        self._write_scalar(types.INT16, value, byte_order)

    def write_uint16(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入无符号16位整数."""
        self._write_scalar(types.UINT16, value, byte_order)

    def write_int32(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入有符号32位整数."""
        self._write_scalar(types.INT32, value, byte_order)

    def write_uint32(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入无符号32位整数."""
        self._write_scalar(types.UINT32, value, byte_order)

    def write_int64(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入有符号64位整数."""
        self._write_scalar(types.INT64, value, byte_order)

    def write_uint64(self, value: int, byte_order: ByteOrder | None = None) -> None:
        """写入无符号64位整数."""
        self._write_scalar(types.UINT64, value, byte_order)

    def write_float32(self, value: float, byte_order: ByteOrder | None = None) -> None:
        """写入4字节浮点数."""
        self._write_scalar(types.FLOAT32, value, byte_order)

    def write_float64(self, value: float, byte_order: ByteOrder | None = None) -> None:
        """写入8字节双精度浮点数."""
        self._write_scalar(types.FLOAT64, value, byte_order)

    def write_record(self, value: Record, byte_order: ByteOrder | None = None) -> None:
        """编码记录并写入 `sizeof(value)` 个字节."""
        data = RecordEncoder(self._config(byte_order)).encode(value)
        self._stream.write(data)

    def flush(self) -> None:
        """刷新底层流."""
        self._stream.flush()
