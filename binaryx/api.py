"""BinaryX API模块.

提供用于记录序列化和反序列化的高级接口 `dumps`, `loads`, `dump`, `load`.
`dumps`/`loads` 直接操作字节缓冲区, `dump`/`load` 操作文件类对象.
"""

from collections.abc import Generator
from typing import IO, TypeVar

from .config import Config
from .decoder import DataReader, RecordDecoder
from .encoder import RecordEncoder
from .exceptions import BinaryError, UnsupportedKindError
from .log import logger
from .options import ByteOrder, Option
from .struct import Record, get_descriptor

T = TypeVar("T", bound=Record)


def sizeof(target: type[Record] | Record) -> int:
    """返回记录序列化后的字节数.

    Raises:
        UnsupportedKindError: 如果 target 不是 Record 子类或实例.
    """
    return get_descriptor(target).size


def dumps(obj: Record, byte_order: ByteOrder = ByteOrder.UNDEFINED) -> bytes:
    """序列化记录为二进制字节.

    Args:
        obj: 要序列化的 `Record` 实例.
        byte_order: 调用方默认字节序.
            只对未标注记录级字节序的记录生效, 字段级注解始终优先.

    Returns:
        bytes: 恰好 `sizeof(obj)` 个字节.

    Raises:
        UnsupportedKindError: obj 不是 Record 实例.
        BinaryValueError: 字段值超出其类型的表示范围.

    Examples:
        >>> from binaryx import ByteOrder, Record, RecordField, dumps, types
        >>> class Pair(Record):
        ...     a: int = RecordField(binary_type=types.UINT16)
        ...     b: int = RecordField(binary_type=types.UINT16)
        >>> dumps(Pair(a=1, b=2), ByteOrder.BIG_ENDIAN).hex()
        '00010002'
    """
    config = Config.from_params(byte_order=byte_order)
    return RecordEncoder(config).encode(obj)


def dump(
    obj: Record,
    fp: IO[bytes],
    byte_order: ByteOrder = ByteOrder.UNDEFINED,
    option: Option = Option.NONE,
) -> bytes | None:
    """序列化记录并写入文件.

    默认情况下写入失败只记录日志并返回 None, 调用方无法区分
    "写入失败" 和其他返回 None 的情况. 需要区分时请使用 `Option.STRICT`.

    Args:
        obj: 要序列化的记录.
        fp: 文件类对象, 必须实现 `write(bytes)` 方法.
        byte_order: 调用方默认字节序.
        option: `Option.STRICT` 时写入失败直接抛出异常.

    Returns:
        写入的字节, 失败时为 None.
    """
    config = Config.from_params(byte_order=byte_order, option=option)
    try:
        data = RecordEncoder(config).encode(obj)
        fp.write(data)
    except UnsupportedKindError:
        raise
    except (BinaryError, OSError, ValueError, TypeError) as e:
        if config.is_strict:
            raise
        logger.warning("写入记录失败: %s", e, exc_info=True)
        return None
    return data


def loads(
    data: bytes | bytearray | memoryview,
    target: type[T],
    byte_order: ByteOrder = ByteOrder.UNDEFINED,
    offset: int = 0,
) -> T:
    """反序列化二进制字节为记录.

    Args:
        data: 输入的二进制数据 (bytes, bytearray 或 memoryview).
        target: 目标 `Record` 子类.
        byte_order: 调用方默认字节序.
        offset: 记录在 data 中的起始偏移量.

    Returns:
        T: 目标类型实例.

    Raises:
        BinaryArgumentError: data 为 None 或 offset 为负数.
        BinaryUnderflowError: data 在 offset 之后不足 `sizeof(target)` 字节.
        UnsupportedKindError: target 不是 Record 子类.
        ValidationError: 解码出的值不符合模型定义.
    """
    config = Config.from_params(byte_order=byte_order)
    return RecordDecoder(config).decode(data, target, offset)


def load(
    fp: IO[bytes],
    target: type[T],
    byte_order: ByteOrder = ByteOrder.UNDEFINED,
    option: Option = Option.NONE,
) -> T:
    """从文件当前位置读取并反序列化一条记录.

    封装了 `BinaryReader.read_record()`.
    默认情况下数据不足或读取失败时返回零值记录, `Option.STRICT` 时抛出异常.

    Args:
        fp: 打开的二进制文件对象.
        target: 目标类型.
        byte_order: 调用方默认字节序.
        option: 选项.

    Returns:
        解析后的记录.
    """
    from .stream import BinaryReader

    return BinaryReader(fp, byte_order=byte_order, option=option).read_record(target)


def iter_loads(
    data: bytes | bytearray | memoryview,
    target: type[T],
    byte_order: ByteOrder = ByteOrder.UNDEFINED,
) -> Generator[T, None, None]:
    """依次解码缓冲区中连续存放的多条记录.

    Yields:
        每条记录的实例.

    Raises:
        BinaryUnderflowError: 末尾存在不完整的记录.
    """
    if sizeof(target) == 0:
        raise UnsupportedKindError(f"{target.__name__} has no fields to iterate")
    decoder = RecordDecoder(Config.from_params(byte_order=byte_order))
    reader = DataReader(data)
    while not reader.eof:
        yield decoder.decode_from(reader, target)

