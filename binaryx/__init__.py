"""定长二进制记录编解码库.

提供Record定义、按字段控制字节序的序列化(dumps)和反序列化(loads)功能,
以及可混合大小端读写的流式读写器.
"""

from . import types
from .api import dump, dumps, iter_loads, load, loads, sizeof
from .config import Config
from .exceptions import (
    BinaryArgumentError,
    BinaryDecodeError,
    BinaryEncodeError,
    BinaryError,
    BinaryUnderflowError,
    BinaryValueError,
    UnsupportedKindError,
)
from .options import NATIVE_BYTE_ORDER, ByteOrder, Option
from .policy import effective_byte_order, resolve_swap
from .stream import BinaryReader, BinaryWriter
from .struct import (
    FieldDescriptor,
    Record,
    RecordDescriptor,
    RecordField,
    get_descriptor,
)
from .types import (
    BOOL,
    FLOAT32,
    FLOAT64,
    INT8,
    INT16,
    INT32,
    INT64,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    BinaryType,
    FixedBytes,
)

__version__ = "0.1.0"

__all__ = [
    "BOOL",
    "FLOAT32",
    "FLOAT64",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "NATIVE_BYTE_ORDER",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "BinaryArgumentError",
    "BinaryDecodeError",
    "BinaryEncodeError",
    "BinaryError",
    "BinaryReader",
    "BinaryType",
    "BinaryUnderflowError",
    "BinaryValueError",
    "BinaryWriter",
    "ByteOrder",
    "Config",
    "FieldDescriptor",
    "FixedBytes",
    "Option",
    "Record",
    "RecordDescriptor",
    "RecordField",
    "UnsupportedKindError",
    "__version__",
    "dump",
    "dumps",
    "effective_byte_order",
    "get_descriptor",
    "iter_loads",
    "load",
    "loads",
    "resolve_swap",
    "sizeof",
    "types",
]
