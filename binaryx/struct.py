"""BinaryX 记录定义模块."""

from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    ClassVar,
    TypeVar,
    cast,
)

from pydantic import BaseModel, Field, model_validator
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined
from typing_extensions import Self, dataclass_transform

from .exceptions import UnsupportedKindError
from .options import ByteOrder
from .policy import effective_byte_order, resolve_swap
from .types import (
    BOOL,
    FLOAT64,
    INT32,
    BinaryType,
    Buffer,
    FixedBytes,
    Integer,
)

R = TypeVar("R", bound="Record")


def RecordField(
    default: Any = PydanticUndefined,
    *,
    binary_type: type[BinaryType] | None = None,
    byte_order: ByteOrder = ByteOrder.UNDEFINED,
    fixed_size: int | None = None,
    default_factory: Any | None = None,
) -> Any:
    """创建记录字段配置.

    这是一个 Pydantic `Field` 的包装函数, 用于注入二进制布局所需的元数据.
    字段在记录中的位置由声明顺序决定, 字段之间没有填充.

    Args:
        default: 字段的静态默认值.
            如果未提供此参数且未提供 `default_factory`, 则该字段在初始化时为**必填**.
        binary_type: [可选] 显式指定字段的二进制类型, 用于覆盖默认的类型推断.
            例如: Python `int` 默认推断为 `INT32`, 指定 `types.UINT16` 可强制编码为 2 字节.
            枚举字段通过此参数指定底层整数宽度.
        byte_order: 字段级字节序注解. `UNDEFINED` 表示沿用记录级设置.
        fixed_size: 将 `bytes` 字段标记为长度固定的不透明字节区.
            该区域按原样复制, 不受任何字节序注解影响.
        default_factory: 用于生成默认值的无参可调用对象.

    Returns:
        Any: 包含 BinaryX 元数据的 Pydantic FieldInfo 对象.

    Raises:
        ValueError: 如果 `fixed_size` 不是正整数.

    Examples:
        >>> from binaryx import ByteOrder, Record, RecordField, types
        >>> class Header(Record, byte_order=ByteOrder.BIG_ENDIAN):
        ...     magic: bytes = RecordField(fixed_size=4)
        ...     version: int = RecordField(binary_type=types.UINT16)
        ...     # 即使记录是大端, 该字段也按小端存储
        ...     length: int = RecordField(byte_order=ByteOrder.LITTLE_ENDIAN)
    """
    json_schema_extra: dict[str, Any] = {
        "binary_type": binary_type,
        "byte_order": ByteOrder(byte_order),
    }

    kwargs: dict[str, Any] = {
        "json_schema_extra": json_schema_extra,
    }

    if fixed_size is not None:
        json_schema_extra["binary_type"] = FixedBytes.of(fixed_size)
        kwargs["min_length"] = fixed_size
        kwargs["max_length"] = fixed_size

    if default is not PydanticUndefined:
        kwargs["default"] = default

    if default_factory is not None:
        kwargs["default_factory"] = default_factory

    return cast(Any, Field)(**kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """单个字段的二进制布局信息.

    在记录类创建时构建一次, 之后只读.
    """

    name: str
    binary_type: type[BinaryType]
    byte_order: ByteOrder
    offset: int
    enum_type: type[Enum] | None = None

    @property
    def size(self) -> int:
        """字段占用的字节数."""
        return self.binary_type.size

    @property
    def is_opaque(self) -> bool:
        """是否为不透明的定长字节区."""
        return self.binary_type.is_opaque

    def should_swap(self, record_order: ByteOrder, default_order: ByteOrder) -> bool:
        """判断该字段在给定上下文中是否需要交换字节序."""
        if self.is_opaque:
            return False
        return resolve_swap(self.byte_order, record_order, default_order)

    def effective_order(
        self, record_order: ByteOrder, default_order: ByteOrder
    ) -> ByteOrder | None:
        """字段实际使用的字节序, 定长字节区返回 None."""
        if self.is_opaque:
            return None
        return effective_byte_order(self.byte_order, record_order, default_order)

    def unpack(self, data: Buffer, base: int, swap: bool) -> Any:
        """从 `base + offset` 处读取字段值."""
        return self.binary_type.unpack(data, base + self.offset, swap)

    def pack(self, value: Any, swap: bool) -> bytes:
        """将字段值序列化为字节."""
        if isinstance(value, Enum):
            value = value.value
        return self.binary_type.pack(value, swap)

    def validate(self, value: Any) -> Any:
        """按字段类型验证值, 枚举按其底层整数验证."""
        if isinstance(value, Enum):
            self.binary_type.validate(value.value)
            return value
        return self.binary_type.validate(value)

    def zero(self) -> Any:
        """字段的零值.

        枚举没有值为 0 的成员时返回整数 0.
        """
        if self.enum_type is not None:
            try:
                return self.enum_type(0)
            except ValueError:
                return 0
        return self.binary_type.zero()


@dataclass(frozen=True)
class RecordDescriptor:
    """记录类型的完整布局: 记录级字节序, 字段列表和总大小."""

    byte_order: ByteOrder
    fields: tuple[FieldDescriptor, ...]
    size: int

    def swap_plan(self, default_order: ByteOrder) -> tuple[bool, ...]:
        """按字段顺序返回每个字段是否需要交换."""
        return tuple(f.should_swap(self.byte_order, default_order) for f in self.fields)


def _resolve_binary_type(
    name: str, annotation: Any, explicit: type[BinaryType] | None
) -> tuple[type[BinaryType], type[Enum] | None]:
    enum_type: type[Enum] | None = None
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        enum_type = annotation

    if explicit is not None:
        if not (isinstance(explicit, type) and issubclass(explicit, BinaryType)):
            raise UnsupportedKindError(
                f"Field '{name}': invalid binary_type {explicit!r}"
            )
        binary_type = explicit
    elif isinstance(annotation, type) and issubclass(annotation, BinaryType):
        return annotation, None
    elif enum_type is not None:
        binary_type = INT32
    elif annotation is bool:
        binary_type = BOOL
    elif annotation is int:
        binary_type = INT32
    elif annotation is float:
        binary_type = FLOAT64
    elif annotation is bytes:
        raise UnsupportedKindError(
            f"Field '{name}': bytes fields need RecordField(fixed_size=N), "
            f"variable-length data is not supported"
        )
    else:
        raise UnsupportedKindError(
            f"Field '{name}': unsupported type {annotation!r}"
        )

    if enum_type is not None:
        if not issubclass(binary_type, Integer):
            raise UnsupportedKindError(
                f"Field '{name}': enum {enum_type.__name__} needs an integer "
                f"binary_type, got {binary_type.__name__}"
            )
        if not all(isinstance(member.value, int) for member in enum_type):
            raise UnsupportedKindError(
                f"Field '{name}': enum {enum_type.__name__} must have int values"
            )
        return binary_type, enum_type

    # 显式类型与注解必须一致
    if isinstance(annotation, type) and issubclass(annotation, BinaryType):
        if annotation is not binary_type:
            raise UnsupportedKindError(
                f"Field '{name}': annotation {annotation.__name__} conflicts "
                f"with binary_type {binary_type.__name__}"
            )
    elif annotation is not binary_type.python_type:
        raise UnsupportedKindError(
            f"Field '{name}': {binary_type.__name__} cannot hold {annotation!r}"
        )
    return binary_type, None


def prepare_descriptor(
    fields: dict[str, FieldInfo], byte_order: ByteOrder
) -> RecordDescriptor:
    """准备记录布局.

    遍历 Pydantic 的 fields, 按声明顺序计算偏移量并确定每个字段的类型.
    显式排除 (`exclude=True`) 的字段不参与布局.

    Raises:
        UnsupportedKindError: 字段类型不在支持的集合内.
    """
    descriptors = []
    offset = 0
    for name, field in fields.items():
        if field.exclude is True:
            continue

        extra = field.json_schema_extra
        if not isinstance(extra, dict):
            extra = {}

        binary_type, enum_type = _resolve_binary_type(
            name, field.annotation, cast(Any, extra.get("binary_type"))
        )
        field_order = ByteOrder(cast(Any, extra.get("byte_order", ByteOrder.UNDEFINED)))

        descriptors.append(
            FieldDescriptor(
                name=name,
                binary_type=binary_type,
                byte_order=field_order,
                offset=offset,
                enum_type=enum_type,
            )
        )
        offset += binary_type.size

    return RecordDescriptor(
        byte_order=byte_order, fields=tuple(descriptors), size=offset
    )


@dataclass_transform(kw_only_default=True, field_specifiers=(RecordField,))
class RecordMeta(type(BaseModel)):
    """Record 的元类, 用于在类创建时构建布局描述."""

    def __new__(  # noqa: D102
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        byte_order: ByteOrder | None = None,
        **kwargs: Any,
    ):
        cls = super().__new__(mcs, name, bases, namespace, **kwargs)
        if any(isinstance(base, RecordMeta) for base in bases):
            if byte_order is None:
                byte_order = getattr(cls, "__binary_byte_order__", ByteOrder.UNDEFINED)
            cls.__binary_byte_order__ = ByteOrder(byte_order)
            cls.__binary_descriptor__ = prepare_descriptor(
                cls.model_fields, cls.__binary_byte_order__
            )
        return cls


class Record(BaseModel, metaclass=RecordMeta):
    """定长二进制记录基类.

    继承自 `pydantic.BaseModel`, 提供声明式的记录定义方式.
    用户应通过继承此类, 配合 `RecordField` 来定义二进制布局.

    核心特性:
        1. **声明式布局**: 字段按声明顺序紧密排列, 没有填充.
        2. **混合字节序**: 记录级 (`byte_order=` 类参数) 与字段级注解可以同时使用.
        3. **数据验证**: 利用 Pydantic 按字段类型检查取值范围.
        4. **序列化/反序列化**: 提供 `model_dump_binary()` 和 `model_validate_binary()` 方法.

    Examples:
        >>> from binaryx import ByteOrder, Record, RecordField, types
        >>> class Point(Record, byte_order=ByteOrder.BIG_ENDIAN):
        ...     x: int = RecordField(binary_type=types.INT16)
        ...     y: int = RecordField(binary_type=types.INT16)
        >>> Point(x=1, y=2).model_dump_binary().hex()
        '00010002'
    """

    __binary_byte_order__: ClassVar[ByteOrder] = ByteOrder.UNDEFINED
    __binary_descriptor__: ClassVar[RecordDescriptor] = RecordDescriptor(
        byte_order=ByteOrder.UNDEFINED, fields=(), size=0
    )

    @model_validator(mode="after")
    def _binary_post_validate(self) -> Self:
        """验证后钩子: 按二进制类型检查并规范化字段值."""
        for field in type(self).__binary_descriptor__.fields:
            value = getattr(self, field.name)
            checked = field.validate(value)
            if checked is not value:
                setattr(self, field.name, checked)
        return self

    @classmethod
    def binary_size(cls) -> int:
        """记录序列化后的字节数."""
        return cls.__binary_descriptor__.size

    @classmethod
    def zeroed(cls) -> Self:
        """返回所有字段均为零值的实例 (不经过验证)."""
        values = {f.name: f.zero() for f in cls.__binary_descriptor__.fields}
        return cls.model_construct(**values)

    def model_dump_binary(self, byte_order: ByteOrder = ByteOrder.UNDEFINED) -> bytes:
        """序列化为二进制字节.

        Args:
            byte_order: 调用方默认字节序, 仅对未标注字节序的记录生效.

        Returns:
            bytes: 恰好 `binary_size()` 个字节.
        """
        from .api import dumps

        return dumps(self, byte_order=byte_order)

    @classmethod
    def model_validate_binary(
        cls,
        data: Buffer,
        byte_order: ByteOrder = ByteOrder.UNDEFINED,
        offset: int = 0,
    ) -> Self:
        """从二进制字节创建实例.

        Raises:
            BinaryArgumentError: 参数无效.
            BinaryUnderflowError: 数据长度不足.
            ValidationError: 解码出的值不符合模型定义.
        """
        from .api import loads

        return loads(data, cls, byte_order=byte_order, offset=offset)


def get_descriptor(target: Any) -> RecordDescriptor:
    """获取记录类型 (或实例) 的布局描述.

    Raises:
        UnsupportedKindError: 如果 target 不是 Record 子类.
    """
    cls = target if isinstance(target, type) else type(target)
    if not (issubclass(cls, Record) and cls is not Record):
        raise UnsupportedKindError(f"{cls!r} is not a Record subclass")
    return cls.__binary_descriptor__
