"""BinaryX 配置对象."""

from dataclasses import dataclass

from .options import ByteOrder, Option


@dataclass(frozen=True)
class Config:
    """BinaryX 序列化/反序列化配置 (不可变).

    这是所有配置的统一容器, 在 API 入口层创建,
    然后传递给 Encoder/Decoder 内核以及流式读写器.

    Attributes:
        byte_order: 调用方给出的默认字节序.
        flags: 选项标志 (IntFlag).
    """

    byte_order: ByteOrder = ByteOrder.UNDEFINED
    flags: Option = Option.NONE

    @classmethod
    def from_params(
        cls,
        byte_order: ByteOrder | None = None,
        option: Option = Option.NONE,
    ) -> "Config":
        """从参数构建配置对象.

        Args:
            byte_order: 默认字节序, None 视为 `ByteOrder.UNDEFINED`.
            option: Option 枚举.

        Returns:
            Config: 配置对象.
        """
        if byte_order is None:
            byte_order = ByteOrder.UNDEFINED

        return cls(byte_order=ByteOrder(byte_order), flags=Option(option))

    @property
    def is_strict(self) -> bool:
        """失败时是否直接抛出异常."""
        return bool(self.flags & Option.STRICT)

    @property
    def option(self) -> int:
        """返回 int 形式的 option 值."""
        return int(self.flags)
