"""BinaryX 特定的异常类.

该模块为 BinaryX 库定义了异常层次结构.
"""


class BinaryError(Exception):
    """所有 BinaryX 异常的基类."""

    pass


class BinaryArgumentError(BinaryError, ValueError):
    """参数不满足前置条件时抛出.

    Case:
        - 缓冲区为 None 或不是字节序列.
        - 偏移量为负数.
    """

    pass


class UnsupportedKindError(BinaryError, TypeError):
    """字段类型不在支持的标量集合内时抛出.

    这通常意味着记录类型的定义有误, 不是可恢复的运行时错误.
    """

    pass


class BinaryDecodeError(BinaryError):
    """反序列化失败时抛出."""

    def __init__(
        self,
        msg: str,
        loc: list[str | int] | None = None,
    ) -> None:
        """初始化解码错误.

        Args:
            msg: 错误描述信息.
            loc: 错误发生的位置路径 (字段名或偏移量).
        """
        super().__init__(msg)
        self.loc = loc or []

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.loc:
            loc_str = ".".join(str(x) for x in self.loc)
            return f"{base_msg} (at {loc_str})"
        return base_msg


class BinaryUnderflowError(BinaryDecodeError):
    """可用字节数少于记录声明的大小时抛出."""

    def __init__(
        self,
        msg: str,
        required: int,
        available: int,
        loc: list[str | int] | None = None,
    ) -> None:
        """初始化下溢错误.

        Args:
            msg: 错误描述信息.
            required: 需要的字节数.
            available: 实际可用的字节数.
            loc: 错误发生的位置路径.
        """
        super().__init__(msg, loc)
        self.required = required
        self.available = available


class BinaryEncodeError(BinaryError):
    """序列化失败时抛出."""

    pass


class BinaryValueError(BinaryEncodeError, ValueError):
    """值超出字段类型的表示范围时抛出 (如 `UINT8` 存了 300)."""

    pass
