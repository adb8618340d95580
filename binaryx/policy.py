"""字节序决策.

根据字段级注解, 记录级注解和调用方默认字节序,
判断单个字段的存储字节是否需要反转.
"""

from .options import NATIVE_BYTE_ORDER, ByteOrder


def resolve_swap(
    field_order: ByteOrder,
    record_order: ByteOrder,
    default_order: ByteOrder,
) -> bool:
    """判断字段是否需要交换为大端.

    按顺序求值, 第一个命中的规则生效:
        1. 字段标注 `BIG_ENDIAN` -> 交换.
        2. 字段标注 `LITTLE_ENDIAN` -> 不交换 (覆盖记录级的大端设置).
        3. 记录标注 `BIG_ENDIAN` -> 交换.
        4. 记录未标注且调用方默认 `BIG_ENDIAN` -> 交换.
        5. 其他情况 -> 不交换.

    Args:
        field_order: 字段级字节序注解.
        record_order: 记录级字节序注解.
        default_order: 调用方给出的默认字节序.

    Returns:
        bool: 需要反转字节时为 True.
    """
    if field_order == ByteOrder.BIG_ENDIAN:
        return True
    if field_order == ByteOrder.LITTLE_ENDIAN:
        return False
    if record_order == ByteOrder.BIG_ENDIAN:
        return True
    return (
        record_order == ByteOrder.UNDEFINED and default_order == ByteOrder.BIG_ENDIAN
    )


def effective_byte_order(
    field_order: ByteOrder,
    record_order: ByteOrder,
    default_order: ByteOrder,
) -> ByteOrder:
    """返回字段实际使用的字节序 (`BIG_ENDIAN` 或 `LITTLE_ENDIAN`)."""
    if resolve_swap(field_order, record_order, default_order):
        return ByteOrder.BIG_ENDIAN
    return NATIVE_BYTE_ORDER
