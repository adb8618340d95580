"""BinaryX日志记录器.

库本身不安装任何 Handler, 由调用方配置 `logging.getLogger("binaryx")`.
"""

import logging

logger = logging.getLogger("binaryx")


def get_hexdump(
    data: bytes | bytearray | memoryview, pos: int, window: int = 16
) -> str:
    """获取指定位置周围数据的十六进制转储.

    最后一行以 `^` 标出 `pos` 对应的字节, 位置超出数据范围时不标记.

    Args:
        data: 原始数据.
        pos: 关注的字节偏移.
        window: `pos` 前后各显示的字节数.

    Returns:
        带偏移范围说明的多行文本.
    """
    start = max(0, pos - window)
    end = min(len(data), pos + window)
    hex_str = bytes(data[start:end]).hex(" ")

    lines = [f"位置 {pos} 的上下文 (显示 {start}-{end}):", hex_str]
    if start <= pos < end:
        lines.append(" " * ((pos - start) * 3) + "^^")
    return "\n".join(lines)
