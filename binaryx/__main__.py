"""BinaryX命令行工具."""

import importlib
import json
import sys
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import ByteOrder, Record, get_descriptor, loads
from .struct import RecordDescriptor

if TYPE_CHECKING:
    import click as click_module
    from rich.console import Console
    from rich.syntax import Syntax
    from rich.table import Table
    from rich.text import Text
    from rich.tree import Tree
else:
    try:
        import click as click_module
        from rich.console import Console
        from rich.syntax import Syntax
        from rich.table import Table
        from rich.text import Text
        from rich.tree import Tree
    except ImportError:
        click_module = None
        Console = None
        Syntax = None
        Table = None
        Text = None
        Tree = None

click = click_module

# 流式读取配置
FILE_SIZE_THRESHOLD = 10 * 1024 * 1024  # 10MB
CHUNK_SIZE = 8 * 1024 * 1024  # 8MB

BYTE_ORDER_CHOICES = {
    "little": ByteOrder.LITTLE_ENDIAN,
    "big": ByteOrder.BIG_ENDIAN,
    "undefined": ByteOrder.UNDEFINED,
}

ORDER_LABELS = {
    ByteOrder.LITTLE_ENDIAN: "LE",
    ByteOrder.BIG_ENDIAN: "BE",
    None: "raw",
}


if not click:

    def main() -> None:
        """入口函数 (缺少 click)."""
        print("错误: 未检测到 'click' 模块,无法运行 CLI 工具。", file=sys.stderr)
        print(
            "\n该功能属于可选组件,请通过以下命令安装依赖:\n"
            "  pip install 'binaryx[cli]'",
            file=sys.stderr,
        )
        sys.exit(1)

else:

    def _load_model(path: str) -> type[Record]:
        """按 `package.module:ClassName` 导入记录类型.

        Raises:
            click.BadParameter: 路径格式错误或目标不是 Record 子类.
        """
        module_name, sep, attr = path.partition(":")
        if not sep or not module_name or not attr:
            raise click.BadParameter(
                f"MODEL 格式应为 package.module:ClassName, 实际为 {path!r}"
            )
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise click.BadParameter(f"无法导入模块 {module_name}: {e}") from e

        target: Any = module
        for part in attr.split("."):
            target = getattr(target, part, None)
            if target is None:
                raise click.BadParameter(f"模块 {module_name} 中不存在 {attr}")

        if not (isinstance(target, type) and issubclass(target, Record)):
            raise click.BadParameter(f"{path} 不是 Record 子类")
        return target

    def _read_binary_file(file_path: Path, verbose: bool) -> bytes:
        """读取二进制文件,大文件使用分块以控制内存.

        Args:
            file_path: 文件路径.
            verbose: 是否显示详细信息.

        Returns:
            文件内容的bytes.
        """
        file_size = file_path.stat().st_size

        if file_size > FILE_SIZE_THRESHOLD:
            if verbose:
                click.echo(f"[DEBUG] 文件大小 {file_size} 字节,使用分块读取", err=True)

            chunks = []
            with open(file_path, "rb") as f:
                while chunk := f.read(CHUNK_SIZE):
                    chunks.append(chunk)
            return b"".join(chunks)
        return file_path.read_bytes()

    def _read_hex_file(file_path: Path) -> bytes:
        """读取并解析十六进制文本文件.

        Raises:
            ValueError: 如果文件内容不是有效的十六进制字符串.
        """
        hex_data = file_path.read_text(encoding="utf-8").strip()

        cleaned = "".join(hex_data.split())
        if not cleaned or not all(c in "0123456789abcdefABCDEF" for c in cleaned):
            raise ValueError("不是有效的十六进制字符串")

        return bytes.fromhex(cleaned)

    def _format_value(value: Any) -> str:
        if isinstance(value, bytes | bytearray | memoryview):
            return bytes(value).hex(" ").upper()
        if isinstance(value, Enum):
            return f"{value.name} ({value.value})"
        return str(value)

    def _build_layout_table(
        model: type[Record], descriptor: RecordDescriptor, default_order: ByteOrder
    ) -> "Table":
        """构建记录布局表格 (偏移, 大小, 类型, 实际字节序)."""
        table = Table(title=f"{model.__name__} ({descriptor.size} bytes)")
        table.add_column("Offset", justify="right", style="bold blue")
        table.add_column("Size", justify="right")
        table.add_column("Field", style="bold")
        table.add_column("Type", style="cyan")
        table.add_column("Order", style="magenta")

        for field in descriptor.fields:
            order = field.effective_order(descriptor.byte_order, default_order)
            type_name = field.binary_type.__name__
            if field.enum_type is not None:
                type_name = f"{field.enum_type.__name__}[{type_name}]"
            table.add_row(
                str(field.offset),
                str(field.size),
                Text(field.name),
                Text(type_name),
                ORDER_LABELS[order],
            )
        return table

    def _build_rich_tree(
        record: Record, descriptor: RecordDescriptor, default_order: ByteOrder
    ) -> "Tree":
        """构建解码结果的 Rich 树."""
        style_tag = "bold blue"
        style_type = "cyan"
        style_value_str = "green"
        style_value_num = "magenta"

        root = Tree(
            Text(f"{type(record).__name__} ({descriptor.size} bytes)", style="bold yellow")
        )
        for field in descriptor.fields:
            value = getattr(record, field.name)
            order = field.effective_order(descriptor.byte_order, default_order)

            label = Text()
            label.append(f"[{field.offset}] ", style=style_tag)
            label.append(f"{field.name} ", style="bold")
            label.append(
                f"{field.binary_type.__name__}/{ORDER_LABELS[order]}: ",
                style=style_type,
            )
            if isinstance(value, bytes | Enum):
                label.append(_format_value(value), style=style_value_str)
            else:
                label.append(_format_value(value), style=style_value_num)
            root.add(label)
        return root

    def _json_default(obj: object) -> object:
        if isinstance(obj, bytes | bytearray | memoryview):
            return bytes(obj).hex()
        if isinstance(obj, Enum):
            return obj.value
        return str(obj)

    def _decode_and_print(
        model: type[Record],
        data: bytes,
        default_order: ByteOrder,
        offset: int,
        output_format: str,
        output_file: str | None,
        verbose: bool,
    ) -> None:
        """解码并输出结果."""
        descriptor = get_descriptor(model)
        if verbose:
            click.echo(
                f"[DEBUG] 数据大小: {len(data)} 字节, 记录大小: {descriptor.size} 字节",
                err=True,
            )

        try:
            record = loads(data, model, byte_order=default_order, offset=offset)
        except Exception as e:
            if verbose:
                import traceback

                traceback.print_exc(file=sys.stderr)
            raise click.ClickException(f"解码失败: {e}") from e

        if output_format == "tree":
            tree = _build_rich_tree(record, descriptor, default_order)
            if output_file:
                with open(output_file, "w", encoding="utf-8") as f:
                    Console(file=f).print(tree)
                click.echo(f"结果已保存到: {output_file}", err=True)
            else:
                Console().print(tree)
            return

        result = record.model_dump()
        output_text: str | None = None

        if output_format == "json":
            output_text = json.dumps(
                result, indent=2, ensure_ascii=False, default=_json_default
            )
        else:
            import pprint

            output_text = pprint.pformat(result, width=100)

        if output_file:
            Path(output_file).write_text(output_text, encoding="utf-8")
            click.echo(f"结果已保存到: {output_file}", err=True)
        elif output_format == "json":
            Console().print(Syntax(output_text, "json", theme="monokai", word_wrap=True))
        else:
            Console().print(result)

    @click.command(help="定长二进制记录解码命令行工具")
    @click.argument("model")
    @click.argument("encoded", required=False)
    @click.option(
        "-f",
        "--file",
        "file_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="从文件读取数据 (十六进制文本或原始二进制)",
    )
    @click.option(
        "--byte-order",
        type=click.Choice(list(BYTE_ORDER_CHOICES)),
        default="undefined",
        show_default=True,
        help="默认字节序, 仅对未标注字节序的记录生效",
    )
    @click.option(
        "--offset",
        type=click.IntRange(min=0),
        default=0,
        show_default=True,
        help="记录在数据中的起始偏移量",
    )
    @click.option(
        "--format",
        "output_format",
        type=click.Choice(["pretty", "json", "tree", "layout"]),
        default="pretty",
        show_default=True,
        help="输出格式 (layout 只显示布局, 不需要数据)",
    )
    @click.option(
        "-o",
        "--output",
        "output_file",
        type=click.Path(dir_okay=False, writable=True),
        help="将输出保存到文件 (如不指定则输出到控制台)",
    )
    @click.option(
        "-v",
        "--verbose",
        is_flag=True,
        help="显示详细的解码过程信息",
    )
    def cli(
        model: str,
        encoded: str | None,
        file_path: Path | None,
        byte_order: str,
        offset: int,
        output_format: str,
        output_file: str | None,
        verbose: bool,
    ) -> None:
        """定长二进制记录解码命令行工具.

        Examples:
          # 查看记录布局
          binaryx mypkg.formats:Header --format layout

          # 直接解码十六进制数据
          binaryx mypkg.formats:Header "cafebabe00010002"

          # 从文件读取并以大端为默认字节序
          binaryx mypkg.formats:Header -f header.bin --byte-order big --format tree
        """
        record_type = _load_model(model)
        default_order = BYTE_ORDER_CHOICES[byte_order]

        if output_format == "layout":
            table = _build_layout_table(
                record_type, get_descriptor(record_type), default_order
            )
            if output_file:
                with open(output_file, "w", encoding="utf-8") as f:
                    Console(file=f).print(table)
                click.echo(f"结果已保存到: {output_file}", err=True)
            else:
                Console().print(table)
            return

        # 互斥参数检查
        if encoded and file_path:
            raise click.UsageError("不能同时指定 ENCODED 数据和 --file 参数")
        if not encoded and not file_path:
            raise click.UsageError("必须指定 ENCODED 数据或 --file 参数")

        if file_path:
            try:
                data = _read_hex_file(file_path)
                if verbose:
                    click.echo("[DEBUG] 从文件读取十六进制数据 (文本模式)", err=True)
            except (UnicodeDecodeError, ValueError):
                data = _read_binary_file(file_path, verbose)
                if verbose:
                    click.echo("[DEBUG] 从文件读取二进制数据 (二进制模式)", err=True)
        else:
            assert encoded is not None
            try:
                data = bytes.fromhex(encoded)
            except ValueError as e:
                raise click.BadParameter(f"无效的十六进制格式 - {e}") from e

        _decode_and_print(
            record_type,
            data,
            default_order,
            offset,
            output_format,
            output_file,
            verbose,
        )

    def main() -> None:
        """入口函数."""
        cli()


if __name__ == "__main__":
    main()
