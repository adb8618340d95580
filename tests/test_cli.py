"""测试 BinaryX 命令行工具."""

import json
import re
from enum import IntEnum
from pathlib import Path

import pytest

from binaryx import ByteOrder, Record, RecordField, dumps, types

pytest.importorskip("click")
pytest.importorskip("rich")

from click.testing import CliRunner  # noqa: E402

from binaryx.__main__ import cli  # noqa: E402


class Kind(IntEnum):
    DATA = 1
    ACK = 2


class CliHeader(Record, byte_order=ByteOrder.BIG_ENDIAN):
    """CLI 测试用混合字节序记录."""

    magic: bytes = RecordField(fixed_size=4)
    version: int = RecordField(binary_type=types.UINT16)
    length: int = RecordField(binary_type=types.UINT32, byte_order=ByteOrder.LITTLE_ENDIAN)


class CliPlain(Record):
    """CLI 测试用未标注字节序的记录."""

    value: int = RecordField(binary_type=types.UINT16)
    kind: Kind = RecordField(binary_type=types.UINT8)


HEADER_MODEL = f"{__name__}:CliHeader"
PLAIN_MODEL = f"{__name__}:CliPlain"
HEADER_HEX = "43414645" "0102" "10000000"


@pytest.fixture
def runner() -> CliRunner:
    """提供 Click CLI 测试运行器.

    Returns:
        CliRunner 实例.
    """
    return CliRunner()


def strip_ansi(text: str) -> str:
    """去除 ANSI 转义序列."""
    ansi_escape = re.compile(r"\x1B(?:[@-Z\-_]|\[[0-?]*[ -/]*[@-~])")
    return ansi_escape.sub("", text)


# --- 基础 CLI 功能测试 ---


def test_cli_help(runner: CliRunner) -> None:
    """--help 选项应显示帮助信息."""
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Usage:" in result.output


def test_cli_missing_input(runner: CliRunner) -> None:
    """未提供数据时应报错并提示用法."""
    result = runner.invoke(cli, [HEADER_MODEL])

    assert result.exit_code != 0
    assert "必须指定" in result.output


def test_cli_mutual_exclusion(runner: CliRunner) -> None:
    """同时提供参数和文件时应报错."""
    with runner.isolated_filesystem():
        Path("test.bin").write_text("00", encoding="utf-8")

        result = runner.invoke(cli, [HEADER_MODEL, "00", "-f", "test.bin"])

        assert result.exit_code != 0
        assert "不能同时指定" in result.output


@pytest.mark.parametrize(
    "model",
    ["no_colon", "binaryx_missing_module:Foo", f"{__name__}:Missing", f"{__name__}:Kind"],
)
def test_cli_bad_model(runner: CliRunner, model: str) -> None:
    """无法导入或不是 Record 子类的 MODEL 应报错."""
    result = runner.invoke(cli, [model, "00"])

    assert result.exit_code != 0


# --- 解码 ---


def test_cli_decode_hex_string(runner: CliRunner) -> None:
    """应能正确解码命令行参数提供的十六进制字符串."""
    result = runner.invoke(cli, [HEADER_MODEL, HEADER_HEX])

    assert result.exit_code == 0
    assert "258" in result.output
    assert "16" in result.output


def test_cli_byte_order_option(runner: CliRunner) -> None:
    """--byte-order 只影响未标注字节序的记录."""
    little = runner.invoke(cli, [PLAIN_MODEL, "010001", "--format", "tree"])
    big = runner.invoke(
        cli, [PLAIN_MODEL, "010001", "--byte-order", "big", "--format", "tree"]
    )

    assert little.exit_code == 0
    assert big.exit_code == 0
    assert "UINT16/LE: 1" in strip_ansi(little.output)
    assert "UINT16/BE: 256" in strip_ansi(big.output)


def test_cli_offset(runner: CliRunner) -> None:
    """--offset 跳过前导字节."""
    result = runner.invoke(
        cli, [PLAIN_MODEL, "ffff" "010002", "--offset", "2", "--format", "tree"]
    )

    assert result.exit_code == 0
    assert "ACK" in strip_ansi(result.output)


def test_cli_format_json(runner: CliRunner) -> None:
    """--format json 应输出合法的 JSON 数据."""
    with runner.isolated_filesystem():
        result = runner.invoke(
            cli, [HEADER_MODEL, HEADER_HEX, "--format", "json", "-o", "out.json"]
        )

        assert result.exit_code == 0
        data = json.loads(Path("out.json").read_text(encoding="utf-8"))

    assert data == {"magic": "43414645", "version": 258, "length": 16}


def test_cli_format_tree(runner: CliRunner) -> None:
    """树状输出应显示偏移, 类型和实际字节序."""
    result = runner.invoke(cli, [HEADER_MODEL, HEADER_HEX, "--format", "tree"])

    assert result.exit_code == 0
    clean_output = strip_ansi(result.output)
    assert "CliHeader (10 bytes)" in clean_output
    assert "[0] magic FixedBytes4/raw: 43 41 46 45" in clean_output
    assert "[4] version UINT16/BE: 258" in clean_output
    assert "[6] length UINT32/LE: 16" in clean_output


def test_cli_format_layout(runner: CliRunner) -> None:
    """layout 格式不需要数据, 只显示布局."""
    result = runner.invoke(cli, [HEADER_MODEL, "--format", "layout"])

    assert result.exit_code == 0
    clean_output = strip_ansi(result.output)
    for text in ("magic", "version", "length", "raw", "BE", "LE"):
        assert text in clean_output


def test_cli_layout_enum_type_name(runner: CliRunner) -> None:
    """枚举字段的类型名包含底层类型."""
    result = runner.invoke(cli, [PLAIN_MODEL, "--format", "layout"])

    assert result.exit_code == 0
    assert "Kind[UINT8]" in strip_ansi(result.output)


def test_cli_output_file(runner: CliRunner) -> None:
    """应能将解码结果保存到指定文件."""
    with runner.isolated_filesystem():
        result = runner.invoke(cli, [HEADER_MODEL, HEADER_HEX, "-o", "out.txt"])

        assert result.exit_code == 0
        assert "结果已保存到" in result.output
        content = Path("out.txt").read_text(encoding="utf-8")
        assert "258" in content


def test_cli_tree_output_file(runner: CliRunner, tmp_path: Path) -> None:
    """树状输出应能正确保存到文件."""
    output_file = tmp_path / "tree.txt"

    result = runner.invoke(
        cli, [HEADER_MODEL, HEADER_HEX, "--format", "tree", "-o", str(output_file)]
    )

    assert result.exit_code == 0
    assert "version UINT16/BE: 258" in output_file.read_text(encoding="utf-8")


# --- 错误处理 ---


def test_cli_invalid_hex(runner: CliRunner) -> None:
    """提供无效的十六进制字符串时应报错."""
    result = runner.invoke(cli, [HEADER_MODEL, "zz"])

    assert result.exit_code != 0
    assert "无效的十六进制格式" in result.output


def test_cli_decode_error(runner: CliRunner) -> None:
    """数据不足时应优雅退出并显示错误信息."""
    result = runner.invoke(cli, [HEADER_MODEL, "0102"])

    assert result.exit_code != 0
    assert "解码失败" in result.output


def test_cli_invalid_enum_value(runner: CliRunner) -> None:
    """枚举值无效时解码失败."""
    result = runner.invoke(cli, [PLAIN_MODEL, "010009"])

    assert result.exit_code != 0
    assert "解码失败" in result.output


def test_cli_verbose_output(runner: CliRunner) -> None:
    """-v 选项应在出错时显示详细堆栈信息."""
    result = runner.invoke(cli, [HEADER_MODEL, "0102", "-v"])

    assert result.exit_code != 0
    assert "Traceback" in result.output


# --- 文件输入 ---


def test_cli_file_hex_with_spaces(runner: CliRunner, tmp_path: Path) -> None:
    """应能读取带空格和换行的十六进制文件."""
    hex_file = tmp_path / "header.txt"
    hex_file.write_text("43 41 46 45\n01 02\n10 00 00 00\n", encoding="utf-8")

    result = runner.invoke(cli, [HEADER_MODEL, "-f", str(hex_file), "-v"])

    assert result.exit_code == 0
    assert "文本模式" in result.output
    assert "258" in result.output


def test_cli_file_binary(runner: CliRunner, tmp_path: Path) -> None:
    """应能自动检测并读取二进制文件."""
    bin_file = tmp_path / "header.bin"
    record = CliHeader(magic=b"\xfe\xed\xfa\xce", version=7, length=9)
    bin_file.write_bytes(dumps(record))

    result = runner.invoke(
        cli, [HEADER_MODEL, "-f", str(bin_file), "-v", "--format", "tree"]
    )

    assert result.exit_code == 0
    clean_output = strip_ansi(result.output)
    assert "二进制模式" in clean_output
    assert "version UINT16/BE: 7" in clean_output
