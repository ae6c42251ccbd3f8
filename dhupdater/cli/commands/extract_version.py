"""
Extract-version 命令实现

读取二进制文件中的四段式版本号，写入 <binary>.version.txt。
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from ...config import ExtractorKind


console = Console(stderr=True)


def extract_version_command(
    exe: str = typer.Argument(..., help="二进制文件路径"),
    extractor: ExtractorKind = typer.Option(ExtractorKind.PRINTABLE, "--extractor", help="版本文本提取实现"),
    no_write: bool = typer.Option(False, "--no-write", help="只打印版本号，不写版本文件"),
) -> None:
    """提取二进制文件的版本号

    示例:
        dh-updater extract-version app.exe
        dh-updater extract-version app.exe --extractor strings
    """
    from ...build.build_context import BuildError
    from ...build.version import VersionExtractor, create_text_extractor, write_version_file

    exe_path = Path(exe)
    if not exe_path.is_file():
        console.print(f"[red]二进制文件不存在: {escape(str(exe_path))}[/red]")
        raise typer.Exit(1)

    try:
        version = VersionExtractor(create_text_extractor(extractor)).extract(exe_path)
    except BuildError as e:
        console.print(f"[red]✗ 版本提取失败[/red] ({type(e).__name__}): {escape(str(e))}")
        raise typer.Exit(1)

    if not no_write:
        try:
            out_file = write_version_file(exe_path, version)
        except OSError as e:
            console.print(f"[red]写入版本文件失败: {escape(str(e))}[/red]")
            raise typer.Exit(1)
        console.print(f"[blue]版本文件[/blue]: {escape(str(out_file))}")

    typer.echo(version)
