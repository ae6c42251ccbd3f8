"""
Inspect 命令实现

查看已生成的更新清单（.json 或 .xml）。
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table


console = Console()


def inspect_command(
    manifest: str = typer.Argument(..., help="清单文件路径 (.json/.xml)"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
    show_files: bool = typer.Option(False, "--files", help="显示文件列表"),
) -> None:
    """查看更新清单

    示例:
        dh-updater inspect app.exe.dh.updater.json
        dh-updater inspect app.exe.dh.updater.xml --files
    """
    from ...build.manifest import ManifestFormatError, load_manifest

    manifest_path = Path(manifest)

    if not manifest_path.exists():
        console.print(f"[red]清单文件不存在: {escape(str(manifest_path))}[/red]")
        raise typer.Exit(1)

    try:
        data = load_manifest(manifest_path)
    except (ManifestFormatError, OSError) as e:
        console.print(f"[red]读取清单失败: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(data.to_dict(), ensure_ascii=False, indent=2))
        return

    table = Table(title=f"更新清单: {manifest_path.name}")
    table.add_column("字段", style="cyan", no_wrap=True)
    table.add_column("值", style="green")

    table.add_row("version", escape(data.version))
    table.add_row("package_type", escape(data.package_type))
    table.add_row("sha512", escape(data.sha512))
    table.add_row("urls", escape("\n".join(data.urls)) or "-")
    table.add_row("文件数", str(len(data.file_md5)))
    console.print(table)

    if show_files:
        files_table = Table(title="文件 MD5")
        files_table.add_column("路径", style="cyan")
        files_table.add_column("MD5", style="yellow", no_wrap=True)
        for path, md5 in data.file_md5.items():
            files_table.add_row(escape(path), md5)
        console.print(files_table)
