"""
Check-excludes 命令实现

在不打包的情况下预览排除模式的效果：列出会被打包的文件及跳过的目录。
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...config import ConfigError, ConfigValidationError, load_config


console = Console()


def check_excludes_command(
    directory: str = typer.Argument(..., help="待打包目录"),
    exclude: Optional[str] = typer.Option(None, "--exclude", "-x", help="排除模式（; 或 , 分隔），覆盖 EXCLUDE_PATTERNS"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML 配置文件路径"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="只输出统计信息"),
) -> None:
    """预览排除模式

    示例:
        dh-updater check-excludes dist -x "*.pdb;logs/**"
    """
    from ...build.collector import TraversalError, TreeWalker
    from ...build.patterns import parse_patterns
    from ...utils import format_size

    try:
        config_obj = load_config(config, overrides={'exclude_patterns': exclude})
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {escape(str(e))}")
        raise typer.Exit(1)

    patterns = parse_patterns(config_obj.exclude_patterns)
    walker = TreeWalker(patterns)

    try:
        entries = walker.walk(Path(directory))
    except TraversalError as e:
        console.print(f"[red]遍历失败: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not quiet:
        table = Table(title="将被打包的文件")
        table.add_column("相对路径", style="cyan")
        for entry in entries:
            table.add_row(escape(entry.relative_path))
        console.print(table)

        for pruned in walker.pruned_directories:
            console.print(f"[dim]跳过目录: {escape(pruned)}/[/dim]")
        for link in walker.skipped_symlinks:
            console.print(f"[dim]跳过符号链接: {escape(link)}[/dim]")

    stats = walker.get_statistics()
    console.print(
        f"[green]{stats['total_files']}[/green] 个文件 ({format_size(stats['total_size'])})，"
        f"排除 {stats['excluded_files']} 个文件，跳过 {stats['pruned_directories']} 个目录"
    )
