"""
dh-updater CLI 主入口

提供命令行接口，支持 package/extract-version/inspect/check-excludes 等命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..utils import configure_logging
from .commands import package, extract_version, inspect, check_excludes


app = typer.Typer(
    name="dh-updater",
    help="dh-updater - 更新包打包与清单生成工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"dh-updater v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level="DEBUG" if verbose else "INFO")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """dh-updater - 更新包打包与清单生成工具

    使用 --help 查看可用命令的详细信息。
    """
    pass


app.command("package", help="打包目录并生成更新清单")(package.package_command)
app.command("extract-version", help="提取二进制版本号")(extract_version.extract_version_command)
app.command("inspect", help="查看更新清单")(inspect.inspect_command)
app.command("check-excludes", help="预览排除模式效果")(check_excludes.check_excludes_command)


@app.command("info")
def info_command() -> None:
    """显示系统信息"""
    from ..build.compressor import ArchiverFactory
    from ..config.schema import ExtractorKind
    import shutil

    table = Table(title="版本信息")
    table.add_column("组件", style="cyan")
    table.add_column("版本", style="green")
    table.add_row("dh-updater", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    console.print(table)

    tools_table = Table(title="外部协作者")
    tools_table.add_column("实现", style="cyan")
    tools_table.add_column("状态", style="green")

    available = ArchiverFactory.get_available_kinds()
    for kind in available:
        tools_table.add_row(f"archiver: {kind.value}", "✓ 可用")
    for kind in ExtractorKind:
        ok = kind != ExtractorKind.STRINGS or shutil.which("strings") is not None
        tools_table.add_row(f"extractor: {kind.value}", "✓ 可用" if ok else "✗ 不可用")
    console.print(tools_table)


if __name__ == "__main__":
    app()
