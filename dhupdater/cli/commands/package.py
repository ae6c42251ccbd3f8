"""
Package 命令实现

打包目录、生成更新清单，并在标准输出打印一行结果记录。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ...config import ArchiverKind, ExtractorKind, ConfigError, ConfigValidationError, load_config
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console(stderr=True)


def package_command(
    exe: str = typer.Argument(..., help="带版本信息的二进制文件"),
    zip_dir: str = typer.Argument(..., help="待打包目录"),
    zip_path: str = typer.Argument(..., help="输出 zip 归档路径"),
    urls: str = typer.Argument("", help="额外下载地址，逗号分隔"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML 配置文件路径"),
    exclude: Optional[str] = typer.Option(None, "--exclude", "-x", help="排除模式（; 或 , 分隔），覆盖 EXCLUDE_PATTERNS"),
    repository: Optional[str] = typer.Option(None, "--repository", help="仓库标识 owner/name，覆盖 GITHUB_REPOSITORY"),
    manifest_dir: Optional[str] = typer.Option(None, "--manifest-dir", help="清单输出目录（默认当前目录）"),
    archiver: Optional[ArchiverKind] = typer.Option(None, "--archiver", help="归档实现"),
    extractor: Optional[ExtractorKind] = typer.Option(None, "--extractor", help="版本文本提取实现"),
    workers: Optional[int] = typer.Option(None, "--workers", "-j", help="文件哈希并发线程数"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """打包目录并生成更新清单

    示例:
        dh-updater package app.exe dist release/app.zip
        dh-updater package app.exe dist dist/app.zip "https://mirror/app.zip"
    """
    from ...build.builder import Builder
    from ...build.build_context import BuildError
    from ...build.manifest import parse_urls

    if verbose:
        set_log_level(OutputLevel.DEBUG)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError as e:
            console.print(f"[yellow]无法写入日志文件 {escape(log_file)}: {escape(str(e))}[/yellow]")

    try:
        config_obj = load_config(
            config,
            overrides={
                'exclude_patterns': exclude,
                'repository_id': repository,
                'archiver': archiver,
                'text_extractor': extractor,
                'hash_workers': workers,
            },
        )
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {escape(str(e))}")
        raise typer.Exit(1)

    builder = Builder(config_obj)

    try:
        result = builder.build(
            Path(exe),
            Path(zip_dir),
            Path(zip_path),
            extra_urls=parse_urls(urls),
            manifest_dir=Path(manifest_dir) if manifest_dir else None,
        )
    except BuildError as e:
        console.print(f"[red]✗ 打包失败[/red] ({type(e).__name__}): {escape(str(e))}")
        if log_file:
            console.print("[yellow]详细错误信息:[/yellow]")
            console.print(traceback.format_exc(), markup=False)
        raise typer.Exit(1)

    # 结果行直接写入 stdout，避免 Rich 换行
    typer.echo(result.to_output_line())
