"""通用工具模块"""

from .logging import (
    configure_logging,
    LogStage,
    OutputLevel,
)

from .paths import (
    expand_path,
    to_posix,
    relative_posix,
    format_size,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "LogStage",
    "OutputLevel",

    # 路径相关
    "expand_path",
    "to_posix",
    "relative_posix",
    "format_size",
]
