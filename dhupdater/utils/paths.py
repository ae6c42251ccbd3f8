"""
路径工具

提供路径处理相关的工具函数。
"""

import os
from pathlib import Path
from typing import Optional, Union


def expand_path(path: Union[str, Path]) -> Path:
    """扩展路径（处理环境变量和用户目录）并解析为绝对路径

    Args:
        path: 原始路径

    Returns:
        Path: 扩展后的绝对路径
    """
    if isinstance(path, str):
        path = os.path.expandvars(path)
        path = os.path.expanduser(path)

    return Path(path).resolve()


def to_posix(path: Union[str, Path]) -> str:
    """将路径统一为正斜杠分隔的字符串"""
    return str(path).replace("\\", "/")


def relative_posix(path: Path, root: Path) -> Optional[str]:
    """计算 path 相对于 root 的正斜杠路径

    Returns:
        Optional[str]: 相对路径；path 不在 root 内部时返回 None
    """
    try:
        relative = path.relative_to(root)
    except ValueError:
        return None
    if relative == Path("."):
        return None
    return relative.as_posix()


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"
