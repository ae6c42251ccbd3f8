"""
文件收集器

递归遍历待打包目录，按排除模式和额外排除集过滤文件。
同一目录和排除设置同时用于归档和逐文件哈希，保证两者描述同一组文件。
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Collection, Dict, List, Sequence

from .build_context import BuildError
from .patterns import ExclusionPattern, is_directory_excluded, is_excluded


class TraversalError(BuildError):
    """目录遍历失败"""
    pass


@dataclass(frozen=True)
class FileEntry:
    """遍历得到的文件"""
    absolute_path: Path
    relative_path: str  # 相对于根目录，始终使用正斜杠

    def to_dict(self) -> Dict[str, str]:
        return {
            'path': self.relative_path,
            'absolute_path': str(self.absolute_path),
        }


def _list_directory(directory: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        raise TraversalError(f"无法读取目录 {directory}: {e}") from e
    # 按名称排序，使遍历顺序与文件系统返回顺序无关
    entries.sort(key=lambda e: e.name)
    return entries


def _check_encodable(relative: str, path: str) -> None:
    """归档成员名和清单都使用 UTF-8，无法编码的文件名在遍历时即报错"""
    try:
        relative.encode("utf-8")
    except UnicodeEncodeError as e:
        raise TraversalError(f"文件名不是有效的 UTF-8: {path!r}") from e


class TreeWalker:
    """目录遍历器

    负责扫描根目录，应用排除模式，记录遍历统计信息。
    """

    def __init__(
        self,
        patterns: Sequence[ExclusionPattern] = (),
        extra_exclusions: Collection[str] = (),
    ):
        self.patterns = tuple(patterns)
        self.extra_exclusions = frozenset(extra_exclusions)
        self.file_count = 0
        self.total_size = 0
        self.excluded_files = 0
        self.pruned_directories: List[str] = []
        self.skipped_symlinks: List[str] = []

    def walk(self, root_directory: Path) -> List[FileEntry]:
        """遍历目录

        Args:
            root_directory: 根目录

        Returns:
            List[FileEntry]: 未被排除的文件，每个文件恰好出现一次

        Raises:
            TraversalError: 根目录不存在、不是目录或无法读取，或文件名不是有效的 UTF-8
        """
        root = Path(root_directory)
        if not root.exists():
            raise TraversalError(f"遍历根目录不存在: {root}")
        if not root.is_dir():
            raise TraversalError(f"遍历根路径不是目录: {root}")

        self.file_count = 0
        self.total_size = 0
        self.excluded_files = 0
        self.pruned_directories = []
        self.skipped_symlinks = []

        results: List[FileEntry] = []
        self._walk_directory(root, "", results)
        return results

    def _walk_directory(self, directory: Path, prefix: str, results: List[FileEntry]) -> None:
        for entry in _list_directory(directory):
            relative = f"{prefix}{entry.name}"

            # 额外排除（例如恰好位于目录内的输出归档本身）
            if relative in self.extra_exclusions:
                continue

            try:
                is_symlink = entry.is_symlink()
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as e:
                raise TraversalError(f"无法读取路径信息 {entry.path}: {e}") from e

            # 符号链接既不打包也不跟随，避免环路和重复内容
            if is_symlink:
                self.skipped_symlinks.append(relative)
                continue

            if is_dir:
                if is_directory_excluded(relative, self.patterns):
                    self.pruned_directories.append(relative)
                    continue
                self._walk_directory(Path(entry.path), relative + "/", results)
            elif is_file:
                if is_excluded(relative, self.patterns):
                    self.excluded_files += 1
                    continue
                _check_encodable(relative, entry.path)
                try:
                    size = entry.stat().st_size
                except OSError as e:
                    raise TraversalError(f"无法读取文件信息 {entry.path}: {e}") from e
                results.append(FileEntry(absolute_path=Path(entry.path), relative_path=relative))
                self.file_count += 1
                self.total_size += size

    def get_statistics(self) -> Dict[str, int]:
        """获取遍历统计信息"""
        return {
            'total_files': self.file_count,
            'total_size': self.total_size,
            'excluded_files': self.excluded_files,
            'pruned_directories': len(self.pruned_directories),
            'skipped_symlinks': len(self.skipped_symlinks),
        }


def walk(
    root_directory: Path,
    patterns: Sequence[ExclusionPattern] = (),
    extra_exclusions: Collection[str] = (),
) -> List[FileEntry]:
    """便捷函数：遍历目录并返回未被排除的文件"""
    return TreeWalker(patterns, extra_exclusions).walk(root_directory)
