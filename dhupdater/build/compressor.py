"""
归档器抽象接口和实现

把过滤后的目录树压缩为单个 zip 归档。归档成员路径相对于源目录，
排除语义与 TreeWalker 一致，因此清单中的 file_md5 描述的正是归档内容。
"""

import shutil
import stat
import subprocess
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Collection, List, Optional, Sequence, Tuple

from ..config.schema import ArchiverKind
from ..utils.paths import relative_posix
from .build_context import BuildError
from .collector import TraversalError, walk
from .patterns import ExclusionPattern


# zip 格式能表示的最早时间，写入固定值使归档可复现
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class ArchiveError(BuildError):
    """归档失败"""
    pass


def archive_self_exclusion(source_dir: Path, destination: Path) -> Optional[str]:
    """归档文件位于源目录内部时，返回它相对于源目录的路径"""
    return relative_posix(Path(destination).resolve(), Path(source_dir).resolve())


class ArchiveCreator(ABC):
    """归档器抽象基类"""

    @abstractmethod
    def create_archive(
        self,
        source_dir: Path,
        destination: Path,
        patterns: Sequence[ExclusionPattern],
        extra_exclusions: Collection[str] = (),
    ) -> None:
        """压缩目录到归档文件

        Args:
            source_dir: 源目录
            destination: 归档输出路径
            patterns: 排除模式
            extra_exclusions: 额外排除的相对路径

        Raises:
            ArchiveError: 归档失败
        """
        pass

    @abstractmethod
    def get_kind(self) -> ArchiverKind:
        pass

    def _prepare_destination(self, source_dir: Path, destination: Path,
                             extra_exclusions: Collection[str]) -> Tuple[str, ...]:
        """清理旧归档、创建输出目录，并返回包含归档自身的排除集合"""
        try:
            if destination.exists():
                destination.unlink()
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveError(f"无法准备归档输出路径 {destination}: {e}") from e

        exclusions = list(extra_exclusions)
        self_relative = archive_self_exclusion(source_dir, destination)
        if self_relative and self_relative not in exclusions:
            exclusions.append(self_relative)
        return tuple(exclusions)


class ZipArchiveCreator(ArchiveCreator):
    """进程内 zipfile 归档器

    成员来自与哈希相同的目录遍历，按遍历顺序写入，时间戳固定，
    同一目录内容重复打包得到逐字节相同的归档。
    """

    def __init__(self, level: int = 9):
        self.level = min(9, max(0, level))

    def get_kind(self) -> ArchiverKind:
        return ArchiverKind.ZIPFILE

    def create_archive(
        self,
        source_dir: Path,
        destination: Path,
        patterns: Sequence[ExclusionPattern],
        extra_exclusions: Collection[str] = (),
    ) -> None:
        source_dir = Path(source_dir)
        destination = Path(destination)
        exclusions = self._prepare_destination(source_dir, destination, extra_exclusions)

        try:
            entries = walk(source_dir, patterns, exclusions)
        except TraversalError as e:
            raise ArchiveError(f"归档时遍历目录失败: {e}") from e

        compression = zipfile.ZIP_DEFLATED if self.level > 0 else zipfile.ZIP_STORED
        try:
            with zipfile.ZipFile(destination, 'w', compression) as zf:
                for entry in entries:
                    info = zipfile.ZipInfo(entry.relative_path, date_time=FIXED_DATE_TIME)
                    mode = entry.absolute_path.stat().st_mode
                    info.external_attr = (stat.S_IFREG | stat.S_IMODE(mode)) << 16
                    data = entry.absolute_path.read_bytes()
                    zf.writestr(
                        info,
                        data,
                        compress_type=compression,
                        compresslevel=self.level if self.level > 0 else None,
                    )
        except (OSError, UnicodeError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"写入 zip 归档失败 {destination}: {e}") from e


class ZipCliArchiveCreator(ArchiveCreator):
    """外部 zip 命令归档器

    在源目录中执行 `zip -r -y <dest> . -x <pattern>...`，-y 让符号链接按链接本身存储而不跟随。zip 会写入文件修改时间，
    因此整包摘要在不同运行之间不保证相同。
    """

    def __init__(self, level: int = 9, executable: str = "zip"):
        self.level = min(9, max(0, level))
        self.executable = executable

    def get_kind(self) -> ArchiverKind:
        return ArchiverKind.ZIP_CLI

    def build_command(self, destination: Path, patterns: Sequence[ExclusionPattern],
                      exclusions: Collection[str]) -> List[str]:
        """组装 zip 命令行参数"""
        args = [self.executable, "-r", "-q", "-y", f"-{self.level}", str(destination), "."]
        for pattern in patterns:
            args.extend(["-x", pattern.source])
        for relative in exclusions:
            args.extend(["-x", relative])
        return args

    def create_archive(
        self,
        source_dir: Path,
        destination: Path,
        patterns: Sequence[ExclusionPattern],
        extra_exclusions: Collection[str] = (),
    ) -> None:
        source_dir = Path(source_dir).resolve()
        destination = Path(destination).resolve()

        if shutil.which(self.executable) is None:
            raise ArchiveError(f"找不到归档工具: {self.executable}")

        exclusions = self._prepare_destination(source_dir, destination, extra_exclusions)
        command = self.build_command(destination, patterns, exclusions)

        try:
            subprocess.run(command, cwd=source_dir, capture_output=True, check=True)
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
            raise ArchiveError(f"{self.executable} 执行失败 (退出码 {e.returncode}): {stderr}") from e
        except OSError as e:
            raise ArchiveError(f"无法执行 {self.executable}: {e}") from e

        if not destination.exists():
            raise ArchiveError(f"{self.executable} 未生成归档文件: {destination}")


class ArchiverFactory:
    """归档器工厂"""

    @staticmethod
    def create(kind: ArchiverKind, level: int = 9) -> ArchiveCreator:
        """创建归档器

        Raises:
            ArchiveError: 不支持的归档实现
        """
        if kind == ArchiverKind.ZIPFILE:
            return ZipArchiveCreator(level)
        if kind == ArchiverKind.ZIP_CLI:
            return ZipCliArchiveCreator(level)
        raise ArchiveError(f"不支持的归档实现: {kind}")

    @staticmethod
    def get_available_kinds() -> List[ArchiverKind]:
        """获取当前环境可用的归档实现"""
        kinds = [ArchiverKind.ZIPFILE]
        if shutil.which("zip") is not None:
            kinds.append(ArchiverKind.ZIP_CLI)
        return kinds
