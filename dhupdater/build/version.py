"""
版本提取

从二进制文件的可读文本中查找第一个四段式数字版本号 (x.x.x.x)。
文本提取委托给可替换的 TextExtractor：外部 strings 命令，或纯 Python 扫描。
"""

import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..config.schema import ExtractorKind
from .build_context import BuildError


VERSION_PATTERN = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+")

# 与 strings 默认值一致的最短可打印字符串长度
DEFAULT_MIN_LENGTH = 4

_PRINTABLE_RUN = rb"[\x20-\x7e\t]{%d,}"


class ExtractionError(BuildError):
    """二进制文本提取失败"""
    pass


class VersionNotFoundError(BuildError):
    """未找到四段式版本号"""
    pass


class TextExtractor(ABC):
    """二进制文本提取接口"""

    @abstractmethod
    def extract_text(self, path: Path) -> str:
        """返回文件中的可打印字符串内容

        Raises:
            ExtractionError: 文件不可读或提取工具不可用
        """
        pass


class StringsTextExtractor(TextExtractor):
    """调用外部 strings 命令提取文本"""

    def __init__(self, executable: str = "strings"):
        self.executable = executable

    def extract_text(self, path: Path) -> str:
        if shutil.which(self.executable) is None:
            raise ExtractionError(f"找不到文本提取工具: {self.executable}")

        try:
            completed = subprocess.run(
                [self.executable, str(path)],
                capture_output=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
            raise ExtractionError(f"{self.executable} 执行失败 (退出码 {e.returncode}): {stderr}") from e
        except OSError as e:
            raise ExtractionError(f"无法执行 {self.executable}: {e}") from e

        return completed.stdout.decode("utf-8", errors="replace")


class PrintableTextExtractor(TextExtractor):
    """纯 Python 实现：扫描连续的可打印 ASCII 字符"""

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH):
        if min_length < 1:
            raise ValueError("min_length 必须大于 0")
        self.min_length = min_length
        self._pattern = re.compile(_PRINTABLE_RUN % min_length)

    def extract_text(self, path: Path) -> str:
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise ExtractionError(f"读取二进制文件失败 {path}: {e}") from e
        return self.extract_from_bytes(data)

    def extract_from_bytes(self, data: bytes) -> str:
        runs = self._pattern.findall(data)
        return "\n".join(run.decode("ascii") for run in runs)


def create_text_extractor(kind: ExtractorKind) -> TextExtractor:
    """按配置创建文本提取器"""
    if kind == ExtractorKind.STRINGS:
        return StringsTextExtractor()
    if kind == ExtractorKind.PRINTABLE:
        return PrintableTextExtractor()
    raise ValueError(f"不支持的文本提取器: {kind}")


def extract_version(text: str) -> str:
    """在文本中查找第一个四段式版本号

    Raises:
        VersionNotFoundError: 文本中没有 x.x.x.x 形式的版本号
    """
    match = VERSION_PATTERN.search(text)
    if not match:
        raise VersionNotFoundError("未找到 x.x.x.x 形式的版本号")
    return match.group(0)


class VersionExtractor:
    """从二进制文件读取版本号"""

    def __init__(self, text_extractor: Optional[TextExtractor] = None):
        self.text_extractor = text_extractor or PrintableTextExtractor()

    def extract(self, binary_path: Path) -> str:
        text = self.text_extractor.extract_text(Path(binary_path))
        try:
            return extract_version(text)
        except VersionNotFoundError as e:
            raise VersionNotFoundError(f"{e}: {binary_path}") from e


def version_file_path(binary_path: Path) -> Path:
    """版本文件路径: <binary>.version.txt"""
    binary_path = Path(binary_path)
    return binary_path.with_name(binary_path.name + ".version.txt")


def write_version_file(binary_path: Path, version: str) -> Path:
    """把版本号写入 <binary>.version.txt

    Returns:
        Path: 写入的版本文件路径
    """
    out_path = version_file_path(binary_path)
    out_path.write_text(version + "\n", encoding="utf-8")
    return out_path
