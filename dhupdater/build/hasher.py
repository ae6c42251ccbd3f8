"""
哈希工具

- 整包摘要：SHA-512，base64 编码，供更新客户端做完整性校验
- 单文件摘要：MD5，十六进制，供更新客户端做变更检测

摘要按原始字节计算，不做换行或编码归一化。
"""

import base64
import hashlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, Union

from .build_context import BuildError
from .collector import FileEntry


ARCHIVE_ALGORITHM = "sha512"
FILE_ALGORITHM = "md5"
CHUNK_SIZE = 64 * 1024


class HashingError(BuildError):
    """读取文件计算摘要失败"""
    pass


class HashCalculator:
    """哈希计算器"""

    def __init__(self, algorithm: str = ARCHIVE_ALGORITHM):
        """初始化哈希计算器

        Args:
            algorithm: 哈希算法名称
        """
        self.algorithm = algorithm.lower()
        if self.algorithm not in hashlib.algorithms_available:
            raise ValueError(f"不支持的哈希算法: {algorithm}")

        self._hasher = hashlib.new(self.algorithm)

    def update(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._hasher.update(data)

    def update_from_file(self, file_path: Path, chunk_size: int = CHUNK_SIZE) -> None:
        """从文件分块更新哈希

        Raises:
            HashingError: 文件读取失败
        """
        try:
            with open(file_path, 'rb') as f:
                while True:
                    chunk = f.read(chunk_size)
                    if not chunk:
                        break
                    self._hasher.update(chunk)
        except OSError as e:
            raise HashingError(f"读取文件失败 {file_path}: {e}") from e

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()

    def digest(self) -> bytes:
        return self._hasher.digest()

    def b64digest(self) -> str:
        return base64.b64encode(self._hasher.digest()).decode('ascii')


def digest_archive(data: bytes) -> str:
    """整包摘要：SHA-512 的 base64 编码"""
    calculator = HashCalculator(ARCHIVE_ALGORITHM)
    calculator.update(data)
    return calculator.b64digest()


def digest_file(data: bytes) -> str:
    """单文件摘要：MD5 的十六进制表示"""
    calculator = HashCalculator(FILE_ALGORITHM)
    calculator.update(data)
    return calculator.hexdigest()


def digest_archive_file(path: Path) -> str:
    """对磁盘上的归档文件计算整包摘要"""
    calculator = HashCalculator(ARCHIVE_ALGORITHM)
    calculator.update_from_file(path)
    return calculator.b64digest()


def digest_file_path(path: Path) -> str:
    """对磁盘上的单个文件计算 MD5"""
    calculator = HashCalculator(FILE_ALGORITHM)
    calculator.update_from_file(path)
    return calculator.hexdigest()


def digest_entries(entries: Iterable[FileEntry], workers: int = 1) -> Dict[str, str]:
    """计算每个文件的 MD5

    Args:
        entries: 遍历得到的文件
        workers: 并发线程数，1 表示顺序计算

    Returns:
        Dict[str, str]: 相对路径 -> MD5，键按遍历顺序插入
    """
    entries = list(entries)
    if workers <= 1 or len(entries) <= 1:
        return {entry.relative_path: digest_file_path(entry.absolute_path) for entry in entries}

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dh-hash") as executor:
        digests = list(executor.map(lambda e: digest_file_path(e.absolute_path), entries))
    return {entry.relative_path: digest for entry, digest in zip(entries, digests)}
