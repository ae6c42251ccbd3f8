"""
构建上下文模块

定义打包流水线中的共享数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from ..config.schema import UpdaterConfig

if TYPE_CHECKING:
    from .collector import FileEntry
    from .compressor import ArchiveCreator
    from .manifest import PackageManifest
    from .patterns import ExclusionPattern
    from .version import TextExtractor

# 进度回调类型: (阶段, 当前, 总数, 消息)
ProgressCallback = Callable[[str, int, int, str], None]


class BuildError(Exception):
    """打包错误基类"""
    pass


class InputNotFoundError(BuildError):
    """输入的二进制文件或目录不存在"""
    pass


class InputNotADirectoryError(BuildError):
    """待打包路径不是目录"""
    pass


@dataclass
class BuildContext:
    """构建上下文，包含一次打包运行的输入和中间结果"""
    config: UpdaterConfig
    exe_path: Path
    zip_dir: Path
    zip_path: Path
    manifest_dir: Path
    extra_urls: List[str] = field(default_factory=list)
    progress_callback: Optional[ProgressCallback] = None

    # 可替换的外部协作者，未设置时按配置创建
    text_extractor: Optional['TextExtractor'] = None
    archive_creator: Optional['ArchiveCreator'] = None

    # 构建过程中生成的数据
    patterns: Tuple['ExclusionPattern', ...] = ()
    extra_exclusions: Tuple[str, ...] = ()
    version: Optional[str] = None
    files: Optional[List['FileEntry']] = None
    archive_digest: Optional[str] = None
    file_digests: Optional[Dict[str, str]] = None
    manifest: Optional['PackageManifest'] = None
    json_path: Optional[Path] = None
    xml_path: Optional[Path] = None

    # 统计信息
    build_stats: Dict[str, Any] = None  # type: ignore

    def __post_init__(self):
        if self.build_stats is None:
            self.build_stats = {
                'start_time': 0,
                'end_time': 0,
                'total_files': 0,
                'total_size': 0,
                'archive_size': 0,
            }

    def report_progress(self, stage: str, current: int, message: str = "") -> None:
        """向进度回调报告百分比进度"""
        if self.progress_callback:
            self.progress_callback(stage, current, 100, message)
