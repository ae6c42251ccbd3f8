"""打包服务模块

提供更新包打包和清单生成的核心功能。
"""

from .build_context import BuildError, InputNotFoundError, InputNotADirectoryError
from .builder import Builder, PipelineResult, OUTPUT_TAG, parse_output_line
from .collector import FileEntry, TreeWalker, TraversalError, walk
from .compressor import (
    ArchiveCreator,
    ArchiverFactory,
    ArchiveError,
    ZipArchiveCreator,
    ZipCliArchiveCreator,
)
from .hasher import (
    HashCalculator,
    HashingError,
    digest_archive,
    digest_file,
    digest_entries,
)
from .manifest import (
    ManifestBuilder,
    ManifestWriteError,
    PackageManifest,
    from_json,
    from_xml,
    to_json,
    to_xml,
)
from .patterns import ExclusionPattern, PatternKind, is_excluded, parse_patterns
from .version import (
    ExtractionError,
    PrintableTextExtractor,
    StringsTextExtractor,
    TextExtractor,
    VersionExtractor,
    VersionNotFoundError,
    extract_version,
)

__all__ = [
    # 主构建器
    "Builder",
    "PipelineResult",
    "OUTPUT_TAG",
    "parse_output_line",

    # 异常
    "BuildError",
    "InputNotFoundError",
    "InputNotADirectoryError",
    "TraversalError",
    "ArchiveError",
    "HashingError",
    "ManifestWriteError",
    "ExtractionError",
    "VersionNotFoundError",

    # 排除模式与遍历
    "ExclusionPattern",
    "PatternKind",
    "is_excluded",
    "parse_patterns",
    "FileEntry",
    "TreeWalker",
    "walk",

    # 归档
    "ArchiveCreator",
    "ArchiverFactory",
    "ZipArchiveCreator",
    "ZipCliArchiveCreator",

    # 哈希
    "HashCalculator",
    "digest_archive",
    "digest_file",
    "digest_entries",

    # 清单
    "ManifestBuilder",
    "PackageManifest",
    "from_json",
    "from_xml",
    "to_json",
    "to_xml",

    # 版本
    "TextExtractor",
    "PrintableTextExtractor",
    "StringsTextExtractor",
    "VersionExtractor",
    "extract_version",
]
