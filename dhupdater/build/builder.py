"""
构建器主类

负责整个打包流程的协调，并把构建上下文转换为对外的结果记录。
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config.schema import UpdaterConfig
from .build_context import BuildContext, ProgressCallback
from .build_pipeline import BuildPipeline
from .compressor import ArchiveCreator
from .version import TextExtractor


# 标准输出中结果行的前缀，供下游流程解析
OUTPUT_TAG = "UPDATER_OUTPUT_JSON:"


@dataclass(frozen=True)
class PipelineResult:
    """打包结果"""
    version: str
    exe_path: Path
    zip_dir: Path
    zip_path: Path
    json_path: Path
    xml_path: Path
    sha512: str
    file_md5: Mapping[str, str] = field(default_factory=dict)
    urls: Tuple[str, ...] = ()

    @classmethod
    def from_context(cls, context: BuildContext) -> "PipelineResult":
        manifest = context.manifest
        return cls(
            version=manifest.version,
            exe_path=context.exe_path,
            zip_dir=context.zip_dir,
            zip_path=context.zip_path,
            json_path=context.json_path,
            xml_path=context.xml_path,
            sha512=manifest.sha512,
            file_md5=dict(manifest.file_md5),
            urls=tuple(manifest.urls),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'exe_path': str(self.exe_path),
            'zip_dir': str(self.zip_dir),
            'zip_path': str(self.zip_path),
            'json_path': str(self.json_path),
            'xml_path': str(self.xml_path),
            'sha512': self.sha512,
            'file_md5': dict(self.file_md5),
            'urls': list(self.urls),
        }

    def to_output_line(self) -> str:
        """单行结果记录: UPDATER_OUTPUT_JSON:<紧凑 JSON>"""
        return OUTPUT_TAG + json.dumps(self.to_dict(), ensure_ascii=False, separators=(',', ':'))


def parse_output_line(line: str) -> Dict[str, Any]:
    """解析结果行

    Raises:
        ValueError: 行不以结果前缀开头
    """
    line = line.strip()
    if not line.startswith(OUTPUT_TAG):
        raise ValueError(f"结果行必须以 {OUTPUT_TAG} 开头")
    return json.loads(line[len(OUTPUT_TAG):])


class Builder:
    """更新包构建器

    使用管道模式协调打包步骤，提供统一的构建接口。
    外部协作者（文本提取、归档）可以注入，便于在没有外部工具的环境中测试。
    """

    def __init__(
        self,
        config: Optional[UpdaterConfig] = None,
        text_extractor: Optional[TextExtractor] = None,
        archive_creator: Optional[ArchiveCreator] = None,
    ):
        self.config = config or UpdaterConfig()
        self.text_extractor = text_extractor
        self.archive_creator = archive_creator
        self.pipeline = BuildPipeline()

    def build(
        self,
        exe_path: Path,
        zip_dir: Path,
        zip_path: Path,
        extra_urls: Sequence[str] = (),
        manifest_dir: Optional[Path] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> PipelineResult:
        """打包并生成更新清单

        Raises:
            BuildError: 打包失败
        """
        context = self.pipeline.execute(
            self.config,
            exe_path,
            zip_dir,
            zip_path,
            extra_urls=extra_urls,
            manifest_dir=manifest_dir,
            progress_callback=progress_callback,
            text_extractor=self.text_extractor,
            archive_creator=self.archive_creator,
        )
        return PipelineResult.from_context(context)

    def get_pipeline(self) -> BuildPipeline:
        """获取构建管道，用于自定义构建流程"""
        return self.pipeline

    def validate_build_pipeline(self) -> List[str]:
        return self.pipeline.validate_pipeline()
