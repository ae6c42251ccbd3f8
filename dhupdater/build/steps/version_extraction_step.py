"""
版本提取步骤模块

从二进制文件读取四段式版本号，清单文件名和发布地址都依赖它。
"""

from ...utils.logging import info, success, LogStage
from dhupdater.build.build_context import BuildContext
from dhupdater.build.version import VersionExtractor, create_text_extractor
from .build_step import BuildStep


class VersionExtractionStep(BuildStep):
    """版本提取步骤"""

    def __init__(self):
        super().__init__("version", "读取二进制版本号")

    def get_progress_range(self) -> tuple[int, int]:
        return (5, 15)

    def execute(self, context: BuildContext) -> None:
        info(f"读取版本: {context.exe_path}", stage=LogStage.VERSION)

        extractor = context.text_extractor or create_text_extractor(context.config.text_extractor)
        context.version = VersionExtractor(extractor).extract(context.exe_path)

        success(f"版本: {context.version}", stage=LogStage.VERSION)
        context.report_progress("读取版本", self.get_progress_range()[1], context.version)
