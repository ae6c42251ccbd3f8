"""
归档步骤模块

把过滤后的目录压缩为 zip 归档。
"""

from ...utils import format_size
from ...utils.logging import info, success, debug, LogStage
from dhupdater.build.build_context import BuildContext
from dhupdater.build.compressor import ArchiverFactory
from .build_step import BuildStep


class ArchiveStep(BuildStep):
    """归档步骤"""

    def __init__(self):
        super().__init__("archive", "创建 zip 归档")

    def get_progress_range(self) -> tuple[int, int]:
        return (15, 55)

    def execute(self, context: BuildContext) -> None:
        archiver = context.archive_creator or ArchiverFactory.create(
            context.config.archiver,
            context.config.compression_level,
        )

        info(f"创建归档: {context.zip_path}", stage=LogStage.ARCHIVE)
        debug(f"归档实现: {archiver.get_kind().value}, 源目录: {context.zip_dir}", stage=LogStage.ARCHIVE)
        context.report_progress("创建归档", self.get_progress_range()[0], "压缩中...")

        archiver.create_archive(
            context.zip_dir,
            context.zip_path,
            context.patterns,
            context.extra_exclusions,
        )

        archive_size = context.zip_path.stat().st_size
        context.build_stats['archive_size'] = archive_size

        success(f"归档完成: {format_size(archive_size)}", stage=LogStage.ARCHIVE)
        context.report_progress("创建归档", self.get_progress_range()[1], f"大小: {format_size(archive_size)}")
