"""
哈希步骤模块

计算整包 SHA-512，并对与归档相同的目录和排除设置逐文件计算 MD5。
"""

from ...utils import format_size
from ...utils.logging import info, success, debug, LogStage
from dhupdater.build.build_context import BuildContext
from dhupdater.build.collector import TreeWalker
from dhupdater.build.hasher import digest_archive_file, digest_entries
from .build_step import BuildStep


class HashingStep(BuildStep):
    """哈希步骤"""

    def __init__(self):
        super().__init__("hash", "计算整包与逐文件摘要")

    def get_progress_range(self) -> tuple[int, int]:
        return (55, 85)

    def execute(self, context: BuildContext) -> None:
        context.archive_digest = digest_archive_file(context.zip_path)
        info(f"SHA512 (base64): {context.archive_digest[:32]}...", stage=LogStage.HASH)

        walker = TreeWalker(context.patterns, context.extra_exclusions)
        context.files = walker.walk(context.zip_dir)
        stats = walker.get_statistics()
        context.build_stats['total_files'] = stats['total_files']
        context.build_stats['total_size'] = stats['total_size']

        for pruned in walker.pruned_directories:
            debug(f"跳过目录: {pruned}/", stage=LogStage.COLLECT)
        for link in walker.skipped_symlinks:
            debug(f"跳过符号链接: {link}", stage=LogStage.COLLECT)

        progress_start, progress_end = self.get_progress_range()
        context.report_progress("计算摘要", progress_start + (progress_end - progress_start) // 3,
                                f"{len(context.files)} 个文件")

        context.file_digests = digest_entries(context.files, context.config.hash_workers)

        success(f"已计算 {len(context.file_digests)} 个文件的 MD5", stage=LogStage.HASH)
        info(f"  总大小: {format_size(stats['total_size'])}")
        info(f"  排除文件: {stats['excluded_files']}, 跳过目录: {stats['pruned_directories']}")
        context.report_progress("计算摘要", progress_end, "摘要完成")
