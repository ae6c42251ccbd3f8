"""
输入校验步骤模块

解析输入路径，确认二进制文件和待打包目录存在，并准备排除设置。
"""

from ...utils.logging import info, debug, LogStage
from ...utils.paths import expand_path
from dhupdater.build.build_context import BuildContext, InputNotFoundError, InputNotADirectoryError
from dhupdater.build.compressor import archive_self_exclusion
from dhupdater.build.patterns import parse_patterns
from .build_step import BuildStep


class InputValidationStep(BuildStep):
    """输入校验步骤"""

    def __init__(self):
        super().__init__("validate", "校验输入路径")

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 5)

    def execute(self, context: BuildContext) -> None:
        context.exe_path = expand_path(context.exe_path)
        context.zip_dir = expand_path(context.zip_dir)
        context.zip_path = expand_path(context.zip_path)
        context.manifest_dir = expand_path(context.manifest_dir)

        if not context.exe_path.exists():
            raise InputNotFoundError(f"二进制文件不存在: {context.exe_path}")
        if not context.zip_dir.exists():
            raise InputNotFoundError(f"待打包目录不存在: {context.zip_dir}")
        if not context.zip_dir.is_dir():
            raise InputNotADirectoryError(f"待打包路径不是目录: {context.zip_dir}")

        context.patterns = parse_patterns(context.config.exclude_patterns)
        info(f"排除模式: {', '.join(str(p) for p in context.patterns) or '(无)'}", stage=LogStage.INIT)

        # 归档文件位于待打包目录内时，把它从自身内容中排除
        self_relative = archive_self_exclusion(context.zip_dir, context.zip_path)
        if self_relative:
            context.extra_exclusions = (self_relative,)
            info(f"自动排除归档文件自身: {self_relative}", stage=LogStage.INIT)

        debug(f"二进制文件: {context.exe_path}", stage=LogStage.INIT)
        debug(f"待打包目录: {context.zip_dir}", stage=LogStage.INIT)
        debug(f"归档输出: {context.zip_path}", stage=LogStage.INIT)
        context.report_progress("校验输入", self.get_progress_range()[1], "输入路径有效")
