"""
构建管道模块

使用管道模式协调打包步骤的执行：
输入校验 -> 版本提取 -> 归档 -> 哈希 -> 清单。
"""

import time
from pathlib import Path
from typing import List, Optional, Sequence

from ..config.schema import UpdaterConfig
from ..utils.logging import info, success, error, debug, LogStage
from .build_context import BuildContext, BuildError, ProgressCallback
from .compressor import ArchiveCreator
from .steps.build_step import BuildStep
from .steps.input_validation_step import InputValidationStep
from .steps.version_extraction_step import VersionExtractionStep
from .steps.archive_step import ArchiveStep
from .steps.hashing_step import HashingStep
from .steps.manifest_step import ManifestStep
from .version import TextExtractor


class BuildPipeline:
    """构建管道，负责协调打包步骤的执行"""

    def __init__(self):
        self._steps: List[BuildStep] = []
        self._init_default_steps()

    def _init_default_steps(self):
        self._steps = [
            InputValidationStep(),
            VersionExtractionStep(),
            ArchiveStep(),
            HashingStep(),
            ManifestStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        return self._steps.copy()

    def execute(
        self,
        config: UpdaterConfig,
        exe_path: Path,
        zip_dir: Path,
        zip_path: Path,
        extra_urls: Sequence[str] = (),
        manifest_dir: Optional[Path] = None,
        progress_callback: Optional[ProgressCallback] = None,
        text_extractor: Optional[TextExtractor] = None,
        archive_creator: Optional[ArchiveCreator] = None,
    ) -> BuildContext:
        """执行构建管道

        Args:
            config: 配置对象
            exe_path: 带版本信息的二进制文件
            zip_dir: 待打包目录
            zip_path: 归档输出路径
            extra_urls: 额外下载地址
            manifest_dir: 清单输出目录，默认当前工作目录
            progress_callback: 进度回调函数
            text_extractor: 替换默认的文本提取器
            archive_creator: 替换默认的归档器

        Returns:
            BuildContext: 构建上下文，包含所有构建结果

        Raises:
            BuildError: 任一步骤失败（保留具体的错误类型）
        """
        context = BuildContext(
            config=config,
            exe_path=Path(exe_path),
            zip_dir=Path(zip_dir),
            zip_path=Path(zip_path),
            manifest_dir=Path(manifest_dir) if manifest_dir is not None else Path.cwd(),
            extra_urls=list(extra_urls),
            progress_callback=progress_callback,
            text_extractor=text_extractor,
            archive_creator=archive_creator,
        )

        context.build_stats['start_time'] = time.time()

        try:
            info(f"开始打包: {context.zip_dir}", stage=LogStage.INIT)
            debug(f"配置: archiver={config.archiver.value} extractor={config.text_extractor.value} "
                  f"workers={config.hash_workers} repository={config.repository_id or '-'}", stage=LogStage.INIT)

            for step in self._steps:
                debug(f"执行步骤: {step.description}", stage=LogStage.INIT)
                step.execute(context)

            context.build_stats['end_time'] = time.time()
            build_time = context.build_stats['end_time'] - context.build_stats['start_time']

            success(f"打包完成: {context.zip_path}", stage=LogStage.DONE)
            info(f"耗时: {build_time:.1f}秒")
            return context

        except BuildError as e:
            context.build_stats['end_time'] = time.time()
            error(f"打包失败 [{type(e).__name__}]: {e}", stage=LogStage.DONE)
            raise

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
