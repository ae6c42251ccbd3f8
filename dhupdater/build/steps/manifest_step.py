"""
清单步骤模块

组装更新清单并写出 JSON/XML 两种格式。
"""

from ...utils.logging import info, success, LogStage
from dhupdater.build.build_context import BuildContext, BuildError
from dhupdater.build.manifest import ManifestBuilder, manifest_paths, release_url, write_manifest
from .build_step import BuildStep


class ManifestStep(BuildStep):
    """清单步骤"""

    def __init__(self):
        super().__init__("manifest", "生成更新清单")
        self.builder = ManifestBuilder()

    def get_progress_range(self) -> tuple[int, int]:
        return (85, 100)

    def execute(self, context: BuildContext) -> None:
        if context.version is None or context.archive_digest is None or context.file_digests is None:
            raise BuildError("清单所需的版本号或摘要尚未生成")

        primary_url = release_url(
            context.config.server_url,
            context.config.repository_id,
            context.version,
            context.zip_path.name,
        )
        if primary_url:
            info(f"发布地址: {primary_url}", stage=LogStage.MANIFEST)

        context.manifest = self.builder.build(
            context.version,
            context.archive_digest,
            context.file_digests,
            context.extra_urls,
            primary_url,
        )

        context.json_path, context.xml_path = manifest_paths(context.exe_path, context.manifest_dir)
        write_manifest(context.manifest, context.json_path, context.xml_path)

        success("已生成更新清单", stage=LogStage.MANIFEST)
        info(f"  JSON: {context.json_path}")
        info(f"  XML : {context.xml_path}")
        context.report_progress("生成清单", self.get_progress_range()[1], "完成")
