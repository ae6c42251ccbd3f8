"""
dh-updater - 更新包打包与清单生成工具

Packages a build directory into a versioned zip archive and emits
update metadata (JSON/XML) for a self-update client.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.schema import UpdaterConfig
from .build.builder import Builder, PipelineResult

__all__ = ["UpdaterConfig", "Builder", "PipelineResult", "__version__"]
