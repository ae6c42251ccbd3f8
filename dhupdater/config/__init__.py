"""配置和 Schema 模块

提供环境变量与 YAML 配置的加载和验证功能。
"""

from .schema import UpdaterConfig, ArchiverKind, ExtractorKind, split_pattern_string
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    load_config,
    config_loader,
)

__all__ = [
    # 主要类
    "UpdaterConfig",
    "ArchiverKind",
    "ExtractorKind",
    "ConfigLoader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "load_config",
    "split_pattern_string",

    # 单例
    "config_loader",
]
