"""
配置加载器

负责从环境变量和可选的 YAML 文件加载配置并进行验证。
环境变量优先于文件中的同名设置。
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .schema import UpdaterConfig


# 环境变量 -> 配置字段
ENV_FIELDS = {
    "EXCLUDE_PATTERNS": "exclude_patterns",
    "GITHUB_REPOSITORY": "repository_id",
    "GITHUB_SERVER_URL": "server_url",
}


class ConfigError(Exception):
    """配置错误基类"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """格式化错误信息为人类可读的格式"""
        formatted = []
        for error in self.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')
            input_val = error.get('input', '')

            if loc:
                formatted.append(f"字段 '{loc}': {msg}")
                if input_val:
                    formatted.append(f"  输入值: {input_val}")
            else:
                formatted.append(f"根级别: {msg}")

        return "\n".join(formatted)

    def format_errors_json(self) -> str:
        """格式化错误信息为 JSON 格式"""
        return json.dumps(self.errors, ensure_ascii=False, indent=2, default=str)


class ConfigLoader:
    """配置加载器"""

    def __init__(self):
        self.yaml = YAML(typ="safe")

    def read_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """读取 YAML 配置文件为字典（不做验证）

        Raises:
            ConfigError: 文件不存在、格式不对或解析失败
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigError(f"配置文件不存在: {config_path}")

        if not config_path.is_file():
            raise ConfigError(f"配置路径不是文件: {config_path}")

        if config_path.suffix.lower() not in ['.yaml', '.yml']:
            raise ConfigError(f"配置文件必须是 .yaml 或 .yml 格式: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw_data = self.yaml.load(f)
        except YAMLError as e:
            raise ConfigError(f"YAML 解析错误: {e}") from e
        except OSError as e:
            raise ConfigError(f"文件读取错误: {e}") from e

        if raw_data is None:
            return {}

        if not isinstance(raw_data, dict):
            raise ConfigError("配置文件根级别必须是对象/字典格式")

        return dict(raw_data)

    def read_env(self, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """从环境变量读取已设置且非空的配置项"""
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for env_name, field_name in ENV_FIELDS.items():
            value = environ.get(env_name)
            if value is not None and value.strip():
                data[field_name] = value
        return data

    def load_from_dict(self, data: Dict[str, Any]) -> UpdaterConfig:
        """从字典加载配置

        Raises:
            ConfigValidationError: 配置验证错误
        """
        try:
            return UpdaterConfig.from_dict(data)
        except ValidationError as e:
            raise ConfigValidationError("配置验证失败", list(e.errors())) from e

    def load_from_file(self, config_path: Union[str, Path]) -> UpdaterConfig:
        """只从 YAML 文件加载配置"""
        return self.load_from_dict(self.read_file(config_path))

    def load_from_env(self, environ: Optional[Mapping[str, str]] = None) -> UpdaterConfig:
        """只从环境变量加载配置"""
        return self.load_from_dict(self.read_env(environ))

    def load(
        self,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> UpdaterConfig:
        """合并加载配置：文件 < 环境变量 < 显式覆盖

        Args:
            config_path: 可选的 YAML 配置文件
            environ: 环境变量映射，默认使用 os.environ
            overrides: 命令行等显式覆盖项（值为 None 的项忽略）

        Returns:
            UpdaterConfig: 验证后的配置实例
        """
        data: Dict[str, Any] = {}
        if config_path:
            data.update(self.read_file(config_path))
        data.update(self.read_env(environ))
        if overrides:
            data.update({k: v for k, v in overrides.items() if v is not None})
        return self.load_from_dict(data)


# 全局加载器实例
config_loader = ConfigLoader()


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> UpdaterConfig:
    """便捷函数：加载配置"""
    return config_loader.load(config_path, environ, overrides)
