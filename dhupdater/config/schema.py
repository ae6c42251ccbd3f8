"""
配置 Schema 定义

使用 Pydantic 定义打包流水线的显式配置模型。排除模式、仓库标识等
原本来自进程环境变量的设置，统一在这里声明并验证。
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class ArchiverKind(str, Enum):
    """归档实现"""
    ZIPFILE = "zipfile"   # 进程内 zipfile，可复现
    ZIP_CLI = "zip-cli"   # 外部 zip 命令


class ExtractorKind(str, Enum):
    """二进制文本提取实现"""
    PRINTABLE = "printable"  # 纯 Python 可打印字符扫描
    STRINGS = "strings"      # 外部 strings 命令


# owner/name 形式的仓库标识
_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def split_pattern_string(raw: str) -> List[str]:
    """按 `;` 或 `,` 拆分排除模式字符串，去除空白和空项"""
    return [part.strip() for part in re.split(r"[;,]", raw) if part.strip()]


class UpdaterConfig(BaseModel):
    """dh-updater 主配置模型

    Attributes:
        exclude_patterns: 排除模式列表（`dir/**`、`*.ext` 或精确路径）
        repository_id: 仓库标识 owner/name，用于推导主发布地址
        server_url: 代码托管服务地址
        package_type: 包类型，目前只有 zip
        archiver: 归档实现
        compression_level: zip 压缩级别 0-9
        text_extractor: 版本文本提取实现
        hash_workers: 计算文件哈希的并发线程数
    """

    exclude_patterns: List[str] = Field(default_factory=list, description="排除模式列表")
    repository_id: Optional[str] = Field(None, description="仓库标识 owner/name")
    server_url: str = Field("https://github.com", description="代码托管服务地址")
    package_type: Literal["zip"] = Field("zip", description="包类型")
    archiver: ArchiverKind = Field(ArchiverKind.ZIPFILE, description="归档实现")
    compression_level: int = Field(9, description="zip 压缩级别", ge=0, le=9)
    text_extractor: ExtractorKind = Field(ExtractorKind.PRINTABLE, description="版本文本提取实现")
    hash_workers: int = Field(1, description="文件哈希并发线程数", ge=1, le=64)

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
        "str_strip_whitespace": True,
    }

    @field_validator("exclude_patterns", mode="before")
    @classmethod
    def validate_exclude_patterns(cls, v: Union[None, str, List[str]]) -> List[str]:
        """接受分隔符字符串或列表，统一为有序列表"""
        if v is None:
            return []
        if isinstance(v, str):
            return split_pattern_string(v)
        cleaned = []
        for item in v:
            if not isinstance(item, str):
                raise ValueError("排除模式必须是字符串")
            cleaned.extend(split_pattern_string(item))
        return cleaned

    @field_validator("repository_id")
    @classmethod
    def validate_repository_id(cls, v: Optional[str]) -> Optional[str]:
        """验证仓库标识格式，空字符串视为未设置"""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not _REPOSITORY_RE.match(v):
            raise ValueError("仓库标识必须是 owner/name 格式")
        return v

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("server_url 必须以 http:// 或 https:// 开头")
        return v.rstrip("/")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（枚举转为字符串）"""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpdaterConfig":
        """从字典创建配置实例"""
        return cls.model_validate(data)
