"""
排除模式

一个小型 glob 子集，模式在加载时一次性解析为三种类型之一：
    - `dir/**`  目录前缀：匹配目录本身及其下所有路径
    - `*.ext`   扩展名后缀：匹配任意以该扩展名结尾的路径
    - 其他      精确路径：与相对路径完全相等

匹配结果是各模式独立判定的并集，与模式顺序无关。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, Tuple, Union

from ..config.schema import split_pattern_string
from ..utils.paths import to_posix


# 判断目录是否整体剪枝时使用的虚拟子路径
DIRECTORY_PLACEHOLDER = "dummy"


class PatternKind(str, Enum):
    """排除模式类型"""
    DIRECTORY_PREFIX = "directory_prefix"
    EXTENSION_SUFFIX = "extension_suffix"
    EXACT_PATH = "exact_path"


@dataclass(frozen=True)
class ExclusionPattern:
    """已解析的排除模式"""
    kind: PatternKind
    value: str   # 目录前缀 / 带点的扩展名 / 精确路径
    source: str  # 原始模式文本（已统一为正斜杠）

    @classmethod
    def parse(cls, text: str) -> "ExclusionPattern":
        """解析单个模式文本

        Raises:
            ValueError: 模式为空
        """
        source = to_posix(text.strip())
        if not source:
            raise ValueError("排除模式不能为空")

        if source.endswith("/**"):
            return cls(PatternKind.DIRECTORY_PREFIX, source[:-3], source)
        if source.startswith("*."):
            return cls(PatternKind.EXTENSION_SUFFIX, source[1:], source)
        return cls(PatternKind.EXACT_PATH, source, source)

    def matches(self, relative_path: str) -> bool:
        """判断一个已规范化的相对路径是否命中本模式"""
        if self.kind is PatternKind.DIRECTORY_PREFIX:
            return relative_path == self.value or relative_path.startswith(self.value + "/")
        if self.kind is PatternKind.EXTENSION_SUFFIX:
            return relative_path.endswith(self.value)
        return relative_path == self.value

    def __str__(self) -> str:
        return self.source


PatternInput = Union[str, Iterable[Union[str, ExclusionPattern]], None]


def parse_patterns(raw: PatternInput) -> Tuple[ExclusionPattern, ...]:
    """解析排除模式

    Args:
        raw: `;`/`,` 分隔的字符串，或字符串/已解析模式的序列

    Returns:
        Tuple[ExclusionPattern, ...]: 不可变的模式元组，空项已丢弃
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        return tuple(ExclusionPattern.parse(p) for p in split_pattern_string(raw))

    patterns: List[ExclusionPattern] = []
    for item in raw:
        if isinstance(item, ExclusionPattern):
            patterns.append(item)
        else:
            patterns.extend(ExclusionPattern.parse(p) for p in split_pattern_string(item))
    return tuple(patterns)


def is_excluded(relative_path: str, patterns: Sequence[ExclusionPattern]) -> bool:
    """检查相对路径是否被排除

    Args:
        relative_path: 相对路径，任意分隔符
        patterns: 已解析的排除模式

    Returns:
        bool: 任一模式命中即为 True
    """
    path = to_posix(relative_path)
    return any(pattern.matches(path) for pattern in patterns)


def is_directory_excluded(relative_dir: str, patterns: Sequence[ExclusionPattern]) -> bool:
    """检查目录是否应整体剪枝

    用虚拟子路径探测，目录前缀模式对它的判定与对任意真实子孙路径一致，
    因此无需枚举目录内容即可跳过整棵子树。
    """
    return is_excluded(to_posix(relative_dir) + "/" + DIRECTORY_PLACEHOLDER, patterns)
