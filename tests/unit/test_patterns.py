"""
排除模式单元测试

测试模式解析、三类匹配语义、顺序无关性和目录探测规则。
"""

import itertools

import pytest

from dhupdater.build.patterns import (
    DIRECTORY_PLACEHOLDER,
    ExclusionPattern,
    PatternKind,
    is_directory_excluded,
    is_excluded,
    parse_patterns,
)


class TestExclusionPatternParse:
    """ExclusionPattern.parse 测试"""

    def test_directory_prefix(self):
        """测试目录前缀模式"""
        pattern = ExclusionPattern.parse("bin/obj/**")
        assert pattern.kind is PatternKind.DIRECTORY_PREFIX
        assert pattern.value == "bin/obj"
        assert pattern.source == "bin/obj/**"

    def test_extension_suffix_keeps_dot(self):
        """测试扩展名模式保留点号"""
        pattern = ExclusionPattern.parse("*.pdb")
        assert pattern.kind is PatternKind.EXTENSION_SUFFIX
        assert pattern.value == ".pdb"

    def test_exact_path(self):
        """测试精确路径模式"""
        pattern = ExclusionPattern.parse("config/local.json")
        assert pattern.kind is PatternKind.EXACT_PATH
        assert pattern.value == "config/local.json"

    def test_backslashes_normalized(self):
        """测试反斜杠统一为正斜杠"""
        pattern = ExclusionPattern.parse("logs\\old\\**")
        assert pattern.kind is PatternKind.DIRECTORY_PREFIX
        assert pattern.value == "logs/old"

    def test_whitespace_trimmed(self):
        """测试去除首尾空白"""
        assert ExclusionPattern.parse("  *.log ").value == ".log"

    def test_empty_rejected(self):
        """测试空模式被拒绝"""
        with pytest.raises(ValueError):
            ExclusionPattern.parse("   ")

    def test_immutable(self):
        """测试模式不可变"""
        pattern = ExclusionPattern.parse("*.pdb")
        with pytest.raises(Exception):
            pattern.value = ".exe"  # type: ignore[misc]


class TestParsePatterns:
    """parse_patterns 测试"""

    def test_semicolon_and_comma(self):
        """测试分号和逗号分隔"""
        patterns = parse_patterns("*.pdb;b/obj/**, .git/** ;notes.txt")
        assert [p.source for p in patterns] == ["*.pdb", "b/obj/**", ".git/**", "notes.txt"]

    def test_empty_entries_dropped(self):
        """测试丢弃空项"""
        assert parse_patterns(";;, ;") == ()
        assert parse_patterns("") == ()
        assert parse_patterns(None) == ()

    def test_iterable_input(self):
        """测试序列输入"""
        existing = ExclusionPattern.parse("*.log")
        patterns = parse_patterns(["*.pdb;*.tmp", existing])
        assert [p.source for p in patterns] == ["*.pdb", "*.tmp", "*.log"]

    def test_returns_tuple(self):
        """测试返回不可变元组"""
        assert isinstance(parse_patterns("*.pdb"), tuple)


class TestIsExcluded:
    """is_excluded 测试"""

    def test_directory_prefix_semantics(self):
        """测试目录前缀匹配"""
        patterns = parse_patterns("d/**")
        assert is_excluded("d", patterns) is True
        assert is_excluded("d/x", patterns) is True
        assert is_excluded("d/x/y/z.bin", patterns) is True
        assert is_excluded("dd/x", patterns) is False
        assert is_excluded("x/d", patterns) is False

    def test_extension_semantics(self):
        """测试扩展名匹配"""
        patterns = parse_patterns("*.pdb")
        assert is_excluded("a/b/c.pdb", patterns) is True
        assert is_excluded("c.pdb", patterns) is True
        assert is_excluded("a/b/c.pdbx", patterns) is False
        assert is_excluded("a/b/cpdb", patterns) is False

    def test_exact_semantics(self):
        """测试精确路径匹配"""
        patterns = parse_patterns("app/settings.json")
        assert is_excluded("app/settings.json", patterns) is True
        assert is_excluded("app/settings.json.bak", patterns) is False
        assert is_excluded("other/app/settings.json", patterns) is False

    def test_windows_separators_in_path(self):
        """测试路径中的反斜杠"""
        patterns = parse_patterns("b/obj/**")
        assert is_excluded("b\\obj\\x.dll", patterns) is True

    def test_no_patterns(self):
        """测试无模式时不排除"""
        assert is_excluded("anything", ()) is False

    def test_order_invariance(self):
        """测试结果与模式顺序无关"""
        sources = ["*.pdb", "b/obj/**", "readme.md", "*.log", "cache/**"]
        paths = [
            "a.txt", "b/c.pdb", "b/obj/x.dll", "b/obj", "readme.md",
            "docs/readme.md", "x.log", "cache", "cachex/a", "deep/cache/a",
        ]
        parsed = parse_patterns(sources)
        expected = {p: is_excluded(p, parsed) for p in paths}

        for ordering in itertools.permutations(parsed):
            for path in paths:
                assert is_excluded(path, ordering) == expected[path]


class TestIsDirectoryExcluded:
    """目录探测规则测试"""

    def test_placeholder_name(self):
        """测试探测子路径名称"""
        assert DIRECTORY_PLACEHOLDER == "dummy"

    def test_directory_prefix_prunes(self):
        """测试目录前缀模式剪枝"""
        patterns = parse_patterns("b/obj/**")
        assert is_directory_excluded("b/obj", patterns) is True
        assert is_directory_excluded("b/obj/nested", patterns) is True
        assert is_directory_excluded("b", patterns) is False
        assert is_directory_excluded("b/objx", patterns) is False

    def test_extension_does_not_prune(self):
        """测试扩展名模式不剪枝目录"""
        patterns = parse_patterns("*.pdb")
        assert is_directory_excluded("symbols.pdb", patterns) is False

    def test_consistent_with_descendants(self):
        """测试目录判定与子孙文件一致"""
        patterns = parse_patterns("out/**")
        for directory in ["out", "out/a", "outer", "x/out"]:
            descendant = directory + "/file.bin"
            assert is_directory_excluded(directory, patterns) == is_excluded(descendant, patterns)
