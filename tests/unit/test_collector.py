"""
目录遍历单元测试

测试文件遍历、排除规则、额外排除集和错误处理。
"""

import os
import sys
from pathlib import Path

import pytest

from dhupdater.build.collector import FileEntry, TraversalError, TreeWalker, walk
from dhupdater.build.patterns import parse_patterns


def _make_tree(root: Path) -> None:
    (root / "a.txt").write_text("alpha")
    (root / "b").mkdir()
    (root / "b" / "c.pdb").write_bytes(b"\x00symbols")
    (root / "b" / "obj").mkdir()
    (root / "b" / "obj" / "x.o").write_bytes(b"obj")
    (root / "b" / "obj" / "deep").mkdir()
    (root / "b" / "obj" / "deep" / "y.o").write_bytes(b"obj2")


def _symlink_or_skip(target: Path, link: Path, target_is_directory: bool = False) -> None:
    try:
        os.symlink(target, link, target_is_directory=target_is_directory)
    except (OSError, NotImplementedError) as e:
        pytest.skip(f"当前平台无法创建符号链接: {e}")


def _undecodable_name_or_skip(directory: Path) -> Path:
    if sys.platform != "linux":
        pytest.skip("仅 Linux 允许任意字节文件名")
    path = directory / os.fsdecode(b"bad\xff.txt")
    try:
        path.write_bytes(b"x")
    except (OSError, UnicodeError) as e:
        pytest.skip(f"文件系统不接受该文件名: {e}")
    return path


class TestFileEntry:
    """FileEntry 测试"""

    def test_to_dict(self, tmp_path):
        """测试 FileEntry 转字典"""
        entry = FileEntry(absolute_path=tmp_path / "a.txt", relative_path="a.txt")
        data = entry.to_dict()
        assert data["path"] == "a.txt"
        assert data["absolute_path"] == str(tmp_path / "a.txt")


class TestWalk:
    """walk 测试"""

    def test_scenario_pdb_and_obj_excluded(self, tmp_path):
        """测试 *.pdb;b/obj/** 下只剩 a.txt"""
        _make_tree(tmp_path)

        entries = walk(tmp_path, parse_patterns("*.pdb;b/obj/**"))

        assert [e.relative_path for e in entries] == ["a.txt"]
        assert entries[0].absolute_path == tmp_path / "a.txt"

    def test_no_patterns_yields_all_files(self, tmp_path):
        """测试无排除模式时返回全部文件"""
        _make_tree(tmp_path)

        entries = walk(tmp_path)

        assert sorted(e.relative_path for e in entries) == [
            "a.txt", "b/c.pdb", "b/obj/deep/y.o", "b/obj/x.o",
        ]

    def test_relative_paths_use_forward_slash(self, tmp_path):
        """测试相对路径使用正斜杠"""
        _make_tree(tmp_path)
        for entry in walk(tmp_path):
            assert "\\" not in entry.relative_path

    def test_each_file_once(self, tmp_path):
        """测试每个文件只出现一次"""
        _make_tree(tmp_path)
        relative = [e.relative_path for e in walk(tmp_path)]
        assert len(relative) == len(set(relative))

    def test_deterministic_order(self, tmp_path):
        """测试遍历顺序稳定"""
        _make_tree(tmp_path)
        (tmp_path / "z.txt").write_text("z")
        (tmp_path / "m.txt").write_text("m")

        first = [e.relative_path for e in walk(tmp_path)]
        second = [e.relative_path for e in walk(tmp_path)]
        assert first == second

    def test_extra_exclusions_skip_file(self, tmp_path):
        """测试额外排除集跳过文件"""
        _make_tree(tmp_path)
        (tmp_path / "release.zip").write_bytes(b"PK")

        entries = walk(tmp_path, parse_patterns("b/**"), extra_exclusions=["release.zip"])

        assert [e.relative_path for e in entries] == ["a.txt"]

    def test_extra_exclusions_skip_directory(self, tmp_path):
        """测试额外排除集跳过目录"""
        _make_tree(tmp_path)

        entries = walk(tmp_path, extra_exclusions=["b"])

        assert [e.relative_path for e in entries] == ["a.txt"]

    def test_extra_exclusions_are_exact(self, tmp_path):
        """测试额外排除集按精确路径匹配"""
        _make_tree(tmp_path)

        entries = walk(tmp_path, extra_exclusions=["b/c"])

        assert "b/c.pdb" in [e.relative_path for e in entries]

    def test_exact_pattern(self, tmp_path):
        """测试精确路径模式"""
        _make_tree(tmp_path)

        entries = walk(tmp_path, parse_patterns("b/obj/x.o"))

        assert "b/obj/x.o" not in [e.relative_path for e in entries]
        assert "b/obj/deep/y.o" in [e.relative_path for e in entries]

    def test_empty_directory(self, tmp_path):
        """测试空目录"""
        assert walk(tmp_path) == []

    def test_missing_root(self, tmp_path):
        """测试根目录不存在"""
        with pytest.raises(TraversalError):
            walk(tmp_path / "missing")

    def test_root_is_file(self, tmp_path):
        """测试根路径是文件"""
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        with pytest.raises(TraversalError):
            walk(file_path)


class TestSymlinks:
    """符号链接处理测试"""

    def test_link_to_ancestor_does_not_loop(self, tmp_path):
        """测试指向祖先目录的链接不会造成无限递归"""
        app = tmp_path / "app"
        app.mkdir()
        _make_tree(app)
        _symlink_or_skip(app, app / "loop", target_is_directory=True)

        entries = walk(app)

        assert sorted(e.relative_path for e in entries) == [
            "a.txt", "b/c.pdb", "b/obj/deep/y.o", "b/obj/x.o",
        ]

    def test_link_to_sibling_not_duplicated(self, tmp_path):
        """测试指向兄弟目录的链接不会重复打包"""
        _make_tree(tmp_path)
        _symlink_or_skip(tmp_path / "b", tmp_path / "b_alias", target_is_directory=True)

        relative = [e.relative_path for e in walk(tmp_path)]

        assert not any(path.startswith("b_alias") for path in relative)
        assert len(relative) == 4

    def test_file_link_skipped(self, tmp_path):
        """测试文件符号链接被跳过并计入统计"""
        _make_tree(tmp_path)
        _symlink_or_skip(tmp_path / "a.txt", tmp_path / "a_link.txt")

        walker = TreeWalker()
        entries = walker.walk(tmp_path)

        assert "a_link.txt" not in [e.relative_path for e in entries]
        assert walker.skipped_symlinks == ["a_link.txt"]
        assert walker.get_statistics()["skipped_symlinks"] == 1


class TestUndecodableNames:
    """非 UTF-8 文件名测试"""

    def test_included_file_raises(self, tmp_path):
        """测试无法编码为 UTF-8 的文件名报遍历错误"""
        _undecodable_name_or_skip(tmp_path)

        with pytest.raises(TraversalError, match="UTF-8"):
            walk(tmp_path)

    def test_excluded_file_ignored(self, tmp_path):
        """测试被排除的非 UTF-8 文件名不影响遍历"""
        _undecodable_name_or_skip(tmp_path)
        (tmp_path / "ok.txt").write_text("ok")

        entries = walk(tmp_path, parse_patterns("*.txt"), extra_exclusions=())
        assert entries == []


class TestTreeWalker:
    """TreeWalker 统计测试"""

    def test_statistics(self, tmp_path):
        """测试遍历统计信息"""
        _make_tree(tmp_path)

        walker = TreeWalker(parse_patterns("*.pdb;b/obj/**"))
        walker.walk(tmp_path)

        stats = walker.get_statistics()
        assert stats["total_files"] == 1
        assert stats["total_size"] == len("alpha")
        assert stats["excluded_files"] == 1
        assert stats["pruned_directories"] == 1
        assert stats["skipped_symlinks"] == 0
        assert walker.pruned_directories == ["b/obj"]

    def test_pruned_directory_not_descended(self, tmp_path, monkeypatch):
        """测试被剪枝的目录不会被读取"""
        _make_tree(tmp_path)
        visited = []

        import dhupdater.build.collector as collector_module
        list_directory = collector_module._list_directory

        def tracking(directory):
            visited.append(Path(directory))
            return list_directory(directory)

        monkeypatch.setattr(collector_module, "_list_directory", tracking)
        TreeWalker(parse_patterns("b/obj/**")).walk(tmp_path)

        assert tmp_path / "b" / "obj" not in visited
        assert tmp_path / "b" in visited

    def test_walk_resets_statistics(self, tmp_path):
        """测试重复遍历时统计重新计算"""
        _make_tree(tmp_path)
        walker = TreeWalker()
        walker.walk(tmp_path)
        walker.walk(tmp_path)
        assert walker.get_statistics()["total_files"] == 4
