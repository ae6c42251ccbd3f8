"""
归档器单元测试
"""

import subprocess
import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dhupdater.build.collector import walk
from dhupdater.build.compressor import (
    FIXED_DATE_TIME,
    ArchiveError,
    ArchiverFactory,
    ZipArchiveCreator,
    ZipCliArchiveCreator,
    archive_self_exclusion,
)
from dhupdater.build.hasher import digest_archive_file, digest_file
from dhupdater.build.patterns import parse_patterns
from dhupdater.config.schema import ArchiverKind


def _make_tree(root: Path) -> None:
    (root / "app.exe").write_bytes(b"MZ binary 1.0.0.0")
    (root / "data").mkdir()
    (root / "data" / "config.json").write_text('{"a": 1}')
    (root / "data" / "cache").mkdir()
    (root / "data" / "cache" / "tmp.bin").write_bytes(b"cache")
    (root / "app.pdb").write_bytes(b"symbols")


class TestArchiveSelfExclusion:
    """archive_self_exclusion 测试"""

    def test_inside(self, tmp_path):
        """测试归档位于源目录内"""
        assert archive_self_exclusion(tmp_path, tmp_path / "out" / "a.zip") == "out/a.zip"

    def test_outside(self, tmp_path):
        """测试归档位于源目录外"""
        assert archive_self_exclusion(tmp_path / "src", tmp_path / "a.zip") is None


class TestZipArchiveCreator:
    """ZipArchiveCreator 测试"""

    def test_members_match_walker(self, tmp_path):
        """测试归档成员与遍历结果一致"""
        source = tmp_path / "src"
        source.mkdir()
        _make_tree(source)
        patterns = parse_patterns("*.pdb;data/cache/**")
        destination = tmp_path / "out" / "app.zip"

        ZipArchiveCreator().create_archive(source, destination, patterns)

        with zipfile.ZipFile(destination) as zf:
            names = zf.namelist()
            assert names == [e.relative_path for e in walk(source, patterns)]
            assert names == ["app.exe", "data/config.json"]
            for entry in walk(source, patterns):
                assert digest_file(zf.read(entry.relative_path)) == digest_file(entry.absolute_path.read_bytes())
                assert zf.getinfo(entry.relative_path).date_time == FIXED_DATE_TIME

    def test_archive_inside_source_not_included(self, tmp_path):
        """测试源目录内的归档不包含自身"""
        _make_tree(tmp_path)
        destination = tmp_path / "release.zip"
        destination.write_bytes(b"old archive")

        ZipArchiveCreator().create_archive(tmp_path, destination, ())

        with zipfile.ZipFile(destination) as zf:
            assert "release.zip" not in zf.namelist()

    def test_reproducible(self, tmp_path):
        """测试同一目录重复打包摘要相同"""
        source = tmp_path / "src"
        source.mkdir()
        _make_tree(source)
        first = tmp_path / "first.zip"
        second = tmp_path / "second.zip"

        creator = ZipArchiveCreator()
        creator.create_archive(source, first, ())
        creator.create_archive(source, second, ())

        assert digest_archive_file(first) == digest_archive_file(second)

    def test_stored_when_level_zero(self, tmp_path):
        """测试压缩级别 0 时不压缩"""
        source = tmp_path / "src"
        source.mkdir()
        _make_tree(source)
        destination = tmp_path / "a.zip"

        ZipArchiveCreator(level=0).create_archive(source, destination, ())

        with zipfile.ZipFile(destination) as zf:
            assert all(info.compress_type == zipfile.ZIP_STORED for info in zf.infolist())

    def test_empty_source(self, tmp_path):
        """测试空源目录"""
        source = tmp_path / "src"
        source.mkdir()
        destination = tmp_path / "a.zip"

        ZipArchiveCreator().create_archive(source, destination, ())

        with zipfile.ZipFile(destination) as zf:
            assert zf.namelist() == []

    def test_missing_source(self, tmp_path):
        """测试源目录不存在"""
        with pytest.raises(ArchiveError):
            ZipArchiveCreator().create_archive(tmp_path / "missing", tmp_path / "a.zip", ())

    def test_kind(self):
        """测试归档类型"""
        assert ZipArchiveCreator().get_kind() is ArchiverKind.ZIPFILE


class TestZipCliArchiveCreator:
    """ZipCliArchiveCreator 测试（外部命令打桩）"""

    def test_build_command(self, tmp_path):
        """测试组装 zip 命令行"""
        creator = ZipCliArchiveCreator(level=6)
        command = creator.build_command(tmp_path / "a.zip", parse_patterns("*.pdb;obj/**"), ["a.zip"])
        assert command == [
            "zip", "-r", "-q", "-y", "-6", str(tmp_path / "a.zip"), ".",
            "-x", "*.pdb", "-x", "obj/**", "-x", "a.zip",
        ]

    def test_tool_missing(self, tmp_path):
        """测试 zip 不存在"""
        with patch("dhupdater.build.compressor.shutil.which", return_value=None):
            with pytest.raises(ArchiveError):
                ZipCliArchiveCreator().create_archive(tmp_path, tmp_path / "a.zip", ())

    def test_runs_in_source_dir(self, tmp_path):
        """测试在源目录中执行 zip"""
        source = tmp_path / "src"
        source.mkdir()
        destination = tmp_path / "a.zip"

        def fake_run(command, cwd, capture_output, check):
            Path(command[5]).write_bytes(b"PK")
            return MagicMock(returncode=0)

        with patch("dhupdater.build.compressor.shutil.which", return_value="/usr/bin/zip"), \
                patch("dhupdater.build.compressor.subprocess.run", side_effect=fake_run) as run:
            ZipCliArchiveCreator().create_archive(source, destination, parse_patterns("*.pdb"))

        assert run.call_args.kwargs["cwd"] == source.resolve()
        assert destination.exists()

    def test_failure(self, tmp_path):
        """测试 zip 非零退出"""
        failure = subprocess.CalledProcessError(12, ["zip"], stderr=b"nothing to do")
        with patch("dhupdater.build.compressor.shutil.which", return_value="/usr/bin/zip"), \
                patch("dhupdater.build.compressor.subprocess.run", side_effect=failure):
            with pytest.raises(ArchiveError, match="nothing to do"):
                ZipCliArchiveCreator().create_archive(tmp_path, tmp_path / "a.zip", ())

    def test_no_output(self, tmp_path):
        """测试 zip 未生成归档"""
        with patch("dhupdater.build.compressor.shutil.which", return_value="/usr/bin/zip"), \
                patch("dhupdater.build.compressor.subprocess.run", return_value=MagicMock(returncode=0)):
            with pytest.raises(ArchiveError):
                ZipCliArchiveCreator().create_archive(tmp_path, tmp_path / "a.zip", ())


class TestArchiverFactory:
    """ArchiverFactory 测试"""

    def test_create(self):
        """测试按类型创建归档器"""
        assert isinstance(ArchiverFactory.create(ArchiverKind.ZIPFILE), ZipArchiveCreator)
        assert isinstance(ArchiverFactory.create(ArchiverKind.ZIP_CLI, 3), ZipCliArchiveCreator)

    def test_level_clamped(self):
        """测试压缩级别被限制在 0-9"""
        assert ArchiverFactory.create(ArchiverKind.ZIPFILE, 42).level == 9

    def test_available_kinds(self):
        """测试可用归档实现列表"""
        with patch("dhupdater.build.compressor.shutil.which", return_value=None):
            assert ArchiverFactory.get_available_kinds() == [ArchiverKind.ZIPFILE]
        with patch("dhupdater.build.compressor.shutil.which", return_value="/usr/bin/zip"):
            assert ArchiverFactory.get_available_kinds() == [ArchiverKind.ZIPFILE, ArchiverKind.ZIP_CLI]
