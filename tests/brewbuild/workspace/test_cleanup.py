"""Tests for workspace/cleanup.py — chmod_rm_rf best-effort delete."""

import os
import stat
from pathlib import Path

import pytest

from brewbuild.workspace.cleanup import chmod_rm_rf


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A small build-like tree with nested dirs and a few files."""
    root = tmp_path / "ws"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "src" / "main.c").write_text("int main;")
    (root / "src" / "lib" / "util.c").write_text("void f;")
    (root / "build").mkdir()
    (root / "build" / "out.o").write_bytes(b"\x00")
    (root / "README").write_text("hi")
    return root


def _fail_for(name: str, real):
    """Wrap a Path method so it raises PermissionError for one file name."""

    def _wrapped(self, *args, **kwargs):
        if self.name == name:
            raise PermissionError(13, "Permission denied", str(self))
        return real(self, *args, **kwargs)

    return _wrapped


class TestChmodRmRf:
    def test_removes_whole_tree(self, tree: Path):
        report = chmod_rm_rf(tree)
        assert not tree.exists()
        assert report.skipped == []
        assert report.complete
        # 4 files + 4 dirs (root, src, src/lib, build)
        assert report.removed == 8

    def test_missing_root_is_not_an_error(self, tmp_path: Path):
        report = chmod_rm_rf(tmp_path / "gone")
        assert report.removed == 0
        assert report.skipped == []

    def test_single_file_root(self, tmp_path: Path):
        f = tmp_path / "lonely.txt"
        f.write_text("x")
        chmod_rm_rf(f)
        assert not f.exists()

    def test_read_only_directory_is_removed(self, tree: Path):
        locked = tree / "build"
        locked.chmod(stat.S_IRUSR | stat.S_IXUSR)
        chmod_rm_rf(tree)
        assert not tree.exists()

    def test_unreadable_directory_is_removed(self, tree: Path):
        (tree / "src" / "lib").chmod(0)
        chmod_rm_rf(tree)
        assert not tree.exists()

    def test_symlink_to_outside_dir_not_followed(self, tree: Path, tmp_path: Path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "keep.txt").write_text("precious")
        (tree / "link").symlink_to(outside, target_is_directory=True)

        chmod_rm_rf(tree)

        assert not tree.exists()
        assert (outside / "keep.txt").read_text() == "precious"

    def test_dangling_symlink_removed(self, tree: Path):
        (tree / "dangling").symlink_to(tree / "does-not-exist")
        chmod_rm_rf(tree)
        assert not os.path.lexists(tree)

    def test_failed_child_is_skipped_and_siblings_removed(
        self, tree: Path, monkeypatch: pytest.MonkeyPatch
    ):
        (tree / "src" / "locked.c").write_text("nope")
        monkeypatch.setattr(Path, "unlink", _fail_for("locked.c", Path.unlink))

        report = chmod_rm_rf(tree)

        assert (tree / "src" / "locked.c").exists()
        assert not (tree / "src" / "main.c").exists()
        assert not (tree / "src" / "lib").exists()
        assert not (tree / "build").exists()
        assert not (tree / "README").exists()
        skipped = [p for p, _ in report.skipped]
        assert tree / "src" / "locked.c" in skipped
        # Parents of the survivor cannot be removed either; that is recorded too
        assert tree / "src" in skipped
        assert tree in skipped
        assert not report.complete

    def test_unlistable_directory_is_skipped(
        self, tree: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(Path, "iterdir", _fail_for("build", Path.iterdir))

        report = chmod_rm_rf(tree)

        assert (tree / "build" / "out.o").exists()
        assert not (tree / "src").exists()
        assert not (tree / "README").exists()
        assert tree / "build" in [p for p, _ in report.skipped]

    def test_never_raises_on_errors(self, tree: Path, monkeypatch: pytest.MonkeyPatch):
        def _always_fail(self, *args, **kwargs):
            raise OSError(5, "I/O error", str(self))

        monkeypatch.setattr(Path, "unlink", _always_fail)
        monkeypatch.setattr(Path, "rmdir", _always_fail)

        report = chmod_rm_rf(tree)

        assert report.removed == 0
        assert len(report.skipped) == 8

    def test_directory_vanishing_before_rmdir_counts_as_done(
        self, tree: Path, monkeypatch: pytest.MonkeyPatch
    ):
        real_rmdir = Path.rmdir

        def _raced(self):
            real_rmdir(self)
            if self.name == "build":
                raise FileNotFoundError(2, "No such file or directory", str(self))

        monkeypatch.setattr(Path, "rmdir", _raced)

        report = chmod_rm_rf(tree)

        assert not tree.exists()
        assert report.skipped == []
        assert report.complete
