import os

import pytest

from mdset import fsops
from mdset.dataset import ONE_MB
from mdset.fsops import ScanFailure


def test_write_file_overshoots_by_less_than_a_line(tmp_path, rng):
    path = fsops.write_file(tmp_path / "file0.txt", ONE_MB, rng=rng)
    size = path.stat().st_size
    assert ONE_MB <= size < ONE_MB + fsops.LINE_MAX + 1
    lines = path.read_text(encoding="ascii").splitlines()
    assert all(fsops.LINE_MIN <= len(line) < fsops.LINE_MAX for line in lines)
    assert all(line.isalnum() for line in lines)


def test_write_file_append_counts_new_bytes_only(tmp_path, rng):
    path = tmp_path / "file0.txt"
    path.write_text("x" * 500, encoding="ascii")
    fsops.write_file(path, 10_000, append=True, rng=rng)
    size = path.stat().st_size
    assert path.read_text(encoding="ascii").startswith("x" * 500)
    assert 10_500 <= size < 10_500 + fsops.LINE_MAX + 1


def test_write_file_zero_limit(tmp_path):
    path = tmp_path / "file0.txt"
    path.write_text("keep", encoding="ascii")
    fsops.write_file(path, 0, append=True)
    assert path.read_text(encoding="ascii") == "keep"
    fsops.write_file(path, 0)
    assert path.stat().st_size == 0


def test_write_file_wraps_os_errors(tmp_path):
    with pytest.raises(fsops.FileOperationError):
        fsops.write_file(tmp_path / "missing" / "file0.txt", 10)


def test_count_files_is_recursive(tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "a").write_bytes(b"1")
    (tmp_path / "sub" / "b").write_bytes(b"2")
    assert fsops.count_files(tmp_path) == 2


def _make(folder, sizes):
    folder.mkdir(parents=True, exist_ok=True)
    for name, size in sizes.items():
        (folder / name).write_bytes(b"x" * size)


def test_scan_failures(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert fsops.scan_data_set(empty).failure is ScanFailure.EMPTY_DATA_SET

    single = tmp_path / "single"
    _make(single, {"file0.txt": 100})
    result = fsops.scan_data_set(single)
    assert not result.ok
    assert result.failure is ScanFailure.NO_REFERENCE_FILE


def test_scan_picks_smallest_and_first_larger_by_name(tmp_path):
    folder = tmp_path / "a"
    _make(folder, {"file0.txt": 300, "file1.txt": 200, "file2.txt": 100, "file3.txt": 300})
    stats = fsops.scan_data_set(folder).stats
    assert stats.file_count == 4
    assert stats.smallest.name == "file2.txt"
    assert stats.smallest_bytes == 100
    assert stats.reference.name == "file0.txt"
    assert stats.reference_bytes == 300


def test_scan_equal_sizes_has_no_reference(tmp_path):
    folder = tmp_path / "a"
    _make(folder, {"file0.txt": 64, "file1.txt": 64})
    stats = fsops.scan_data_set(folder).stats
    assert stats.smallest.name == "file0.txt"
    assert stats.reference is None
    assert stats.reference_bytes == 64


def test_copy_tree_keeps_existing_files(tmp_path, reporter):
    src = tmp_path / "src"
    _make(src / "a", {"file0.txt": 10})
    _make(src, {"top.txt": 3})
    dst = tmp_path / "dst"
    _make(dst / "a", {"file0.txt": 1})

    fsops.copy_tree(src, dst, preserve=True, reporter=reporter)
    assert (dst / "top.txt").read_bytes() == b"xxx"
    assert (dst / "a" / "file0.txt").stat().st_size == 1


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_copy_tree_reports_cycles(tmp_path, reporter, console):
    src = tmp_path / "src"
    _make(src / "a", {"file0.txt": 10})
    os.symlink(src, src / "a" / "loop")
    dst = tmp_path / "dst"

    fsops.copy_tree(src, dst, preserve=False, reporter=reporter)
    assert (dst / "a" / "file0.txt").exists()
    assert "cycle detected" in console.file.getvalue()


def test_deep_delete(tmp_path, reporter, console):
    root = tmp_path / "root"
    _make(root / "a" / "b", {"f": 1})
    _make(root, {"g": 2})
    fsops.deep_delete(root, reporter)
    assert not root.exists()
    assert "f" in console.file.getvalue()
    # отсутствующий путь — не ошибка
    fsops.deep_delete(root, reporter)
