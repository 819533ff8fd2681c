"""
Tests for CatalogerImpl: the open → fingerprint → record step and its error policy.
An in-memory recorder stands in for the SQLite catalog.
"""
import builtins
import errno
from unittest import mock

import pytest

from dupcatalog.core.cataloger import CatalogerImpl
from dupcatalog.core.errors import TruncatedFileError, WalkError
from dupcatalog.core.filters import PathFilterImpl
from dupcatalog.core.hasher import FingerprinterImpl
from dupcatalog.core.models import ScanStats
from dupcatalog.core.walker import TreeWalkerImpl


class MemoryRecorder:
    def __init__(self):
        self.roots = {}
        self.entries = []

    def ensure_root(self, path):
        return self.roots.setdefault(path, len(self.roots) + 1)

    def record_entry(self, root_id, fingerprint, path, mtime):
        self.entries.append((root_id, fingerprint, path, mtime))
        return len(self.entries)

    @property
    def paths(self):
        return {entry[2] for entry in self.entries}


def open_failing_for(paths, error):
    """Returns an `open` replacement that raises `error` for the given paths."""
    blocked = {str(p) for p in paths}

    def fake_open(file, *args, **kwargs):
        if str(file) in blocked:
            raise error
        return builtins.open(file, *args, **kwargs)

    return fake_open


class TestCatalogerImpl:
    def test_records_every_qualifying_file(self, test_tree, temp_dir):
        recorder = MemoryRecorder()
        root_id = recorder.ensure_root(str(temp_dir))
        cataloger = CatalogerImpl(FingerprinterImpl(), recorder)

        stats = cataloger.catalog(TreeWalkerImpl(str(temp_dir)), root_id)

        assert recorder.paths == {str(p) for p in test_tree.values()}
        assert stats.files_cataloged == len(test_tree)
        assert all(entry[0] == root_id for entry in recorder.entries)

    def test_identical_files_share_a_fingerprint(self, test_tree, temp_dir):
        recorder = MemoryRecorder()
        cataloger = CatalogerImpl(FingerprinterImpl(), recorder)

        cataloger.catalog(TreeWalkerImpl(str(temp_dir)), 1)

        by_path = {entry[2]: entry[1] for entry in recorder.entries}
        assert by_path[str(test_tree["dup_a"])] == by_path[str(test_tree["dup_b"])]
        assert by_path[str(test_tree["dup_a"])] != by_path[str(test_tree["unique"])]

    def test_excluded_files_are_never_opened(self, test_tree, temp_dir):
        recorder = MemoryRecorder()
        cataloger = CatalogerImpl(FingerprinterImpl(), recorder)
        walker = TreeWalkerImpl(str(temp_dir), PathFilterImpl.from_patterns(excludes=["skip"]))

        with mock.patch("dupcatalog.core.cataloger.open", create=True, side_effect=builtins.open) as opened:
            cataloger.catalog(walker, 1)

        opened_paths = {str(call.args[0]) for call in opened.call_args_list}
        assert str(test_tree["skipped"]) not in opened_paths
        assert str(test_tree["skipped"]) not in recorder.paths

    def test_mtime_comes_from_the_file(self, test_tree, temp_dir):
        recorder = MemoryRecorder()
        CatalogerImpl(FingerprinterImpl(), recorder).catalog(TreeWalkerImpl(str(temp_dir)), 1)

        by_path = {entry[2]: entry[3] for entry in recorder.entries}
        expected = test_tree["unique"].stat().st_mtime
        assert by_path[str(test_tree["unique"])].timestamp() == pytest.approx(expected)

    def test_progress_callback_reports_final_count(self, test_tree, temp_dir):
        calls = []
        cataloger = CatalogerImpl(FingerprinterImpl(), MemoryRecorder())

        cataloger.catalog(
            TreeWalkerImpl(str(temp_dir)), 1,
            progress_callback=lambda stage, current, total: calls.append((stage, current, total))
        )

        assert calls[-1] == ("cataloging", len(test_tree), None)


class TestCatalogerErrors:
    def test_permission_denied_file_is_skipped(self, test_tree, temp_dir):
        """A permission-denied file does not abort the run; later files are still recorded."""
        recorder = MemoryRecorder()
        cataloger = CatalogerImpl(FingerprinterImpl(), recorder)
        stats = ScanStats()
        denied = test_tree["dup_a"]
        fake_open = open_failing_for([denied], PermissionError(errno.EACCES, "Permission denied"))

        with mock.patch("dupcatalog.core.cataloger.open", create=True, side_effect=fake_open):
            cataloger.catalog(TreeWalkerImpl(str(temp_dir)), 1, stats=stats)

        expected = {str(p) for p in test_tree.values()} - {str(denied)}
        assert recorder.paths == expected
        assert stats.permission_denied == 1

    def test_permission_denied_before_deeper_files(self, test_tree, temp_dir):
        """Every root-level file is denied; deeper files after them are still cataloged."""
        recorder = MemoryRecorder()
        cataloger = CatalogerImpl(FingerprinterImpl(), recorder)
        root_files = [test_tree[k] for k in ("dup_a", "dup_b", "unique", "empty")]
        fake_open = open_failing_for(root_files, PermissionError(errno.EACCES, "Permission denied"))

        with mock.patch("dupcatalog.core.cataloger.open", create=True, side_effect=fake_open):
            cataloger.catalog(TreeWalkerImpl(str(temp_dir)), 1)

        assert recorder.paths == {str(test_tree["skipped"]), str(test_tree["deep_log"])}

    def test_other_open_errors_abort_the_walk(self, test_tree, temp_dir):
        cataloger = CatalogerImpl(FingerprinterImpl(), MemoryRecorder())
        failing = test_tree["unique"]
        fake_open = open_failing_for([failing], OSError(errno.EIO, "Input/output error"))

        with mock.patch("dupcatalog.core.cataloger.open", create=True, side_effect=fake_open):
            with pytest.raises(WalkError) as exc_info:
                cataloger.catalog(TreeWalkerImpl(str(temp_dir)), 1)

        assert exc_info.value.path == str(failing)

    def test_truncated_file_aborts_and_keeps_earlier_entries(self, temp_dir):
        """Entries recorded before a fatal error remain recorded."""
        (temp_dir / "a.txt").write_bytes(b"a" * 10)
        sub = temp_dir / "sub"
        sub.mkdir()
        big = sub / "big.bin"
        big.write_bytes(b"\0" * (600 * 1024))

        class ShrinkingFingerprinter(FingerprinterImpl):
            def fingerprint(self, handle, size, path=None):
                if path == str(big):
                    raise TruncatedFileError("Unexpected end of file", path=path)
                return super().fingerprint(handle, size, path)

        recorder = MemoryRecorder()
        cataloger = CatalogerImpl(ShrinkingFingerprinter(), recorder)

        with pytest.raises(TruncatedFileError):
            cataloger.catalog(TreeWalkerImpl(str(temp_dir)), 1)

        assert recorder.paths == {str(temp_dir / "a.txt")}
