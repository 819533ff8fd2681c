"""
End-to-end tests for CatalogCommand and FingerprintCommand against a real SQLite catalog.
"""
import builtins
import os
from unittest import mock

import pytest

from dupcatalog.commands import CatalogCommand, FingerprintCommand
from dupcatalog.core.errors import RootValidationError
from dupcatalog.core.hasher import FingerprinterImpl
from dupcatalog.core.models import ScanParams
from dupcatalog.services.catalog_service import SQLiteCatalog


class TestCatalogCommand:
    def test_excluded_subdirectory_example(self, tmp_path, catalog_path):
        """root/a.txt and root/skip/b.txt with exclusion 'skip' → exactly one entry, b.txt never opened."""
        root = tmp_path / "root"
        (root / "skip").mkdir(parents=True)
        (root / "a.txt").write_bytes(b"0123456789")
        (root / "skip" / "b.txt").write_bytes(b"0123456789")

        params = ScanParams(
            root_dir=str(root),
            catalog_path=str(catalog_path),
            exclude_patterns=["skip"],
        )

        with mock.patch("dupcatalog.core.cataloger.open", create=True, side_effect=builtins.open) as opened:
            root_id, stats = CatalogCommand().execute(params)

        opened_paths = {str(call.args[0]) for call in opened.call_args_list}
        assert str(root / "skip" / "b.txt") not in opened_paths

        with SQLiteCatalog(str(catalog_path)) as catalog:
            entries = catalog.get_entries(root_id)

        assert [e.path for e in entries] == [str(root / "a.txt")]
        assert stats.files_cataloged == 1

    def test_catalog_matches_fingerprinter(self, test_tree, temp_dir, catalog_path):
        params = ScanParams(root_dir=str(temp_dir), catalog_path=str(catalog_path))

        root_id, _ = CatalogCommand().execute(params)

        fingerprinter = FingerprinterImpl()
        with SQLiteCatalog(str(catalog_path)) as catalog:
            entries = catalog.get_entries(root_id)

        assert {e.path for e in entries} == {str(p) for p in test_tree.values()}
        for entry in entries:
            assert entry.fingerprint == fingerprinter.fingerprint_path(entry.path)

    def test_rescan_appends_history_under_same_root(self, test_tree, temp_dir, catalog_path):
        params = ScanParams(root_dir=str(temp_dir), catalog_path=str(catalog_path))

        first_id, _ = CatalogCommand().execute(params)
        second_id, _ = CatalogCommand().execute(params)

        assert first_id == second_id
        with SQLiteCatalog(str(catalog_path)) as catalog:
            assert len(catalog.get_entries(first_id)) == 2 * len(test_tree)
            assert len(catalog.get_roots()) == 1

    def test_root_is_stored_as_absolute_path(self, test_tree, temp_dir, catalog_path, monkeypatch):
        monkeypatch.chdir(temp_dir.parent)
        params = ScanParams(root_dir=temp_dir.name, catalog_path=str(catalog_path))

        root_id, _ = CatalogCommand().execute(params)

        with SQLiteCatalog(str(catalog_path)) as catalog:
            assert catalog.get_root_id(os.path.join(os.getcwd(), temp_dir.name)) == root_id
            assert all(os.path.isabs(e.path) for e in catalog.get_entries(root_id))

    def test_missing_root_fails_before_catalog_is_created(self, tmp_path, catalog_path):
        params = ScanParams(root_dir=str(tmp_path / "nope"), catalog_path=str(catalog_path))

        with pytest.raises(RootValidationError):
            CatalogCommand().execute(params)

        assert not catalog_path.exists()

    def test_file_root_is_rejected(self, tmp_path, catalog_path):
        not_a_dir = tmp_path / "file.txt"
        not_a_dir.write_bytes(b"x")
        params = ScanParams(root_dir=str(not_a_dir), catalog_path=str(catalog_path))

        with pytest.raises(RootValidationError) as exc_info:
            CatalogCommand().execute(params)

        assert exc_info.value.path == str(not_a_dir)
        assert not catalog_path.exists()


class TestFingerprintCommand:
    def test_matches_fingerprinter(self, temp_dir):
        path = temp_dir / "one.bin"
        path.write_bytes(b"single file mode")

        assert FingerprintCommand().execute(str(path)) == FingerprinterImpl().fingerprint_path(str(path))

    def test_rejects_tiny_threshold(self):
        with pytest.raises(ValueError, match="at least"):
            FingerprintCommand(threshold=1024)
