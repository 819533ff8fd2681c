"""
Shared fixtures for cataloging tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so 'dupcatalog' is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def catalog_path(tmp_path) -> Path:
    """Location for a throwaway SQLite catalog, outside the scanned tree."""
    return tmp_path / "catalog.db"


@pytest.fixture
def test_tree(temp_dir) -> Dict[str, Path]:
    """
    Creates a controlled tree:
    - 2 identical small files (same fingerprint)
    - 1 unique small file
    - 1 empty file (cataloged like any other regular file)
    - skip/ directory with a file that exclusion tests prune
    - nested/deep/ directory with a .log file
    """
    files = {}

    files["dup_a"] = temp_dir / "dup_a.txt"
    files["dup_b"] = temp_dir / "dup_b.txt"
    files["dup_a"].write_bytes(b"A" * 1024)
    files["dup_b"].write_bytes(b"A" * 1024)

    files["unique"] = temp_dir / "unique.txt"
    files["unique"].write_bytes(b"C" * 1500)

    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    skip_dir = temp_dir / "skip"
    skip_dir.mkdir()
    files["skipped"] = skip_dir / "b.txt"
    files["skipped"].write_bytes(b"B" * 10)

    deep_dir = temp_dir / "nested" / "deep"
    deep_dir.mkdir(parents=True)
    files["deep_log"] = deep_dir / "events.log"
    files["deep_log"].write_bytes(b"log line\n" * 20)

    return files
