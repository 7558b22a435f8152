"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from dms.store import DocumentRepository, revision_dirname, shard_path


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Provide an empty repository directory."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def repository(repo_root: Path) -> DocumentRepository:
    """Provide a DocumentRepository over an empty root."""
    return DocumentRepository(repo_root)


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """Create a small source file outside the repository."""
    path = tmp_path / "source" / "report.txt"
    path.parent.mkdir()
    path.write_bytes(b"quarterly report\n\x00\x01binary tail")
    return path


@pytest.fixture
def checkout_dir(tmp_path: Path) -> Path:
    """Provide an empty destination directory for get()."""
    path = tmp_path / "checkout"
    path.mkdir()
    return path


@pytest.fixture
def make_document(repo_root: Path) -> Callable[..., Path]:
    """Create a document directly on disk, bypassing the repository.

    Returns a function taking (doc_id, revisions=(1,), files=None) that
    builds the shard and revision directories and returns the shard path.
    """

    def _make(doc_id: int, revisions=(1,), files: dict[str, bytes] | None = None) -> Path:
        doc_dir = shard_path(repo_root, doc_id)
        for revision in revisions:
            rev_dir = doc_dir / revision_dirname(revision)
            rev_dir.mkdir(parents=True)
            for name, content in (files or {"doc.txt": f"{doc_id}:{revision}".encode()}).items():
                (rev_dir / name).write_bytes(content)
        return doc_dir

    return _make
