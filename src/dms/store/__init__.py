"""Storage layer for DMS.

This package provides the filesystem repository and its building blocks:
- DocumentRepository: add/get/put/delete/revert and listing operations
- shard_path: document id to directory mapping
- RevisionResolver: revision selection within a document
- IdAllocator: process-lifetime id counter
- DocumentEnumerator: recovers document ids from the directory tree
- Copy strategies and selectors used by DocumentRepository.get

Example:
    from dms.store import DocumentRepository, TarArchiveCopier

    repo = DocumentRepository("/var/dms")
    doc_id = repo.add("notes.txt")
    repo.get(doc_id, destination="notes.tar.gz", copier=TarArchiveCopier())
"""

from .allocator import IdAllocator
from .copying import (
    CopyStrategy,
    FileSystemCopier,
    Selector,
    TarArchiveCopier,
    by_glob,
    by_suffix,
)
from .enumerator import DocumentEnumerator, iter_document_ids
from .repository import DocumentRepository
from .revisions import RevisionResolver
from .sharding import check_root, revision_dirname, shard_parts, shard_path

__all__ = [
    "DocumentRepository",
    "IdAllocator",
    "DocumentEnumerator",
    "iter_document_ids",
    "RevisionResolver",
    "shard_parts",
    "shard_path",
    "revision_dirname",
    "check_root",
    "CopyStrategy",
    "FileSystemCopier",
    "TarArchiveCopier",
    "Selector",
    "by_glob",
    "by_suffix",
]
