"""Filesystem repository of revision-numbered documents.

A document is a positive integer id owning numbered revisions; each
revision is a directory of files. Everything lives under one root::

    <root>/[M<ddd>/][k<ddd>/]<ddd>/<rrr>/<filename...>

There is no index: document existence is the presence of the shard
directory, and the set of documents is recovered by walking the tree.

Integrators should note that failed operations are not rolled back.
A failed ``add`` can leave bucket directories and an empty document
directory behind (the id is then skipped by later adds), and a failed
``get`` leaves any files it already copied at the destination. Revisions
themselves are staged in a hidden directory and published with a single
rename, so readers never observe a half-written revision.

Example:
    repo = DocumentRepository("/var/dms")
    doc_id = repo.add("report.pdf")
    repo.put(doc_id, "report.pdf", "appendix.csv")
    repo.get(doc_id, destination="/tmp/checkout")
"""

from __future__ import annotations

import os
import shutil
import threading
from pathlib import Path
from typing import Any

from loguru import logger

from ..core.config import Config
from ..core.exceptions import (
    DocumentNotFoundError,
    InvalidInputError,
    RepositoryIOError,
)
from ..core.types import (
    DocumentId,
    RepositoryStats,
    Revision,
    RevisionPolicy,
    parse_document_id,
    parse_revision,
)
from ..utils.fs import (
    claim_dir,
    disk_usage,
    list_files,
    make_dirs,
    make_staging_dir,
    prune_empty_dirs,
    publish_dir,
)
from .allocator import IdAllocator
from .copying import CopyStrategy, FileSystemCopier, Selector
from .enumerator import DocumentEnumerator
from .revisions import RevisionResolver
from .sharding import check_root, revision_dirname, shard_path


class DocumentRepository:
    """Add, retrieve and revise documents stored under a root directory.

    One lock per instance serializes id and revision claims. Directory
    creation is the actual claim, so documents created by another
    process are skipped rather than overwritten.
    """

    def __init__(
        self,
        root: str | Path,
        permissions: int = 0o700,
        start_revision: int = 1,
        revision_policy: RevisionPolicy = RevisionPolicy.LATEST,
    ):
        """Open a repository and seed the id counter from its contents.

        Args:
            root: Existing repository directory.
            permissions: Mode applied to every directory this repository creates.
            start_revision: Revision number of a new document's first revision.
            revision_policy: Which revision ``get`` uses when none is given.

        Raises:
            RepositoryUnavailableError: If ``root`` is missing or inaccessible.
            EnumerationError: If existing documents cannot be listed.
        """
        self.root = Path(root)
        self.permissions = permissions
        self._revisions = RevisionResolver(start_revision, revision_policy)
        self._lock = threading.RLock()

        check_root(self.root)
        self._allocator = IdAllocator.from_ids(DocumentEnumerator(self.root))

        logger.info(
            f"Opened repository: root={self.root}, permissions={self.permissions:o}, "
            f"next_id={self._allocator.current}"
        )

    @classmethod
    def from_config(cls, config: Config) -> "DocumentRepository":
        """Create a repository from configuration."""
        return cls(
            config.repository_dir,
            permissions=config.permissions,
            start_revision=config.start_revision,
            revision_policy=config.revision_policy,
        )

    @property
    def next_id(self) -> int:
        """Id the next ``add`` will try first."""
        return self._allocator.current

    # =========================================================================
    # Path resolution
    # =========================================================================

    def _document_dir(self, doc_id: DocumentId) -> Path:
        """Return the shard directory of a document after checking the root."""
        check_root(self.root)
        doc_dir = shard_path(self.root, doc_id)
        if doc_dir.is_dir() and not os.access(doc_dir, os.R_OK | os.X_OK):
            raise RepositoryIOError(f"Document directory '{doc_dir}' exists but is inaccessible")
        return doc_dir

    def document_path(self, doc_id: int | str, revision: int | str | None = None) -> Path:
        """Return the revision directory for a document.

        The path is computed, not checked: for a document that does not
        exist yet it points at its first revision.

        Args:
            doc_id: Document id.
            revision: Explicit revision, or None to apply the revision policy.

        Returns:
            Path of the revision directory.
        """
        doc_dir = self._document_dir(parse_document_id(doc_id))
        return doc_dir / revision_dirname(self._revisions.resolve(doc_dir, revision))

    def exists(self, doc_id: int | str, revision: int | str | None = None) -> bool:
        """Check whether a document (or one of its revisions) exists."""
        doc_dir = self._document_dir(parse_document_id(doc_id))
        if revision is None:
            return doc_dir.is_dir()
        return (doc_dir / revision_dirname(parse_revision(revision))).is_dir()

    # =========================================================================
    # Writing
    # =========================================================================

    def add(self, source: str | Path, start_revision: int | str | None = None) -> DocumentId:
        """Store a file as a new document.

        Args:
            source: File to install. Its base name is kept.
            start_revision: Revision number for the first revision
                (defaults to the repository's start revision).

        Returns:
            The new document id.

        Raises:
            InvalidInputError: If ``source`` is not an existing file.
            AllocatorExhaustedError: If no ids are left.
            RepositoryIOError: If directories cannot be created or the copy fails.
        """
        source = Path(source)
        if not source.is_file():
            raise InvalidInputError(f"Invalid filename specified to add(): '{source}'")

        if start_revision is None:
            revision = self._revisions.start_revision
        else:
            revision = parse_revision(start_revision)

        with self._lock:
            doc_id, doc_dir = self._claim_document()
            self._publish_revision(doc_dir, [source], revision)
            self._allocator.advance(doc_id)

        logger.info(f"Added document {doc_id} from '{source}' at revision {revision}")
        return doc_id

    def put(self, doc_id: int | str, *files: str | Path) -> Revision:
        """Store files as a new revision of a document.

        The revision number is one above the document's current highest
        revision, or the start revision for a new document.

        Args:
            doc_id: Document id.
            *files: Files making up the new revision.

        Returns:
            The new revision number.

        Raises:
            InvalidInputError: If the id is malformed or a file is missing.
            InvalidRevisionError: If the document has used up its revisions.
            RepositoryIOError: If a directory or copy operation fails.
        """
        doc_id = parse_document_id(doc_id)
        sources = [Path(f) for f in files]
        if not sources:
            raise InvalidInputError(f"No files given to put() for document {doc_id}")
        for source in sources:
            if not source.is_file():
                raise InvalidInputError(f"Invalid filename specified to put(): '{source}'")

        with self._lock:
            doc_dir = self._document_dir(doc_id)
            try:
                make_dirs(doc_dir, self.permissions)
            except OSError as e:
                raise RepositoryIOError(f"Could not create '{doc_dir}': {e}") from e

            revision = self._publish_revision(doc_dir, sources)
            self._allocator.advance(doc_id)

        logger.info(f"Stored revision {revision} of document {doc_id} ({len(sources)} files)")
        return revision

    def revert(self, doc_id: int | str, revision: int | str) -> Revision:
        """Publish the files of an older revision as a new revision.

        Args:
            doc_id: Document id.
            revision: Revision to copy forward. It is left untouched.

        Returns:
            The new revision number.

        Raises:
            DocumentNotFoundError: If the revision does not exist.
        """
        doc_id = parse_document_id(doc_id)
        revision = parse_revision(revision)

        with self._lock:
            doc_dir = self._document_dir(doc_id)
            rev_dir = doc_dir / revision_dirname(revision)
            if not rev_dir.is_dir():
                raise DocumentNotFoundError(doc_id, revision)

            try:
                files = list_files(rev_dir)
            except OSError as e:
                raise RepositoryIOError(f"Could not open '{rev_dir}': {e}") from e

            new_revision = self._publish_revision(doc_dir, files)

        logger.info(f"Reverted document {doc_id} to revision {revision} as revision {new_revision}")
        return new_revision

    def delete(self, doc_id: int | str) -> None:
        """Remove a document and all its revisions.

        Bucket directories left empty are removed as well. The id counter
        is not lowered.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            RepositoryIOError: If removal fails part-way.
        """
        doc_id = parse_document_id(doc_id)

        with self._lock:
            doc_dir = self._document_dir(doc_id)
            if not doc_dir.is_dir():
                raise DocumentNotFoundError(doc_id)
            try:
                shutil.rmtree(doc_dir)
                prune_empty_dirs(doc_dir.parent, self.root)
            except OSError as e:
                raise RepositoryIOError(f"Could not delete document {doc_id}: {e}") from e

        logger.info(f"Deleted document {doc_id}")

    def _claim_document(self) -> tuple[DocumentId, Path]:
        """Create the directory of the next free document id.

        Must be called with the lock held.
        """
        while True:
            doc_id = self._allocator.next_id()
            doc_dir = self._document_dir(doc_id)
            try:
                make_dirs(doc_dir.parent, self.permissions)
                claimed = claim_dir(doc_dir, self.permissions)
            except OSError as e:
                raise RepositoryIOError(f"Could not create '{doc_dir}': {e}") from e

            if claimed:
                logger.debug(f"Claimed document directory {doc_dir}")
                return doc_id, doc_dir

            logger.warning(f"Document directory '{doc_dir}' already exists, skipping id {doc_id}")
            self._allocator.advance(doc_id)

    def _publish_revision(
        self,
        doc_dir: Path,
        sources: list[Path],
        revision: Revision | None = None,
    ) -> Revision:
        """Stage ``sources`` and publish them as one revision directory.

        With ``revision`` None the next free revision is used, retrying if
        another writer publishes the same number first.

        Must be called with the lock held.
        """
        try:
            staging = make_staging_dir(doc_dir, self.permissions)
        except OSError as e:
            raise RepositoryIOError(f"Could not create staging directory in '{doc_dir}': {e}") from e

        try:
            for source in sources:
                logger.debug(f"Staging '{source}' in {staging}")
                shutil.copyfile(source, staging / source.name)

            while True:
                target_revision = revision or self._revisions.next_revision(doc_dir)
                target = doc_dir / revision_dirname(target_revision)
                try:
                    publish_dir(staging, target)
                    return target_revision
                except FileExistsError:
                    if revision is not None or not target.is_dir():
                        raise
                    logger.warning(f"Revision directory '{target}' appeared concurrently, retrying")
        except OSError as e:
            raise RepositoryIOError(f"Could not store revision in '{doc_dir}': {e}") from e
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

    # =========================================================================
    # Reading
    # =========================================================================

    def get(
        self,
        doc_id: int | str,
        revision: int | str | None = None,
        destination: Any = None,
        selector: Selector | None = None,
        copier: CopyStrategy | None = None,
    ) -> Any:
        """Copy the files of a document revision to a destination.

        Args:
            doc_id: Document id.
            revision: Revision to fetch, or None to apply the revision policy.
            destination: Passed to the copier; for the default copier an
                existing directory (default: the current directory).
            selector: Optional predicate; only files it accepts are copied.
            copier: Strategy receiving the file list and ``destination``
                (default: FileSystemCopier).

        Returns:
            The copier's result; for the default copier, the copied paths.

        Raises:
            InvalidInputError: If the id is malformed.
            DocumentNotFoundError: If the document or revision does not exist.
            RepositoryIOError: If a copy fails (earlier copies are kept).
        """
        doc_id = parse_document_id(doc_id)
        doc_dir = self._document_dir(doc_id)
        if not doc_dir.is_dir():
            raise DocumentNotFoundError(doc_id, None if revision is None else parse_revision(revision))

        selected_revision = self._revisions.resolve(doc_dir, revision)
        rev_dir = doc_dir / revision_dirname(selected_revision)
        if not rev_dir.is_dir():
            raise DocumentNotFoundError(doc_id, selected_revision)

        logger.debug(f"Getting files from {rev_dir}")
        try:
            files = list_files(rev_dir)
        except OSError as e:
            raise RepositoryIOError(f"Could not open '{rev_dir}' to checkout files: {e}") from e

        if selector is not None:
            files = [f for f in files if selector(f)]
        logger.debug(f"Retrieving document files: {[f.name for f in files]}")

        if destination is None:
            destination = Path.cwd()
        if copier is None:
            copier = FileSystemCopier()
        return copier(files, destination)

    def documents(self) -> set[DocumentId]:
        """Return the ids of all documents in the repository.

        Raises:
            EnumerationError: If any directory of the tree cannot be listed.
        """
        check_root(self.root)
        return set(DocumentEnumerator(self.root))

    def revisions(self, doc_id: int | str) -> list[Revision]:
        """List a document's revisions in ascending order (empty if absent)."""
        doc_dir = self._document_dir(parse_document_id(doc_id))
        return self._revisions.list_revisions(doc_dir)

    def stats(self) -> RepositoryStats:
        """Aggregate document, revision and file counts for the repository.

        Walks the whole tree; intended for maintenance and reporting.
        """
        doc_ids = self.documents()
        revision_count = sum(
            len(self._revisions.list_revisions(shard_path(self.root, doc_id)))
            for doc_id in doc_ids
        )
        try:
            file_count, disk_bytes = disk_usage(self.root)
        except OSError as e:
            raise RepositoryIOError(f"Could not scan repository '{self.root}': {e}") from e

        return RepositoryStats(
            document_count=len(doc_ids),
            revision_count=revision_count,
            file_count=file_count,
            disk_bytes=disk_bytes,
            next_id=self._allocator.current,
        )
