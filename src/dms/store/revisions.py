"""Revision selection within a document directory."""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from ..core.exceptions import InvalidRevisionError, RepositoryIOError
from ..core.types import MAX_REVISION, Revision, RevisionPolicy, parse_revision
from .sharding import revision_dirname


def _is_revision_name(name: str) -> bool:
    """Check that a directory name is the padded form of its own number."""
    if not (name.isascii() and name.isdigit()):
        return False
    # "01" and "001" would otherwise both count as revision 1
    return name == revision_dirname(int(name))


class RevisionResolver:
    """Decides which revision directory an operation works on.

    Revision directories are the purely numeric entries of a document
    directory. Gaps in the numbering are tolerated.

    When no revision is requested, ``policy`` picks one: ``LATEST`` takes
    the highest number, ``OLDEST`` the lowest (the selection made by earlier
    versions of this repository layout).
    """

    def __init__(
        self,
        start_revision: int = 1,
        policy: RevisionPolicy = RevisionPolicy.LATEST,
    ):
        """Initialize the resolver.

        Args:
            start_revision: Revision number given to a document's first revision.
            policy: Selection rule used when no revision is supplied.
        """
        self.start_revision = parse_revision(start_revision)
        self.policy = policy

    def list_revisions(self, doc_dir: Path) -> list[Revision]:
        """List revision numbers present in a document directory.

        Args:
            doc_dir: The document's shard directory.

        Returns:
            Revision numbers in ascending numeric order; empty if the
            directory does not exist.

        Raises:
            RepositoryIOError: If the directory exists but cannot be read.
        """
        if not doc_dir.is_dir():
            return []

        try:
            with os.scandir(doc_dir) as entries:
                revisions = [
                    int(entry.name)
                    for entry in entries
                    if _is_revision_name(entry.name) and entry.is_dir()
                ]
        except OSError as e:
            raise RepositoryIOError(
                f"Could not open directory '{doc_dir}' to list revisions: {e}"
            ) from e

        return [Revision(r) for r in sorted(revisions) if r > 0]

    def resolve(self, doc_dir: Path, revision: int | str | None = None) -> Revision:
        """Pick the revision to operate on.

        Args:
            doc_dir: The document's shard directory.
            revision: Explicit revision; used verbatim after validation.

        Returns:
            The revision number.
        """
        if revision is not None:
            return parse_revision(revision)

        revisions = self.list_revisions(doc_dir)
        if not revisions:
            return self.start_revision

        if self.policy is RevisionPolicy.OLDEST:
            selected = revisions[0]
        else:
            selected = revisions[-1]
        logger.debug(f"Selected revision {selected} of {doc_dir} ({self.policy.value})")
        return selected

    def next_revision(self, doc_dir: Path) -> Revision:
        """Return the first unused revision number above the current maximum.

        Raises:
            InvalidRevisionError: If the document already holds revision 999.
        """
        revisions = self.list_revisions(doc_dir)
        if not revisions:
            return self.start_revision

        candidate = revisions[-1] + 1
        if candidate > MAX_REVISION:
            raise InvalidRevisionError(
                f"Document directory '{doc_dir}' has no revision numbers left "
                f"(maximum is {MAX_REVISION})"
            )
        return Revision(candidate)
