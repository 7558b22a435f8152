"""Mapping of document ids to sharded directory paths.

Layout::

    <root>/[M<ddd>/][k<ddd>/]<ddd>/<rrr>/<filename...>

The ``M`` bucket appears only for ids above 999,999 and the ``k`` bucket
only for ids above 999, so no directory level holds more than 1000
entries. No id-to-path table is stored anywhere; the path is always
recomputed from the id.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..core.exceptions import RepositoryUnavailableError


def shard_parts(doc_id: int) -> tuple[str, ...]:
    """Return the directory names leading to a document, root excluded.

    Args:
        doc_id: A validated document id.

    Returns:
        Tuple such as ``("M001", "k234", "567")``.
    """
    parts = []
    if doc_id > 999_999:
        parts.append(f"M{doc_id // 1_000_000:03d}")
    if doc_id > 999:
        parts.append(f"k{(doc_id // 1000) % 1000:03d}")
    parts.append(f"{doc_id % 1000:03d}")
    return tuple(parts)


def shard_path(root: Path, doc_id: int) -> Path:
    """Return the document directory for ``doc_id`` under ``root``.

    Pure: does not touch the disk.
    """
    return root.joinpath(*shard_parts(doc_id))


def revision_dirname(revision: int) -> str:
    """Return the directory name of a revision."""
    return f"{revision:03d}"


def check_root(root: Path) -> None:
    """Verify the repository root can be used.

    Raises:
        RepositoryUnavailableError: If the root is missing, not a directory,
            or not readable and searchable by this process.
    """
    if not root.exists():
        raise RepositoryUnavailableError(str(root), "does not exist")
    if not root.is_dir():
        raise RepositoryUnavailableError(str(root), "is not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise RepositoryUnavailableError(str(root), "cannot be accessed by this user")


__all__ = ["shard_parts", "shard_path", "revision_dirname", "check_root"]
