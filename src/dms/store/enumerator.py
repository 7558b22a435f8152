"""Reconstruction of document ids from the sharded directory tree.

There is no index of documents; the only record of which ids exist is the
set of shard directories, so listing documents means walking the tree.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterator

from loguru import logger

from ..core.exceptions import EnumerationError
from ..core.types import DocumentId

_MILLIONS = re.compile(r"^M([0-9]{3})$")
_THOUSANDS = re.compile(r"^k([0-9]{3})$")
_LEAF = re.compile(r"^[0-9]{1,3}$")


class DocumentEnumerator:
    """Lazy, restartable walk over the document ids under a root.

    Each call to ``iter()`` starts a fresh walk. Order follows the
    filesystem and is not sorted.

    Example:
        ids = sorted(DocumentEnumerator(Path("/var/dms")))
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def __iter__(self) -> Iterator[DocumentId]:
        return self._walk(self.root, prefix=0, in_millions=False, in_thousands=False)

    def _walk(
        self,
        directory: Path,
        prefix: int,
        in_millions: bool,
        in_thousands: bool,
    ) -> Iterator[DocumentId]:
        """Yield ids below ``directory``, offset by the bucket ``prefix``.

        Raises:
            EnumerationError: If ``directory`` or any bucket below it
                cannot be listed.
        """
        try:
            with os.scandir(directory) as it:
                entries = [(entry.name, entry.is_dir()) for entry in it]
        except OSError as e:
            raise EnumerationError(str(directory), str(e)) from e

        for name, is_dir in entries:
            if not is_dir:
                continue

            if not in_millions and not in_thousands and (match := _MILLIONS.match(name)):
                logger.trace(f"Descending into millions bucket {directory / name}")
                yield from self._walk(
                    directory / name,
                    prefix + int(match.group(1)) * 1_000_000,
                    in_millions=True,
                    in_thousands=False,
                )
            elif not in_thousands and (match := _THOUSANDS.match(name)):
                logger.trace(f"Descending into thousands bucket {directory / name}")
                yield from self._walk(
                    directory / name,
                    prefix + int(match.group(1)) * 1000,
                    in_millions=in_millions,
                    in_thousands=True,
                )
            elif _LEAF.match(name):
                doc_id = prefix + int(name)
                if doc_id > 0:
                    yield DocumentId(doc_id)


def iter_document_ids(root: Path) -> Iterator[DocumentId]:
    """Convenience generator over the ids under ``root``."""
    return iter(DocumentEnumerator(root))


__all__ = ["DocumentEnumerator", "iter_document_ids"]
