"""Copy strategies and file selectors for retrieving revisions.

``DocumentRepository.get`` gathers the files of a revision and hands them
to a copy strategy together with the caller's destination. The strategy
decides what "destination" means: a directory, an archive path, a remote
location. This keeps transport-specific packaging out of the repository.

Example:
    repo.get(42, destination=Path("out"))                    # plain copy
    repo.get(42, destination=Path("doc42.tar.gz"),
             copier=TarArchiveCopier())                      # bundle
    repo.get(42, destination=Path("out"), selector=by_suffix(".pdf"))
"""

from __future__ import annotations

import shutil
import tarfile
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from loguru import logger

from ..core.exceptions import InvalidInputError, RepositoryIOError

Selector = Callable[[Path], bool]


@runtime_checkable
class CopyStrategy(Protocol):
    """Delivers a revision's files to a caller-defined destination."""

    def __call__(self, files: list[Path], destination: Any) -> Any:
        """Copy ``files`` to ``destination``.

        Args:
            files: Full paths of the selected files, sorted by name.
            destination: Whatever the caller passed to ``get``.

        Returns:
            Strategy-specific result, returned unchanged by ``get``.
        """
        ...


class FileSystemCopier:
    """Copies each file into a destination directory.

    Copies happen in order; the first failure aborts the rest and files
    already copied stay where they are.
    """

    def __call__(self, files: list[Path], destination: Any) -> list[Path]:
        target_dir = Path(destination)
        if not target_dir.is_dir():
            raise InvalidInputError(f"Destination '{target_dir}' is not a directory")

        copied = []
        for source in files:
            target = target_dir / source.name
            try:
                shutil.copyfile(source, target)
            except OSError as e:
                raise RepositoryIOError(f"Could not copy '{source}' to '{target}': {e}") from e
            copied.append(target)
            logger.debug(f"Copied {source} -> {target}")
        return copied


class TarArchiveCopier:
    """Bundles the files into a single tar archive at the destination path."""

    def __init__(self, compression: str = "gz"):
        """Initialize the copier.

        Args:
            compression: One of "", "gz", "bz2", "xz".
        """
        if compression not in ("", "gz", "bz2", "xz"):
            raise ValueError(f"Unsupported compression: {compression!r}")
        self.compression = compression

    def __call__(self, files: list[Path], destination: Any) -> Path:
        archive = Path(destination)
        mode = f"w:{self.compression}" if self.compression else "w"
        try:
            with tarfile.open(archive, mode) as tar:
                for source in files:
                    tar.add(source, arcname=source.name, recursive=False)
        except (OSError, tarfile.TarError) as e:
            raise RepositoryIOError(f"Could not write archive '{archive}': {e}") from e
        logger.debug(f"Archived {len(files)} files into {archive}")
        return archive


def by_suffix(*suffixes: str) -> Selector:
    """Select files whose suffix is one of ``suffixes`` (case-insensitive)."""
    wanted = {s.lower() if s.startswith(".") else f".{s.lower()}" for s in suffixes}

    def select(path: Path) -> bool:
        return path.suffix.lower() in wanted

    return select


def by_glob(pattern: str) -> Selector:
    """Select files whose name matches a shell-style pattern."""

    def select(path: Path) -> bool:
        return fnmatch(path.name, pattern)

    return select


__all__ = [
    "CopyStrategy",
    "FileSystemCopier",
    "Selector",
    "TarArchiveCopier",
    "by_glob",
    "by_suffix",
]
