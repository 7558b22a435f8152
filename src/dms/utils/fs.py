"""Filesystem helpers for directory creation, staging and disk usage."""

import errno
import os
import tempfile
from pathlib import Path

from loguru import logger

STAGING_PREFIX = ".staging-"


def is_hidden(name: str) -> bool:
    """Return True for dot-prefixed entry names."""
    return name.startswith(".")


def make_dirs(path: Path, mode: int) -> list[Path]:
    """Create ``path`` and any missing parents, each with ``mode``.

    The mode is applied with chmod after creation so the process umask
    does not narrow it.

    Args:
        path: Directory to create.
        mode: Permission bits for every directory created.

    Returns:
        The directories that were created, outermost first.

    Raises:
        OSError: If a directory cannot be created.
    """
    missing: list[Path] = []
    current = path
    while not current.exists():
        missing.append(current)
        if current.parent == current:
            break
        current = current.parent

    created = []
    for directory in reversed(missing):
        try:
            directory.mkdir(mode=mode)
        except FileExistsError:
            # Created concurrently by someone else
            continue
        os.chmod(directory, mode)
        created.append(directory)
        logger.debug(f"Created directory {directory} with mode {mode:o}")
    return created


def claim_dir(path: Path, mode: int) -> bool:
    """Create ``path`` exclusively.

    Args:
        path: Directory to create. Its parent must exist.
        mode: Permission bits for the new directory.

    Returns:
        True if this call created the directory, False if it already existed.
    """
    try:
        path.mkdir(mode=mode)
    except FileExistsError:
        return False
    os.chmod(path, mode)
    return True


def make_staging_dir(parent: Path, mode: int) -> Path:
    """Create a hidden temporary directory inside ``parent``.

    Staging inside the destination's parent keeps the final rename on a
    single filesystem.
    """
    staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=parent))
    os.chmod(staging, mode)
    return staging


def publish_dir(staging: Path, target: Path) -> None:
    """Rename a fully populated staging directory to its final name.

    Raises:
        FileExistsError: If ``target`` already exists.
        OSError: If the rename fails.
    """
    # os.rename silently replaces an empty directory on POSIX
    if target.exists():
        raise FileExistsError(f"{target} already exists")
    try:
        staging.rename(target)
    except OSError as e:
        # A non-empty target created after the check above
        if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
            raise FileExistsError(e.errno, f"{target} already exists") from e
        raise
    logger.debug(f"Published {staging.name} as {target}")


def list_files(directory: Path) -> list[Path]:
    """List non-hidden regular files in ``directory``, sorted by name.

    Raises:
        OSError: If the directory cannot be read.
    """
    files = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if is_hidden(entry.name):
                logger.debug(f"Skipping '{entry.name}' since it is a hidden file")
                continue
            if not entry.is_file():
                logger.debug(f"Skipping '{entry.name}' since it is not a regular file")
                continue
            files.append(Path(entry.path))
    return sorted(files, key=lambda p: p.name)


def disk_usage(root: Path) -> tuple[int, int]:
    """Count non-hidden regular files under ``root`` and sum their sizes.

    Hidden files and hidden directories (including staging directories)
    are skipped. Symlinks are not followed.

    Returns:
        Tuple of (file_count, total_bytes).

    Raises:
        OSError: If any directory cannot be read.
    """
    file_count = 0
    total_bytes = 0

    def _raise(error: OSError) -> None:
        raise error

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = [d for d in dirnames if not is_hidden(d)]
        for name in filenames:
            if is_hidden(name):
                continue
            path = os.path.join(dirpath, name)
            if os.path.islink(path):
                continue
            file_count += 1
            total_bytes += os.stat(path).st_size

    return file_count, total_bytes


def prune_empty_dirs(start: Path, stop: Path) -> list[Path]:
    """Remove ``start`` and its ancestors while they are empty.

    Stops before removing ``stop`` itself.

    Returns:
        The directories that were removed.
    """
    removed = []
    current = start
    while current != stop and stop in current.parents:
        if not current.is_dir() or any(current.iterdir()):
            break
        current.rmdir()
        removed.append(current)
        current = current.parent
    return removed
