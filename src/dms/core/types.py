"""Type definitions for DMS."""

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import NewType

from .exceptions import InvalidInputError, InvalidRevisionError

DocumentId = NewType("DocumentId", int)
Revision = NewType("Revision", int)

# The M bucket is exactly three digits wide.
MAX_DOCUMENT_ID = 999_999_999
MAX_REVISION = 999

_DIGITS = re.compile(r"^[0-9]+$")


class RevisionPolicy(Enum):
    """Which revision to use when the caller does not name one."""

    LATEST = "latest"
    OLDEST = "oldest"


def _parse_positive(value: object, kind: str) -> int:
    """Parse an int or canonical decimal string into a positive int."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid {kind} {value!r}: booleans are not accepted")

    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not _DIGITS.match(text):
            raise InvalidInputError(f"Invalid {kind} {value!r}: not a decimal number")
        # "007" follows the 3-digit padding convention; "0007" does not.
        if len(text) > 3 and text.startswith("0"):
            raise InvalidInputError(f"Invalid {kind} {value!r}: non-canonical leading zeros")
        try:
            number = int(text)
        except ValueError as e:
            # Beyond the interpreter's int string-conversion limit
            raise InvalidInputError(f"Invalid {kind}: {len(text)} digits is too long") from e
    else:
        raise InvalidInputError(
            f"Invalid {kind} {value!r}: expected int or str, got {type(value).__name__}"
        )

    if number < 1:
        raise InvalidInputError(f"Invalid {kind} {value!r}: must be a positive integer")
    return number


def parse_document_id(value: object) -> DocumentId:
    """Validate a document id.

    Args:
        value: An int or a decimal string.

    Returns:
        The validated DocumentId.

    Raises:
        InvalidInputError: If the value is not a positive id in range.
    """
    number = _parse_positive(value, "document id")
    if number > MAX_DOCUMENT_ID:
        raise InvalidInputError(
            f"Invalid document id {value!r}: exceeds maximum {MAX_DOCUMENT_ID}"
        )
    return DocumentId(number)


def parse_revision(value: object) -> Revision:
    """Validate a revision number.

    Revision directories are named with three zero-padded digits, so
    anything from 1000 upwards would produce an ambiguous name.

    Args:
        value: An int or a decimal string.

    Returns:
        The validated Revision.

    Raises:
        InvalidRevisionError: If the value is not a revision in 1..999.
    """
    try:
        number = _parse_positive(value, "revision")
    except InvalidInputError as e:
        raise InvalidRevisionError(str(e)) from e
    if number > MAX_REVISION:
        raise InvalidRevisionError(
            f"Invalid revision {value!r}: revisions above {MAX_REVISION} are not supported"
        )
    return Revision(number)


@dataclass
class RepositoryStats:
    """Aggregate counts over a repository.

    Attributes:
        document_count: Number of documents found by enumeration.
        revision_count: Total revisions across all documents.
        file_count: Non-hidden regular files under the root.
        disk_bytes: Sum of the sizes of those files.
        next_id: Id the next add() will try first.
    """

    document_count: int
    revision_count: int
    file_count: int
    disk_bytes: int
    next_id: int

    def to_dict(self) -> dict[str, int]:
        """Convert to a plain dictionary."""
        return asdict(self)
