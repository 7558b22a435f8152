"""Custom exceptions for DMS.

None of these are retried internally; retry policy belongs to the caller.
Operations that fail part-way leave their side effects in place (created
bucket or document directories, files already copied to a destination).
"""


class DMSError(Exception):
    """Base exception for all DMS errors."""

    pass


class ConfigError(DMSError):
    """Configuration value is missing or malformed."""

    pass


class RepositoryUnavailableError(DMSError):
    """Repository root is missing, not a directory, or not accessible."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Repository '{root}' is unavailable: {reason}")


class InvalidInputError(DMSError):
    """Malformed document id, revision, or source file."""

    pass


class InvalidRevisionError(InvalidInputError):
    """Revision number is not a valid 3-digit revision."""

    pass


class DocumentNotFoundError(DMSError):
    """Document or revision directory does not exist."""

    def __init__(self, doc_id: int, revision: int | None = None):
        """Initialize exception with the missing document and revision.

        Args:
            doc_id: Id of the document that was not found.
            revision: Revision that was requested, if any.
        """
        self.doc_id = doc_id
        self.revision = revision
        if revision is None:
            message = f"Document not found: {doc_id}"
        else:
            message = f"Document not found: {doc_id} (revision {revision})"
        super().__init__(message)


class RepositoryIOError(DMSError):
    """Copy, mkdir, rename or readdir failed at the OS boundary."""

    pass


class EnumerationError(DMSError):
    """A directory could not be listed while walking the repository."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not open directory '{path}': {reason}")


class AllocatorExhaustedError(DMSError):
    """No further document ids can be allocated."""

    pass
