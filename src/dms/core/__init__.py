"""Core types, configuration and errors for DMS."""

from .config import Config
from .exceptions import (
    AllocatorExhaustedError,
    ConfigError,
    DMSError,
    DocumentNotFoundError,
    EnumerationError,
    InvalidInputError,
    InvalidRevisionError,
    RepositoryIOError,
    RepositoryUnavailableError,
)
from .types import (
    MAX_DOCUMENT_ID,
    MAX_REVISION,
    DocumentId,
    RepositoryStats,
    Revision,
    RevisionPolicy,
    parse_document_id,
    parse_revision,
)

__all__ = [
    "Config",
    "DMSError",
    "ConfigError",
    "RepositoryUnavailableError",
    "InvalidInputError",
    "InvalidRevisionError",
    "DocumentNotFoundError",
    "RepositoryIOError",
    "EnumerationError",
    "AllocatorExhaustedError",
    "DocumentId",
    "Revision",
    "RevisionPolicy",
    "RepositoryStats",
    "MAX_DOCUMENT_ID",
    "MAX_REVISION",
    "parse_document_id",
    "parse_revision",
]
