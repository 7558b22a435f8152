"""DMS - filesystem repository of revision-numbered documents."""

from .core import (
    Config,
    DMSError,
    DocumentNotFoundError,
    InvalidInputError,
    RepositoryStats,
    RevisionPolicy,
)
from .store import DocumentRepository

__version__ = "0.1.0"

__all__ = [
    "Config",
    "DMSError",
    "DocumentNotFoundError",
    "DocumentRepository",
    "InvalidInputError",
    "RepositoryStats",
    "RevisionPolicy",
    "__version__",
]
