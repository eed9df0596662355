"""
Utility modules for the Archive Password Cracker.
"""

from .config import Config, verbosity_to_level
from .exceptions import (
    ArchiveCrackerError,
    ArchiveNotFoundError,
    ArchiveNotEncryptedError,
    InvalidCandidateError,
    CheckerError,
    ResourceExhaustedError,
    ConfigError,
)
from .logger import Logger, get_default_logger
