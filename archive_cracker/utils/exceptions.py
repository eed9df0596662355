"""
Custom exceptions for the Archive Password Cracker.
"""

class ArchiveCrackerError(Exception):
    """Base exception for archive cracker errors"""
    pass


class ArchiveNotFoundError(ArchiveCrackerError):
    """Archive file not found"""
    pass


class ArchiveNotEncryptedError(ArchiveCrackerError):
    """Archive has nothing protected by a password"""
    pass


class InvalidCandidateError(ArchiveCrackerError):
    """Candidate cannot be produced by the search plan"""
    pass


class CheckerError(ArchiveCrackerError):
    """Unrecoverable error while checking a password"""
    pass


class ResourceExhaustedError(CheckerError):
    """Checker kept running out of resources for the same candidate"""
    pass


class ConfigError(ArchiveCrackerError):
    """Error in configuration"""
    pass
