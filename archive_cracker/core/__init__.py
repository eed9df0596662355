"""
Core functionality for the Archive Password Cracker.
"""

from .charset import (
    Charset,
    CharsetCatalog,
    Combination,
    LOWER,
    UPPER,
    DIGITS,
    SYMBOLS,
    ALL_ASCII,
    DEFAULT_CHARSETS,
    DEFAULT_SIZES,
)
from .checker import (
    Outcome,
    PasswordChecker,
    SevenZipChecker,
    ZipChecker,
    PdfChecker,
    create_checker_factory,
)
from .cracker import ArchiveCracker
from .generator import Odometer, PermutationGenerator, DeduplicationFilter, CandidateStream
from .result import ResultBroadcaster
from .worker import attempt_password, worker_process, GuessRegistry, WorkerPool
