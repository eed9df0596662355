"""
Archive Password Cracker

Exhaustive password recovery for encrypted archives over increasingly large
character sets and lengths.
"""

from archive_cracker.core.cracker import ArchiveCracker
from archive_cracker.core.charset import (
    Charset,
    CharsetCatalog,
    Combination,
    DEFAULT_CHARSETS,
    DEFAULT_SIZES,
)
from archive_cracker.core.generator import (
    PermutationGenerator,
    DeduplicationFilter,
    CandidateStream,
)

__version__ = "0.1.0"
