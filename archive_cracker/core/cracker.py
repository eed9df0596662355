"""
Main cracker class for the Archive Password Cracker.

This module provides the ArchiveCracker class that wires the candidate
stream, the worker pool and the checkers together.
"""

import os
import time
from typing import Optional

from tqdm import tqdm

from .charset import CharsetCatalog, Combination
from .checker import CheckerFactory, create_checker_factory
from .generator import CandidateStream
from .result import ResultBroadcaster
from .worker import GuessRegistry, WorkerPool
from archive_cracker.utils.config import Config
from archive_cracker.utils.exceptions import (
    ArchiveCrackerError,
    ArchiveNotFoundError,
    CheckerError,
)
from archive_cracker.utils.logger import get_default_logger


class ArchiveCracker:
    """Main class for cracking archive passwords"""

    def __init__(self, archive_path: str, config: Optional[Config] = None,
                 catalog: Optional[CharsetCatalog] = None,
                 checker_factory: Optional[CheckerFactory] = None,
                 logger=None):
        """Initialize with archive path and optional overrides

        Args:
            archive_path: Path to the encrypted archive
            config: Configuration, defaults to the user config file
            catalog: Charsets and lengths to search, defaults to the configured plan
            checker_factory: Creates one checker per worker, defaults to the configured strategy
            logger: Optional logger instance
        """
        if not os.path.exists(archive_path):
            raise ArchiveNotFoundError(f"Archive not found: {archive_path}")

        self.archive_path = archive_path
        self.config = config or Config()
        self.logger = logger or get_default_logger()

        self.workers = self.config.worker_count()
        self.catalog = catalog or self._catalog_from_config()
        self.checker_factory = checker_factory or create_checker_factory(
            archive_path,
            strategy=self.config.checker(),
            sevenzip_path=self.config.get("sevenzip_path", "7z"),
        )

        self.progress_bar = None
        self.stream = None
        self.expected_total = None
        self.total_passwords_tried = 0
        self.start_time = 0.0

    def _catalog_from_config(self) -> CharsetCatalog:
        groups = self.config.get("charsets")
        sizes = self.config.sizes()
        if groups:
            return CharsetCatalog.from_names(groups, sizes)
        return CharsetCatalog(sizes=sizes)

    def _on_combination(self, combination: Combination) -> None:
        if self.progress_bar is not None:
            self.progress_bar.set_description(
                f"len {combination.length} / {combination.charset.name}"
            )

    def _on_checked(self, candidate: bytes) -> None:
        if self.progress_bar is not None:
            self.progress_bar.update(1)

    def crack(self, resume_from: Optional[bytes] = None) -> Optional[bytes]:
        """Search the whole catalog for the archive's password

        Args:
            resume_from: Candidate to resume from, everything before it is skipped

        Returns:
            The found password or None if not found

        Raises:
            InvalidCandidateError: if no combination can produce resume_from
            CheckerError: if checking failed in a way that cannot be retried
        """
        self.stream = CandidateStream(
            self.catalog,
            resume_from=resume_from,
            progress_interval=self.config.get("progress_interval", 1000000),
            on_combination=self._on_combination,
            logger=self.logger,
        )
        pool = WorkerPool(
            self.checker_factory,
            workers=self.workers,
            broadcaster=ResultBroadcaster(),
            queue_size=self.config.queue_size(),
            backoff=self.config.get("backoff", 0.1),
            max_retries=self.config.get("max_retries", 100),
            guessed=GuessRegistry() if self.config.get("track_guesses") else None,
            on_checked=self._on_checked,
            logger=self.logger,
        )

        total_passwords = self.catalog.total_candidates()
        self.logger.info(f"Cracking {self.archive_path}")
        self.logger.info(f"Using {self.workers} workers")
        self.logger.info(f"Search plan: {self.catalog!r}")
        self.logger.info(f"Total possible passwords (before deduplication): {total_passwords:,}")

        # A resumed run starts mid-plan, so the bar only counts
        self.expected_total = None if resume_from is not None else self.catalog.distinct_candidates()
        if self.expected_total is not None:
            self.logger.info(f"Distinct passwords to check: {self.expected_total:,}")
        elif not self.catalog.is_nested():
            self.logger.info("Charsets are not nested, progress is counted without a total")

        self.start_time = time.time()
        self.progress_bar = tqdm(
            total=self.expected_total,
            unit="pw",
            disable=not self.config.get("progress_bar", True),
        )
        try:
            found_password = pool.run(self.stream)
        except ArchiveCrackerError:
            raise
        except Exception as e:
            raise CheckerError(f"Checking failed: {e}") from e
        finally:
            self.total_passwords_tried = pool.attempts
            self.progress_bar.close()
            self.progress_bar = None

        elapsed = time.time() - self.start_time
        if found_password is not None:
            self.logger.info(f"PASSWORD FOUND: {found_password.decode('latin-1')}")
            self.logger.info(f"Time taken: {elapsed:.2f} seconds")
            self.logger.info(f"Passwords tried: {self.total_passwords_tried:,}")
            return found_password

        self.logger.warning("PASSWORD NOT FOUND after trying all combinations!")
        self.logger.info(f"Total passwords checked: {self.total_passwords_tried:,}")
        self.logger.info(f"Duplicates skipped: {self.stream.duplicates:,}")
        self.logger.info(f"Total time spent: {elapsed:.2f} seconds")
        return None
