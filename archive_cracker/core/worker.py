"""
Worker module for the Archive Password Cracker.

This module contains the worker threads that drain the shared candidate
queue and the pool that feeds them.
"""

import logging
import queue
import threading
import time
from typing import Callable, Iterable, Optional

from .checker import CheckerFactory, Outcome, PasswordChecker
from .result import ResultBroadcaster
from archive_cracker.utils.exceptions import ResourceExhaustedError
from archive_cracker.utils.logger import get_default_logger


# How long blocked queue operations wait before rechecking cancellation
POLL_INTERVAL = 0.05


class GuessRegistry:
    """Thread-safe record of candidates already handed to a checker"""

    def __init__(self):
        self._lock = threading.Lock()
        self._seen = set()

    def claim(self, candidate: bytes) -> bool:
        """Record a candidate, returning False if it was already claimed"""
        with self._lock:
            if candidate in self._seen:
                return False
            self._seen.add(candidate)
            return True

    def __contains__(self, candidate: bytes) -> bool:
        with self._lock:
            return candidate in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)


def attempt_password(checker: PasswordChecker,
                     candidate: bytes,
                     backoff: float = 0.1,
                     max_retries: Optional[int] = 100,
                     logger: Optional[logging.Logger] = None) -> Outcome:
    """Try a single candidate, retrying it while the checker is out of resources

    Args:
        checker: Checker owned by the calling worker
        candidate: Candidate to try
        backoff: Seconds to wait before each retry
        max_retries: Retries allowed before giving up, None for unlimited
        logger: Optional logger instance

    Returns:
        Outcome.SUCCESS or Outcome.WRONG_PASSWORD

    Raises:
        ResourceExhaustedError: if the retries ran out
        CheckerError: on any fatal checker failure
    """
    logger = logger or get_default_logger()
    retries = 0
    while True:
        outcome = checker.check(candidate)
        if outcome is not Outcome.RESOURCE_EXHAUSTED:
            return outcome
        if max_retries is not None and retries >= max_retries:
            raise ResourceExhaustedError(
                f"Still out of resources after {retries} retries of {candidate!r}"
            )
        retries += 1
        logger.warning("Too many open files, backing off...")
        time.sleep(backoff)


def worker_process(checker_factory: CheckerFactory,
                   tasks: queue.Queue,
                   broadcaster: ResultBroadcaster,
                   backoff: float = 0.1,
                   max_retries: Optional[int] = 100,
                   guessed: Optional[GuessRegistry] = None,
                   on_checked: Optional[Callable[[bytes], None]] = None,
                   worker_id: Optional[int] = None,
                   logger: Optional[logging.Logger] = None) -> None:
    """Worker thread that checks candidates until the queue ends or the search stops

    Args:
        checker_factory: Creates the checker this worker owns
        tasks: Shared candidate queue, None marks the end of the stream
        broadcaster: Result latch and cancellation signal
        backoff: Seconds to wait before retrying an exhausted check
        max_retries: Retries allowed per candidate
        guessed: Optional registry of candidates already claimed
        on_checked: Called with each candidate after it was checked
        worker_id: Optional ID for this worker
        logger: Optional logger instance
    """
    logger = logger or get_default_logger()
    worker_prefix = f"Worker-{worker_id}: " if worker_id is not None else ""

    try:
        checker = checker_factory()
    except Exception as e:
        logger.error(f"{worker_prefix}Could not create checker: {e}")
        broadcaster.fail(e)
        return

    with checker:
        while not broadcaster.cancelled:
            try:
                candidate = tasks.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue

            if candidate is None:
                break

            if guessed is not None and not guessed.claim(candidate):
                continue

            try:
                outcome = attempt_password(checker, candidate, backoff, max_retries, logger)
            except Exception as e:
                logger.error(f"{worker_prefix}Error trying password {candidate!r}: {e}")
                broadcaster.fail(e)
                return

            if on_checked:
                on_checked(candidate)

            if outcome is Outcome.SUCCESS:
                if broadcaster.publish(candidate):
                    logger.info(f"{worker_prefix}Got 'em! The password is: {candidate.decode('latin-1')}")
                return


class WorkerPool:
    """Fixed set of worker threads sharing one bounded candidate queue"""

    def __init__(self,
                 checker_factory: CheckerFactory,
                 workers: int,
                 broadcaster: Optional[ResultBroadcaster] = None,
                 queue_size: Optional[int] = None,
                 backoff: float = 0.1,
                 max_retries: Optional[int] = 100,
                 guessed: Optional[GuessRegistry] = None,
                 on_checked: Optional[Callable[[bytes], None]] = None,
                 logger: Optional[logging.Logger] = None):
        if workers < 1:
            raise ValueError("At least one worker is required")
        self.checker_factory = checker_factory
        self.workers = workers
        self.broadcaster = broadcaster or ResultBroadcaster()
        self.queue_size = queue_size or workers
        self.backoff = backoff
        self.max_retries = max_retries
        self.guessed = guessed
        self.on_checked = on_checked
        self.logger = logger or get_default_logger()

        self.attempts = 0
        self._attempts_lock = threading.Lock()
        self.active_threads = []

    def _record_attempt(self, candidate: bytes) -> None:
        with self._attempts_lock:
            self.attempts += 1
            if self.on_checked:
                self.on_checked(candidate)

    def _put(self, tasks: queue.Queue, item: Optional[bytes]) -> bool:
        """Block until the item is queued, giving up if the search stops"""
        while not self.broadcaster.cancelled:
            try:
                tasks.put(item, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def run(self, candidates: Iterable[bytes]) -> Optional[bytes]:
        """Feed candidates to the workers from the calling thread

        Returns:
            The found password, or None once every candidate was checked

        Raises:
            The fatal error reported by a worker, if any
        """
        tasks = queue.Queue(maxsize=self.queue_size)

        self.active_threads = [
            threading.Thread(
                target=worker_process,
                args=(self.checker_factory, tasks, self.broadcaster),
                kwargs={
                    "backoff": self.backoff,
                    "max_retries": self.max_retries,
                    "guessed": self.guessed,
                    "on_checked": self._record_attempt,
                    "worker_id": i,
                    "logger": self.logger,
                },
                name=f"archive-cracker-worker-{i}",
                daemon=True,
            )
            for i in range(self.workers)
        ]
        for thread in self.active_threads:
            thread.start()

        try:
            for candidate in candidates:
                if not self._put(tasks, candidate):
                    break
            else:
                for _ in self.active_threads:
                    if not self._put(tasks, None):
                        break
        except BaseException:
            self.broadcaster.cancel()
            raise
        finally:
            for thread in self.active_threads:
                thread.join()
            self.active_threads = []

        return self.broadcaster.result()
