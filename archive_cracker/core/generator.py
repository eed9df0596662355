"""
Candidate generation for the Archive Password Cracker.

This module enumerates every fixed-length string over a charset in odometer
order, drops candidates already covered by a smaller completed charset, and
sequences the whole search plan into a single lazy stream.
"""

import logging
from typing import Callable, Iterator, List, Optional

from .charset import Charset, CharsetCatalog, Combination
from archive_cracker.utils.exceptions import InvalidCandidateError
from archive_cracker.utils.logger import get_default_logger


class Odometer:
    """Mixed-radix counter of fixed width, one counter per character slot

    The rightmost counter moves fastest. Carry propagates leftward by index.
    """

    def __init__(self, base: int, width: int):
        if base < 1:
            raise ValueError("Odometer base must be positive")
        if width < 1:
            raise ValueError("Odometer width must be positive")
        self.base = base
        self.width = width
        self.counters = [0] * width

    def advance(self) -> int:
        """Step forward once

        Returns:
            The leftmost position whose counter changed, or -1 when the
            odometer wrapped back to all zeros (cycle complete).
        """
        counters = self.counters
        pos = self.width - 1
        while pos >= 0:
            counters[pos] += 1
            if counters[pos] < self.base:
                return pos
            counters[pos] = 0
            pos -= 1
        return -1

    def set_value(self, value: int) -> None:
        """Position the counters at an ordinal in [0, base ** width)"""
        if value < 0 or value >= self.base ** self.width:
            raise ValueError(f"Position must be between 0 and {self.base ** self.width - 1}")
        for pos in range(self.width - 1, -1, -1):
            value, self.counters[pos] = divmod(value, self.base)

    def value(self) -> int:
        result = 0
        for counter in self.counters:
            result = result * self.base + counter
        return result


class PermutationGenerator:
    """Lazily yields every string of charset^length exactly once

    Order is lexicographic over the charset order: the first candidate repeats
    the charset's first byte, the last repeats its last byte. Passing
    ``resume_from`` makes that candidate the first one emitted and suppresses
    everything before it.
    """

    def __init__(self, charset: Charset, length: int, resume_from: Optional[bytes] = None):
        if not len(charset):
            raise ValueError("Charset must not be empty")
        if length < 1:
            raise ValueError(f"Password length must be positive, got {length}")
        self.charset = charset
        self.length = length
        self.start = 0 if resume_from is None else self.position_of(resume_from)

    @property
    def total(self) -> int:
        """Number of candidates in a full cycle"""
        return len(self.charset) ** self.length

    def position_of(self, candidate: bytes) -> int:
        """Convert a candidate to its ordinal position"""
        if len(candidate) != self.length:
            raise ValueError(f"Candidate length must be {self.length}")
        odometer = Odometer(len(self.charset), self.length)
        for pos, byte in enumerate(candidate):
            if byte not in self.charset:
                raise ValueError(f"Invalid character in candidate: {chr(byte)!r}")
            odometer.counters[pos] = self.charset.index(byte)
        return odometer.value()

    def candidate_at(self, position: int) -> bytes:
        """Convert an ordinal position to a candidate"""
        odometer = Odometer(len(self.charset), self.length)
        odometer.set_value(position)
        return bytes(self.charset[counter] for counter in odometer.counters)

    def __len__(self) -> int:
        return self.total - self.start

    def __iter__(self) -> Iterator[bytes]:
        charset = self.charset
        odometer = Odometer(len(charset), self.length)
        odometer.set_value(self.start)
        counters = odometer.counters
        buf = bytearray(charset[counter] for counter in counters)

        while True:
            yield bytes(buf)
            changed = odometer.advance()
            if changed < 0:
                return
            # Positions left of the carry are unchanged
            for pos in range(changed, self.length):
                buf[pos] = charset[counters[pos]]


class DeduplicationFilter:
    """Skips candidates a completed charset of the same length already covered

    The completed list is owned by the caller and only read here. A candidate
    is skipped when a single completed charset contains all of its bytes. For
    nested catalogs this is the same as every byte belonging to some
    completed charset; for non-nested ones it never skips an untested mix.
    """

    def __init__(self, completed: List[Charset]):
        self.completed = completed

    def should_skip(self, candidate: bytes) -> bool:
        for charset in self.completed:
            if charset.contains_all(candidate):
                return True
        return False


class CandidateStream:
    """Single lazy stream over every combination of a catalog

    Owns the completed-charset bookkeeping, so it must be iterated from one
    thread only.
    """

    def __init__(self, catalog: CharsetCatalog, resume_from: Optional[bytes] = None,
                 progress_interval: int = 1000000,
                 on_combination: Optional[Callable[[Combination], None]] = None,
                 logger: Optional[logging.Logger] = None):
        if resume_from is not None and not catalog.can_produce(resume_from):
            raise InvalidCandidateError(
                f"Resume candidate {resume_from!r} is not produced by any "
                f"combination of {catalog!r}"
            )
        self.catalog = catalog
        self.resume_from = resume_from
        self.progress_interval = progress_interval
        self.on_combination = on_combination
        self.logger = logger or get_default_logger()

        self.generated = 0
        self.emitted = 0
        self.duplicates = 0
        self.suppressed_combinations = 0

    def _generator_for(self, combination: Combination) -> Optional[PermutationGenerator]:
        """Generator for a combination, honoring a pending resume marker"""
        target = self.resume_from
        if target is None:
            return PermutationGenerator(combination.charset, combination.length)
        if len(target) != combination.length or not combination.charset.contains_all(target):
            return None
        self.resume_from = None
        self.logger.info(f"Resuming from {target.decode('latin-1')!r}")
        return PermutationGenerator(combination.charset, combination.length, resume_from=target)

    def __iter__(self) -> Iterator[bytes]:
        completed: List[Charset] = []
        dedup = DeduplicationFilter(completed)
        current_length = None

        for combination in self.catalog.combinations():
            if combination.length != current_length:
                completed.clear()
                current_length = combination.length

            generator = self._generator_for(combination)
            if generator is None:
                # Covered by the run being resumed
                self.suppressed_combinations += 1
                completed.append(combination.charset)
                continue

            self.logger.info(
                f"Trying {len(combination.charset)} character set of length {combination.length}"
            )
            self.logger.debug(f"Characters: {bytes(combination.charset).decode('latin-1')}")
            if self.on_combination:
                self.on_combination(combination)

            for candidate in generator:
                self.generated += 1
                if self.progress_interval and self.generated % self.progress_interval == 0:
                    self.logger.info(
                        f"guess {self.generated:,}: {candidate.decode('latin-1')}"
                    )
                if dedup.should_skip(candidate):
                    self.duplicates += 1
                    continue
                self.emitted += 1
                yield candidate

            completed.append(combination.charset)
