"""
Character sets and the catalog of (length, charset) combinations to search.

Charsets are ordered byte alphabets. The catalog lists them from the cheapest
to the richest so that smaller alphabets are exhausted before their supersets.
"""

from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Union

from archive_cracker.utils.exceptions import ConfigError


def char_range(start: str, end: str) -> bytes:
    """Inclusive range of single-byte characters"""
    return bytes(range(ord(start), ord(end) + 1))


class Charset:
    """Immutable, ordered alphabet of distinct bytes"""

    __slots__ = ("_bytes", "_members", "name")

    def __init__(self, *sources: Union[bytes, str, "Charset"], name: Optional[str] = None):
        merged = bytearray()
        seen = set()
        for source in sources:
            if isinstance(source, str):
                source = source.encode("latin-1")
            for byte in source:
                if byte not in seen:
                    seen.add(byte)
                    merged.append(byte)
        self._bytes = bytes(merged)
        self._members = frozenset(seen)
        self.name = name or "+".join(
            s.name if isinstance(s, Charset) else "custom" for s in sources
        )

    def __len__(self) -> int:
        return len(self._bytes)

    def __iter__(self) -> Iterator[int]:
        return iter(self._bytes)

    def __getitem__(self, index: int) -> int:
        return self._bytes[index]

    def __contains__(self, byte: int) -> bool:
        return byte in self._members

    def __bytes__(self) -> bytes:
        return self._bytes

    def __eq__(self, other) -> bool:
        if not isinstance(other, Charset):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __repr__(self) -> str:
        return f"Charset({self.name!r}, {len(self)} chars)"

    def index(self, byte: int) -> int:
        """Position of a byte in the alphabet"""
        return self._bytes.index(byte)

    def contains_all(self, candidate: bytes) -> bool:
        """True if every byte of the candidate belongs to this charset"""
        return not candidate.translate(None, self._bytes)

    def issubset(self, other: "Charset") -> bool:
        return self._members <= other._members


LOWER = Charset(char_range('a', 'z'), name="lower")
UPPER = Charset(char_range('A', 'Z'), name="upper")
DIGITS = Charset(char_range('0', '9'), name="digits")
SYMBOLS = Charset(b"./-_!?@#$%^&*+=", name="symbols")
ALL_ASCII = Charset(char_range(' ', '~'), name="ascii")

NAMED_CHARSETS = {
    charset.name: charset for charset in (LOWER, UPPER, DIGITS, SYMBOLS, ALL_ASCII)
}

DEFAULT_CHARSETS = [
    LOWER,
    Charset(LOWER, DIGITS),
    Charset(LOWER, UPPER, DIGITS),
    Charset(LOWER, UPPER, DIGITS, SYMBOLS),
    ALL_ASCII,
]

# A common length first, then ascending
DEFAULT_SIZES = [6, 1, 2, 3, 4, 5, 7, 8]


class Combination(NamedTuple):
    """One (length, charset) entry of the search plan"""
    length: int
    charset: Charset
    index: int

    @property
    def total(self) -> int:
        return len(self.charset) ** self.length


class CharsetCatalog:
    """Ordered charsets and lengths that make up the whole search"""

    def __init__(self, charsets: Optional[Sequence[Charset]] = None,
                 sizes: Optional[Sequence[int]] = None):
        self.charsets = list(DEFAULT_CHARSETS if charsets is None else charsets)
        self.sizes = list(DEFAULT_SIZES if sizes is None else sizes)

        if not self.charsets:
            raise ValueError("At least one charset must be provided")
        if not self.sizes:
            raise ValueError("At least one password length must be provided")
        for charset in self.charsets:
            if not len(charset):
                raise ValueError("Charsets must not be empty")
        for size in self.sizes:
            if size < 1:
                raise ValueError(f"Password length must be positive, got {size}")

    @classmethod
    def from_names(cls, groups: Iterable[Iterable[str]],
                   sizes: Optional[Sequence[int]] = None) -> "CharsetCatalog":
        """Build a catalog from lists of charset names, e.g. [["lower"], ["lower", "digits"]]"""
        charsets = []
        for group in groups:
            parts = []
            for name in group:
                if name not in NAMED_CHARSETS:
                    raise ConfigError(
                        f"Unknown charset {name!r}, expected one of {', '.join(NAMED_CHARSETS)}"
                    )
                parts.append(NAMED_CHARSETS[name])
            if not parts:
                raise ConfigError("Charset groups must name at least one charset")
            charsets.append(Charset(*parts))
        if not charsets:
            raise ConfigError("charsets must list at least one group")
        return cls(charsets, sizes)

    def combinations(self) -> Iterator[Combination]:
        """Every (length, charset) pair in search order"""
        for length in self.sizes:
            for index, charset in enumerate(self.charsets):
                yield Combination(length, charset, index)

    def total_candidates(self) -> int:
        """Upper bound on candidates, before deduplication"""
        return sum(combination.total for combination in self.combinations())

    def distinct_candidates(self) -> Optional[int]:
        """Candidates left after deduplication, known only for nested catalogs

        Every string of a nested catalog's richest charset is tried exactly
        once per length.
        """
        if not self.is_nested():
            return None
        richest = len(self.charsets[-1])
        return sum(richest ** length for length in self.sizes)

    def is_nested(self) -> bool:
        """True if each charset contains every charset before it"""
        return all(
            earlier.issubset(later)
            for earlier, later in zip(self.charsets, self.charsets[1:])
        )

    def can_produce(self, candidate: bytes) -> bool:
        """True if some combination of the plan generates the candidate"""
        return len(candidate) in self.sizes and any(
            charset.contains_all(candidate) for charset in self.charsets
        )

    def __len__(self) -> int:
        return len(self.sizes) * len(self.charsets)

    def __repr__(self) -> str:
        names: List[str] = [charset.name for charset in self.charsets]
        return f"CharsetCatalog(charsets={names}, sizes={self.sizes})"
