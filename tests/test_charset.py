import pytest

from archive_cracker.core.charset import (
    ALL_ASCII,
    DEFAULT_CHARSETS,
    DEFAULT_SIZES,
    DIGITS,
    LOWER,
    SYMBOLS,
    UPPER,
    Charset,
    CharsetCatalog,
    Combination,
    char_range,
)
from archive_cracker.utils.exceptions import ConfigError


class TestCharset:
    """Test suite for Charset"""

    def test_char_range_is_inclusive(self):
        assert char_range('a', 'e') == b"abcde"

    def test_first_occurrence_wins(self):
        charset = Charset(b"abca", b"dcb")
        assert bytes(charset) == b"abcd"
        assert len(charset) == 4

    def test_accepts_text_and_charsets(self):
        charset = Charset("xy", Charset(b"yz"))
        assert bytes(charset) == b"xyz"

    def test_membership(self):
        assert ord("q") in LOWER
        assert ord("Q") not in LOWER
        assert LOWER.index(ord("c")) == 2
        assert LOWER[25] == ord("z")

    def test_contains_all(self):
        assert LOWER.contains_all(b"abcdefg")
        assert not LOWER.contains_all(b"abcDefg")
        assert LOWER.contains_all(b"")

    def test_builtin_sizes(self):
        assert len(LOWER) == 26
        assert len(UPPER) == 26
        assert len(DIGITS) == 10
        assert len(SYMBOLS) == 15
        assert len(ALL_ASCII) == 95
        assert bytes(ALL_ASCII)[0] == ord(" ")
        assert bytes(ALL_ASCII)[-1] == ord("~")

    def test_merged_name(self):
        assert Charset(LOWER, DIGITS).name == "lower+digits"
        assert Charset(b"01", name="bits").name == "bits"

    def test_equality_and_hash(self):
        assert Charset(LOWER, DIGITS) == Charset(bytes(LOWER) + bytes(DIGITS))
        assert Charset(b"ab") != Charset(b"ba")
        assert len({Charset(b"ab"), Charset(b"ab", b"a")}) == 1

    def test_subset(self):
        assert LOWER.issubset(Charset(LOWER, DIGITS))
        assert not UPPER.issubset(Charset(LOWER, DIGITS))


class TestCharsetCatalog:
    """Test suite for CharsetCatalog"""

    def test_defaults(self):
        catalog = CharsetCatalog()
        assert catalog.sizes == [6, 1, 2, 3, 4, 5, 7, 8]
        assert catalog.charsets == DEFAULT_CHARSETS
        assert len(catalog) == len(DEFAULT_SIZES) * 5

    def test_default_charsets_grow(self):
        sizes = [len(charset) for charset in DEFAULT_CHARSETS]
        assert sizes == [26, 36, 62, 77, 95]
        assert CharsetCatalog().is_nested()

    def test_combination_order(self):
        catalog = CharsetCatalog([Charset(b"ab"), Charset(b"abc")], sizes=[2, 1])
        combos = list(catalog.combinations())
        assert [(c.length, c.index) for c in combos] == [(2, 0), (2, 1), (1, 0), (1, 1)]
        assert combos[0] == Combination(2, Charset(b"ab"), 0)
        assert combos[1].total == 9

    def test_total_candidates(self):
        catalog = CharsetCatalog([Charset(b"ab"), Charset(b"abc")], sizes=[1, 2])
        assert catalog.total_candidates() == 2 + 3 + 4 + 9

    def test_not_nested(self):
        catalog = CharsetCatalog([LOWER, DIGITS])
        assert not catalog.is_nested()
        assert catalog.distinct_candidates() is None

    def test_distinct_candidates(self):
        catalog = CharsetCatalog([Charset(b"ab"), Charset(b"abc")], sizes=[1, 2])
        # Each length tries the richest charset once
        assert catalog.distinct_candidates() == 3 + 9

    def test_can_produce(self):
        catalog = CharsetCatalog([LOWER, Charset(LOWER, DIGITS)], sizes=[2, 3])
        assert catalog.can_produce(b"a1")
        assert catalog.can_produce(b"abc")
        assert not catalog.can_produce(b"a")
        assert not catalog.can_produce(b"A1")

    def test_from_names(self):
        catalog = CharsetCatalog.from_names([["digits"], ["lower", "digits"]], sizes=[4])
        assert catalog.charsets == [DIGITS, Charset(DIGITS, LOWER)]
        assert catalog.sizes == [4]

    def test_from_names_rejects_unknown(self):
        with pytest.raises(ConfigError):
            CharsetCatalog.from_names([["emoji"]])

    def test_from_names_rejects_empty_group(self):
        with pytest.raises(ConfigError):
            CharsetCatalog.from_names([[]])

    @pytest.mark.parametrize("charsets,sizes", [
        ([], [1]),
        ([LOWER], []),
        ([Charset(b"")], [1]),
        ([LOWER], [0]),
    ])
    def test_invalid(self, charsets, sizes):
        with pytest.raises(ValueError):
            CharsetCatalog(charsets, sizes)
