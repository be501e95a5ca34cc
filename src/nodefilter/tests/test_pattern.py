"""
Pattern tests
"""

import pytest

from nodefilter.errors import PatternError
from nodefilter.pattern import Pattern, PatternType, glob_to_regex


class TestPatternTypes:

    @pytest.mark.parametrize("pattern,text,expected", [
        ("^rep", "report.pdf", True),
        ("^rep", "my report", False),
        ("$.pdf", "report.pdf", True),
        ("$.pdf", "report.pdf.bak", False),
        ("~README", "readme", True),
        ("~README", "readme.md", False),
        ("=README", "README", True),
        ("=README", "readme", False),
        (">^IMG_\\d{4}", "IMG_1234.jpg", True),
        (">\\d{4}$", "IMG_1234.jpg", False),
        ('"*.jpg', "photo.jpg", True),
        ('"*.jpg', "photo.jpg.txt", False),
        ('"photo', "photo.jpg", False),
        ("'port", "report", True),
        ("'Port", "report", False),
        ("port", "report", True),
        ("*.txt", "notes.txt", True),
        ("note?.txt", "notes.txt", True),
        ("note?.txt", "note.txt", False),
    ])
    def test_match(self, pattern, text, expected):
        assert Pattern(pattern).is_match(text) is expected

    def test_default_type_selection(self):
        assert Pattern("abc").types == [PatternType.SEARCH]
        assert Pattern("a*c").types == [PatternType.GLOB]
        assert Pattern("a?c").types == [PatternType.GLOB]

    def test_glob_has_no_brackets(self):
        assert Pattern('"[ab].txt').is_match("[ab].txt")
        assert not Pattern('"[ab].txt').is_match("a.txt")

    def test_glob_star_matches_separators(self):
        assert glob_to_regex("a*z").match("a/b/z")


class TestAlternatives:

    def test_any_alternative_matches(self):
        p = Pattern("|$.jpg|$.png|>^IMG_")
        assert p.types == [PatternType.END, PatternType.END, PatternType.REGEX]
        assert p.is_match("a.png")
        assert p.is_match("IMG_x.gif")
        assert not p.is_match("a.gif")

    def test_single_alternative(self):
        assert Pattern("|foo").is_match("foobar")


class TestPatternErrors:

    def test_empty(self):
        with pytest.raises(PatternError, match="empty"):
            Pattern("")

    @pytest.mark.parametrize("first", list("!@()[]{}-+:%<"))
    def test_forbidden_first_char(self, first):
        with pytest.raises(PatternError):
            Pattern(first + "abc")

    def test_invalid_regex(self):
        with pytest.raises(PatternError, match="regular expression"):
            Pattern(">a(b")
