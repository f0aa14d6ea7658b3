"""Tests for date tag normalization."""

import pytest

from mpd_minion.domain.library.dates import DateNormalizer, DateTemplate


class TestDateTemplate:
    """Tests for DateTemplate."""

    def test_full_date(self) -> None:
        """Test a complete ISO date."""
        assert DateTemplate("YYYY-MM-DD").try_parse("2001-05-06") == "2001-05-06"

    def test_trailing_text_is_ignored(self) -> None:
        """Test only the start of the value has to match."""
        assert DateTemplate("YYYY-MM-DD").try_parse("2001-05-06T00:00Z") == "2001-05-06"

    def test_reordered_template(self) -> None:
        """Test literal separators and field order come from the template."""
        assert DateTemplate("DD.MM.YYYY").try_parse("06.05.2001") == "2001-05-06"

    def test_out_of_range_month(self) -> None:
        """Test impossible months are rejected."""
        assert DateTemplate("YYYY-MM").try_parse("2001-13") is None

    def test_no_match(self) -> None:
        """Test non-matching text yields None."""
        assert DateTemplate("YYYY").try_parse("unknown") is None

    def test_non_ascii_digits_do_not_match(self) -> None:
        """Test only ASCII digits fill the year, month and day fields."""
        assert DateTemplate("YYYY").try_parse("\u0662\u0660\u0660\u0661") is None

    @pytest.mark.parametrize("template", ["MM-DD", "YYYY-DD", "YYYY-YYYY"])
    def test_invalid_templates(self, template: str) -> None:
        """Test templates without a year, a day without month, or repeats are refused."""
        with pytest.raises(ValueError):
            DateTemplate(template)


class TestDateNormalizer:
    """Tests for DateNormalizer."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2001-05-06", "2001-05-06"),
            ("2001-05", "2001-05"),
            ("2001", "2001"),
            ("1999 (remaster)", "1999"),
            ("  1999", "1999"),
            ("n/a", None),
            ("", None),
            (None, None),
        ],
    )
    def test_default_formats(self, raw, expected) -> None:
        """Test the default templates, most specific first."""
        assert DateNormalizer().normalize(raw) == expected

    def test_first_matching_template_wins(self) -> None:
        """Test templates are tried in the configured order."""
        normalizer = DateNormalizer(["YYYY", "YYYY-MM-DD"])
        assert normalizer.normalize("2001-05-06") == "2001"

    def test_bad_templates_are_skipped(self) -> None:
        """Test an invalid configured template does not break the rest."""
        normalizer = DateNormalizer(["MM", "YYYY"])
        assert len(normalizer.templates) == 1
        assert normalizer.normalize("2010") == "2010"
