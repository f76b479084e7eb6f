"""
Tests for amount and date normalization.
"""

from decimal import Decimal

import pytest

from invoice_scan.postprocessor.normalizers import AmountNormalizer, DateNormalizer, ZERO


@pytest.fixture
def amounts():
    return AmountNormalizer()


class TestAmountNormalizer:

    @pytest.mark.parametrize("raw, expected", [
        ("3 025,00", Decimal("3025.00")),
        ("3025,00", Decimal("3025.00")),
        ("3 025", Decimal("3025")),
        ("kr 500", Decimal("500")),
        ("1 234 567,89", Decimal("1234567.89")),
        ("NOK 1 200,50", Decimal("1200.50")),
        ("500,-", Decimal("500")),
        ("3025.50", Decimal("3025.50")),
        ("kr500", Decimal("500")),
        ("  950,00 kr ", Decimal("950.00")),
    ])
    def test_locale_formats(self, amounts, raw, expected):
        """Norwegian grouping and decimal comma resolve to canonical decimals"""
        assert amounts.normalize(raw) == expected

    @pytest.mark.parametrize("raw", ["", "garbage", "NaN", "Infinity", None, "kr", "12,34,56"])
    def test_unparseable_is_zero(self, amounts, raw):
        """Anything that is not a number becomes 0 instead of raising"""
        assert amounts.normalize(raw) == ZERO

    def test_numbers_pass_through(self, amounts):
        assert amounts.normalize(8000) == Decimal("8000")
        assert amounts.normalize(1200.5) == Decimal("1200.5")
        assert amounts.normalize(Decimal("42.10")) == Decimal("42.10")
        assert amounts.normalize(True) == ZERO

    @pytest.mark.parametrize("raw", ["3 025,00", "1 234 567,89", "kr 500", "0,5", "garbage"])
    def test_idempotent(self, amounts, raw):
        """Normalizing the printed canonical value gives the same value"""
        once = amounts.normalize(raw)
        assert amounts.normalize(str(once)) == once

    def test_custom_currency_tokens(self):
        normalizer = AmountNormalizer(currency_tokens=["EUR"])
        assert normalizer.normalize("EUR 10,50") == Decimal("10.50")
        assert normalizer.normalize("kr 10") == ZERO

    def test_to_float(self, amounts):
        assert amounts.to_float("2 375,00") == 2375.0


class TestDateNormalizer:

    @pytest.mark.parametrize("raw, expected", [
        ("15.11.2023", "2023-11-15"),
        ("01.02.23", "2023-02-01"),
        ("15/11/2023", "2023-11-15"),
        ("2023-11-15", "2023-11-15"),
        ("  15.11.2023 ", "2023-11-15"),
    ])
    def test_day_first_formats(self, raw, expected):
        assert DateNormalizer().normalize(raw) == expected

    def test_dateutil_fallback_is_day_first(self):
        """Formats outside the explicit list still read day before month"""
        assert DateNormalizer().normalize("05 11 2023") == "2023-11-05"

    @pytest.mark.parametrize("raw", ["", None, "not a date"])
    def test_unparseable_is_none(self, raw):
        assert DateNormalizer().normalize(raw) is None
