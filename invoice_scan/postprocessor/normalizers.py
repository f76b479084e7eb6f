"""
Data Normalizers Module.

This module provides normalization for:
    - Norwegian-formatted currency amounts ("3 025,00", "kr 500")
    - Invoice dates ("15.11.2023")

Author: ML Engineering Team
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from dateutil import parser as date_parser

from config import get_config
from invoice_scan.utils.logger import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")


class AmountNormalizer:
    """
    Converts locale-formatted amount strings to canonical decimals.

    Policy, in order:
        1. Strip currency tokens, a trailing ",-" and surrounding whitespace.
        2. Comma and embedded whitespace present: drop all whitespace,
           the comma becomes the decimal point.
        3. Only a comma: the comma becomes the decimal point.
        4. Only whitespace: it is a thousands separator and is dropped.
        5. Parse as Decimal.

    Anything unparseable resolves to Decimal("0"); normalize never raises.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.normalize("3 025,00")
        Decimal('3025.00')
        >>> normalizer.normalize("kr 500")
        Decimal('500')
        >>> normalizer.normalize("garbage")
        Decimal('0')
    """

    DEFAULT_CURRENCY_TOKENS = ["kr", "NOK"]

    # "500,-" is Norwegian shorthand for whole kroner
    _WHOLE_KRONER = re.compile(r"[,.]\s*-$")
    _WHITESPACE = re.compile(r"\s")

    def __init__(self, currency_tokens: Optional[List[str]] = None) -> None:
        tokens = currency_tokens or get_config(
            "postprocessing.amount.currency_tokens",
            self.DEFAULT_CURRENCY_TOKENS
        )
        alternatives = "|".join(
            re.escape(token) for token in sorted(tokens, key=len, reverse=True)
        )
        # Letter boundaries rather than \b so "kr500" still loses its prefix
        self._currency_pattern = re.compile(
            rf"(?<![^\W\d_])(?:{alternatives})\.?(?![^\W\d_])",
            re.IGNORECASE
        )

    def normalize(self, raw: Any) -> Decimal:
        """
        Normalize an amount to a canonical Decimal.

        Args:
            raw: Amount as string, number or None.

        Returns:
            Decimal value, or Decimal("0") when it cannot be parsed.
        """
        if raw is None or isinstance(raw, bool):
            return ZERO
        if isinstance(raw, Decimal):
            return raw if raw.is_finite() else ZERO
        if isinstance(raw, (int, float)):
            raw = str(raw)

        cleaned = self._currency_pattern.sub("", str(raw)).strip()
        cleaned = self._WHOLE_KRONER.sub("", cleaned).strip()

        has_comma = "," in cleaned
        has_space = self._WHITESPACE.search(cleaned) is not None

        if has_comma and has_space:
            cleaned = self._WHITESPACE.sub("", cleaned).replace(",", ".", 1)
        elif has_comma:
            cleaned = cleaned.replace(",", ".", 1)
        elif has_space:
            cleaned = self._WHITESPACE.sub("", cleaned)

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            if cleaned:
                logger.debug(f"Could not parse amount: {raw!r}")
            return ZERO

        if not value.is_finite():
            logger.debug(f"Non-finite amount ignored: {raw!r}")
            return ZERO

        return value

    def to_float(self, raw: Any) -> float:
        """Convenience wrapper returning a float."""
        return float(self.normalize(raw))


class DateNormalizer:
    """
    Normalizes invoice date strings to a standard format.

    Norwegian invoices print dates day-first ("15.11.2023"); explicit
    day-first formats are tried before falling back to dateutil.

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("15.11.2023")
        "2023-11-15"
    """

    INPUT_FORMATS = [
        "%d.%m.%Y",
        "%d.%m.%y",
        "%d/%m/%Y",
        "%d-%m-%Y",
        "%Y-%m-%d",
    ]

    def __init__(self) -> None:
        self.output_format = get_config(
            "postprocessing.date.output_format",
            "%Y-%m-%d"
        )
        self.dayfirst = get_config("postprocessing.date.dayfirst", True)

    def normalize(self, date_str: str) -> Optional[str]:
        """
        Normalize a date string to the configured output format.

        Args:
            date_str: Input date string.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        parsed = self.to_datetime(date_str)
        if parsed is None:
            return None
        return parsed.strftime(self.output_format)

    def to_datetime(self, date_str: str) -> Optional[datetime]:
        """
        Parse a date string into a datetime.

        Args:
            date_str: Input date string.

        Returns:
            Parsed datetime or None.
        """
        if not date_str:
            return None

        date_str = " ".join(str(date_str).split())

        for fmt in self.INPUT_FORMATS:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue

        try:
            return date_parser.parse(date_str, dayfirst=self.dayfirst)
        except (ValueError, OverflowError):
            logger.debug(f"Could not parse date: {date_str}")
            return None
