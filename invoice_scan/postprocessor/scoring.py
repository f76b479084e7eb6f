"""
Confidence Scoring Module.

Every weight of the confidence formula lives here as a named constant:
    - Critical fields carry the claim (customer, product, serial, ...)
    - Supporting fields make it payable (total, warranty status)
    - Bonus signals reward evidence in the raw text, whether or not the
      matching field made it into the record

The score is the sum of all contributions divided by 100, clamped to [0, 1].

Author: ML Engineering Team
"""

from typing import TYPE_CHECKING, Dict, Tuple

from invoice_scan.extraction.patterns import (
    WARRANTY_MENTION_PATTERN,
    has_job_number,
    has_serial_number,
)
from invoice_scan.utils.logger import get_logger

if TYPE_CHECKING:
    from invoice_scan.extraction.extracted_invoice import ExtractedInvoice

logger = get_logger(__name__)

# Critical fields
CUSTOMER_NAME_WEIGHT = 20
PRODUCT_NAME_WEIGHT = 20
SERIAL_NUMBER_WEIGHT = 15
SHORT_DESCRIPTION_WEIGHT = 10
VENDOR_JOB_NUMBER_WEIGHT = 10

# Supporting fields
TOTAL_AMOUNT_WEIGHT = 15
WARRANTY_STATUS_WEIGHT = 10

# Raw text signals
WARRANTY_MENTION_BONUS = 5
JOB_NUMBER_PATTERN_BONUS = 5
SERIAL_NUMBER_PATTERN_BONUS = 5

MAX_POINTS = 100

FIELD_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ('customer_name', CUSTOMER_NAME_WEIGHT),
    ('product_name', PRODUCT_NAME_WEIGHT),
    ('serial_number', SERIAL_NUMBER_WEIGHT),
    ('short_description', SHORT_DESCRIPTION_WEIGHT),
    ('vendor_job_number', VENDOR_JOB_NUMBER_WEIGHT),
    ('total_amount', TOTAL_AMOUNT_WEIGHT),
    ('warranty_status', WARRANTY_STATUS_WEIGHT),
)


class ConfidenceScorer:
    """
    Weighted confidence score over a finished record and its raw text.

    Example:
        >>> scorer = ConfidenceScorer()
        >>> scorer.score(record, ocr_text)
        0.75
    """

    def field_points(self, record: 'ExtractedInvoice') -> Dict[str, int]:
        """Points earned by each extracted field (0 when missing)."""
        return {
            name: weight if record.has_value(name) else 0
            for name, weight in FIELD_WEIGHTS
        }

    def bonus_points(self, raw_text: str) -> Dict[str, int]:
        """Points earned by each raw text signal (0 when absent)."""
        raw_text = raw_text or ""
        return {
            'warranty_mention': (
                WARRANTY_MENTION_BONUS if WARRANTY_MENTION_PATTERN.search(raw_text) else 0
            ),
            'job_number_pattern': (
                JOB_NUMBER_PATTERN_BONUS if has_job_number(raw_text) else 0
            ),
            'serial_number_pattern': (
                SERIAL_NUMBER_PATTERN_BONUS if has_serial_number(raw_text) else 0
            ),
        }

    def score(self, record: 'ExtractedInvoice', raw_text: str) -> float:
        """
        Score a record.

        Args:
            record: Record after corrections.
            raw_text: OCR text the record came from.

        Returns:
            Confidence in [0, 1].
        """
        fields_earned = self.field_points(record)
        bonus_earned = self.bonus_points(raw_text)
        points = sum(fields_earned.values()) + sum(bonus_earned.values())

        confidence = min(max(points / MAX_POINTS, 0.0), 1.0)

        logger.debug(
            f"Confidence {confidence:.2f} "
            f"(fields={fields_earned}, bonus={bonus_earned})"
        )
        return confidence
