"""
Warning Generator Module.

Rule-based inspection of a finished record. Rules are independent and run
in a fixed order, so identical input always yields the same list:

    1. Missing customer name
    2. Missing or generic product name
    3. Missing serial number
    4. Neither job-number format present
    5. Warranty expired according to the text
    6. Cost breakdown disagrees with the total
    7. Low confidence, manual review recommended

Author: ML Engineering Team
"""

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Iterable, List, Optional

from config import get_config
from invoice_scan.extraction.patterns import WARRANTY_EXPIRED_PATTERN, has_job_number
from invoice_scan.utils.exceptions import ConfigurationError
from invoice_scan.utils.logger import get_logger

if TYPE_CHECKING:
    from invoice_scan.extraction.extracted_invoice import ExtractedInvoice

logger = get_logger(__name__)

MISSING_CUSTOMER = "Customer name not found"
MISSING_PRODUCT = "Product name not found"
GENERIC_PRODUCT = "Product name is generic: {name}"
MISSING_SERIAL = "Serial number not found"
MISSING_JOB_NUMBER = "No service/project number or Evatic job number found"
WARRANTY_EXPIRED = "Invoice text indicates the warranty has expired"
BREAKDOWN_MISMATCH = "Cost breakdown ({breakdown} kr) does not match total ({total} kr)"
LOW_CONFIDENCE = "Low confidence ({confidence:.0%}), manual review recommended"


class WarningGenerator:
    """
    Produces human-readable caveats for a record.

    Attributes:
        low_confidence_threshold: Scores below this ask for manual review.
        breakdown_tolerance: Allowed difference (kr) between the cost
            lines and the total.
        generic_product_names: Lowercased names that say nothing about
            the product.
    """

    DEFAULT_GENERIC_PRODUCT_NAMES = ["service/reparasjon", "service", "reparasjon"]

    def __init__(
        self,
        low_confidence_threshold: Optional[float] = None,
        breakdown_tolerance: Optional[float] = None,
        generic_product_names: Optional[Iterable[str]] = None
    ) -> None:
        if low_confidence_threshold is None:
            low_confidence_threshold = get_config("warnings.low_confidence_threshold", 0.55)
        if breakdown_tolerance is None:
            breakdown_tolerance = get_config("warnings.breakdown_tolerance", 2)
        if generic_product_names is None:
            generic_product_names = get_config(
                "extraction.generic_product_names",
                self.DEFAULT_GENERIC_PRODUCT_NAMES
            )

        try:
            self.low_confidence_threshold = float(low_confidence_threshold)
        except (TypeError, ValueError):
            raise ConfigurationError(
                "warnings.low_confidence_threshold",
                f"not a number: {low_confidence_threshold!r}"
            )
        try:
            self.breakdown_tolerance = Decimal(str(breakdown_tolerance))
        except InvalidOperation:
            raise ConfigurationError(
                "warnings.breakdown_tolerance",
                f"not a number: {breakdown_tolerance!r}"
            )
        self.generic_product_names = frozenset(
            name.strip().lower() for name in generic_product_names
        )

    def is_generic_product(self, name: str) -> bool:
        return name.strip().lower() in self.generic_product_names

    def warn(self, record: 'ExtractedInvoice', raw_text: str) -> List[str]:
        """
        Inspect a record.

        Args:
            record: Scored record (confidence already set).
            raw_text: OCR text the record came from.

        Returns:
            Warnings in rule order.
        """
        raw_text = raw_text or ""
        warnings: List[str] = []

        if not record.customer_name:
            warnings.append(MISSING_CUSTOMER)

        if not record.product_name:
            warnings.append(MISSING_PRODUCT)
        elif self.is_generic_product(record.product_name):
            warnings.append(GENERIC_PRODUCT.format(name=record.product_name))

        if not record.serial_number:
            warnings.append(MISSING_SERIAL)

        if not record.vendor_job_number and not has_job_number(raw_text):
            warnings.append(MISSING_JOB_NUMBER)

        if WARRANTY_EXPIRED_PATTERN.search(raw_text):
            warnings.append(WARRANTY_EXPIRED)

        breakdown = record.cost_breakdown_total
        if breakdown and record.total_amount:
            if abs(breakdown - record.total_amount) > self.breakdown_tolerance:
                warnings.append(BREAKDOWN_MISMATCH.format(
                    breakdown=breakdown, total=record.total_amount
                ))

        if record.confidence < self.low_confidence_threshold:
            warnings.append(LOW_CONFIDENCE.format(confidence=record.confidence))

        if warnings:
            logger.debug(f"{len(warnings)} warning(s): {warnings}")
        return warnings
