"""
Cost Corrections Module.

This module repairs a known defect of the vision backend: on invoices
from the service vendor the model regularly reads the labor total into
partsCost and the parts total into workCost.

Author: ML Engineering Team
"""

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Iterable, Optional

from config import get_config
from invoice_scan.utils.exceptions import ConfigurationError
from invoice_scan.utils.helpers import casefold_key
from invoice_scan.utils.logger import get_logger

if TYPE_CHECKING:
    from invoice_scan.extraction.extracted_invoice import ExtractedInvoice

logger = get_logger(__name__)


class SwapCorrector:
    """
    Swaps work and parts cost on vision records for the service vendor.

    A swap is applied only when all of these hold:
        - the record came from the vision backend
        - the customer is the configured vendor
        - work_cost exceeds parts_cost
        - work_cost exceeds the configured minimum

    Example:
        >>> corrector = SwapCorrector()
        >>> fixed = corrector.correct(record)
        >>> fixed.work_cost, fixed.parts_cost
        (Decimal('1200'), Decimal('8000'))
    """

    DEFAULT_MIN_WORK_COST = 1000

    def __init__(
        self,
        vendor_names: Optional[Iterable[str]] = None,
        min_work_cost: Optional[float] = None
    ) -> None:
        if vendor_names is None:
            vendor_names = [get_config("vendor.name", "T. Myhrvold AS")]
            vendor_names += get_config("vendor.markers", [])
        self._vendor_keys = frozenset(casefold_key(name) for name in vendor_names)

        if min_work_cost is None:
            min_work_cost = get_config(
                "swap_correction.min_work_cost",
                self.DEFAULT_MIN_WORK_COST
            )
        try:
            self.min_work_cost = Decimal(str(min_work_cost))
        except InvalidOperation:
            raise ConfigurationError("swap_correction.min_work_cost", f"not a number: {min_work_cost!r}")

    def is_vendor(self, customer_name: str) -> bool:
        """True if the customer name refers to the configured vendor."""
        return casefold_key(customer_name) in self._vendor_keys

    def needs_swap(self, record: 'ExtractedInvoice') -> bool:
        if record.source != "vision" or not self.is_vendor(record.customer_name):
            return False
        return (
            record.work_cost > record.parts_cost
            and record.work_cost > self.min_work_cost
        )

    def correct(self, record: 'ExtractedInvoice') -> 'ExtractedInvoice':
        """
        Return a corrected copy of the record (or the record itself when
        no swap applies). The input record is never modified.
        """
        if not self.needs_swap(record):
            return record

        logger.info(
            f"Swapping work/parts cost for {record.customer_name}: "
            f"work={record.work_cost}, parts={record.parts_cost}"
        )
        return record.copy_with(
            work_cost=record.parts_cost,
            parts_cost=record.work_cost,
            labor_cost=record.parts_cost,
        )
