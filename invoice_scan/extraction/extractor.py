"""
Generic Invoice Extractor Module.

This module provides the GenericExtractor, the default backend for any
invoice that is not handled by a vendor-specific parser. It runs every
rule of the FieldPatternCatalog over the raw OCR text.

Approach:
    One regular-expression rule per field, each with ordered alternative
    capture groups; amounts go through AmountNormalizer, dates through
    DateNormalizer. A field that does not match keeps its default; the
    extractor never aborts a record because one field is missing.

Author: ML Engineering Team
"""

import time
from typing import Any, Dict, Optional

from invoice_scan.utils.logger import get_logger
from .extracted_invoice import ExtractedInvoice
from .patterns import FieldPatternCatalog, default_catalog

logger = get_logger(__name__)


class GenericExtractor:
    """
    Regex-based invoice field extractor.

    Attributes:
        catalog: FieldPatternCatalog the extractor applies.

    Example:
        >>> extractor = GenericExtractor()
        >>> record = extractor.extract(ocr_text)
        >>> print(record.customer_name, record.total_amount)
    """

    SOURCE = "generic"

    def __init__(self, catalog: Optional[FieldPatternCatalog] = None) -> None:
        self.catalog = catalog or default_catalog()
        logger.debug(f"GenericExtractor initialized ({len(self.catalog)} rules)")

    def extract(self, text: str) -> ExtractedInvoice:
        """
        Extract invoice fields from raw text.

        Args:
            text: OCR text of the invoice (may be empty).

        Returns:
            Fully populated ExtractedInvoice with source "generic".
        """
        start_time = time.time()
        text = text or ""
        values: Dict[str, Any] = {}

        for rule in self.catalog:
            value = self.catalog.resolve(rule.name, text)
            if value != rule.default:
                logger.debug(f"Extracted {rule.name}: {value!r}")
            values[rule.name] = value

        # The claim form still reads the legacy labor field
        if 'labor_cost' not in values and 'work_cost' in values:
            values['labor_cost'] = values['work_cost']

        record = ExtractedInvoice(source=self.SOURCE, **values)

        missing = record.missing_fields
        logger.info(
            f"Generic extraction complete: {len(values) - len(missing)}/{len(values)} fields "
            f"({time.time() - start_time:.3f}s)"
        )
        if missing:
            logger.debug(f"Not found: {', '.join(missing)}")
        return record
