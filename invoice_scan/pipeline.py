"""
Invoice Pipeline Module.

This module provides the InvoicePipeline class, the single entry point
that turns one scanned invoice into a finished ExtractedInvoice.

Backend selection (exactly one backend produces the base record):
    1. Vision payload   - valid JSON from the vision model
    2. Vendor table     - vendor marker in the text and a source file
    3. Generic regex    - everything else, and every fallback

The base record then goes through the PostProcessor (swap correction,
confidence scoring, warnings). Content problems never raise; the worst
case is an almost empty record with a low confidence and warnings
explaining why.

Author: ML Engineering Team
"""

import time
from typing import Any, List, Mapping, Optional, Tuple

from invoice_scan.extraction import ExtractedInvoice, GenericExtractor, check_payload
from invoice_scan.postprocessor import AmountNormalizer, PostProcessor
from invoice_scan.utils.exceptions import PayloadError, VendorParseError
from invoice_scan.utils.logger import get_logger
from invoice_scan.vendor import VendorTableParser, is_vendor_document

logger = get_logger(__name__)


class InvoicePipeline:
    """
    Orchestrates extraction backends and post-processing.

    Attributes:
        generic_extractor: GenericExtractor instance
        vendor_parser: VendorTableParser instance
        post_processor: PostProcessor instance

    Example:
        >>> pipeline = InvoicePipeline()
        >>> record = pipeline.run(ocr_text, source_file="scan.jpg")
        >>> print(record.invoice_number, record.confidence, record.warnings)
    """

    def __init__(
        self,
        generic_extractor: Optional[GenericExtractor] = None,
        vendor_parser: Optional[VendorTableParser] = None,
        post_processor: Optional[PostProcessor] = None
    ) -> None:
        self.amount_normalizer = AmountNormalizer()
        self.generic_extractor = generic_extractor or GenericExtractor()
        self.vendor_parser = vendor_parser or VendorTableParser(
            normalizer=self.amount_normalizer
        )
        self.post_processor = post_processor or PostProcessor()
        logger.debug("InvoicePipeline initialized")

    def _vision_payload(self, vision_json: Any) -> Optional[Mapping[str, Any]]:
        if vision_json is None:
            return None
        try:
            return check_payload(vision_json)
        except PayloadError as e:
            logger.warning(f"Ignoring vision payload: {e}")
            return None

    def _vendor_record(self, source_file: Any) -> Tuple[Optional[ExtractedInvoice], List[str]]:
        try:
            table = self.vendor_parser.parse(source_file)
        except VendorParseError as e:
            logger.warning(f"Vendor table parser failed, falling back to generic: {e}")
            return None, []
        return table.to_invoice(), table.validate()

    def extract(
        self,
        text: str,
        source_file: Any = None,
        vision_json: Any = None
    ) -> Tuple[ExtractedInvoice, List[str]]:
        """
        Produce the base record from the first backend that applies.

        Returns:
            Tuple of (base record, warnings raised by the backend).
        """
        payload = self._vision_payload(vision_json)
        if payload is not None:
            logger.info("Using vision payload")
            return ExtractedInvoice.from_payload(payload, self.amount_normalizer), []

        if source_file is not None and is_vendor_document(text):
            logger.info("Vendor invoice detected, parsing line-item table")
            record, warnings = self._vendor_record(source_file)
            if record is not None:
                return record, warnings

        logger.info("Using generic extractor")
        return self.generic_extractor.extract(text), []

    def run(
        self,
        text: str,
        source_file: Any = None,
        vision_json: Any = None,
        ocr_confidence: Optional[float] = None
    ) -> ExtractedInvoice:
        """
        Run the full pipeline for one invoice.

        Args:
            text: OCR text of the invoice.
            source_file: Original image (path, bytes, binary file or PIL Image), used
                by the vendor table parser.
            vision_json: Vision model payload, as a dict or JSON text.
            ocr_confidence: Confidence reported by the OCR engine (0-100).

        Returns:
            Finished ExtractedInvoice with confidence and warnings.
        """
        start_time = time.time()
        text = text or ""

        base, backend_warnings = self.extract(text, source_file, vision_json)

        if ocr_confidence is not None and not base.reported_confidence:
            reported = self.amount_normalizer.normalize(ocr_confidence) / 100
            base = base.copy_with(reported_confidence=float(reported))

        record = self.post_processor.process(base, text, prior_warnings=backend_warnings)

        logger.info(
            f"Invoice processed via {record.source}: "
            f"#{record.invoice_number or 'N/A'}, confidence={record.confidence:.2f}, "
            f"{len(record.warnings)} warning(s) ({time.time() - start_time:.2f}s)"
        )
        return record
