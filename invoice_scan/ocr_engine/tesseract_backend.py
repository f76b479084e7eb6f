"""
Tesseract OCR Backend.

This module provides the table-friendly text read used by the vendor
table parser. Column layout is preserved by keeping runs of spaces
between words (preserve_interword_spaces) and treating the page as a
single block of text.

Requirements:
    - Tesseract OCR installed on the system, with the "nor" traineddata
    - pytesseract Python package

Author: ML Engineering Team
"""

import time

import pytesseract

from config import get_config
from invoice_scan.utils.logger import get_logger
from invoice_scan.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError
from .image_processor import ImageSource, TableImagePreprocessor

logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Instances are callables taking an image source and returning text, so
    they can be passed anywhere a text reader is expected.

    Attributes:
        language: Tesseract language code (e.g., "nor+eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract configuration

    Example:
        >>> backend = TesseractBackend()
        >>> text = backend.read_text("invoice.jpg")
    """

    def __init__(self, preprocessor: TableImagePreprocessor = None) -> None:
        """Initialize the Tesseract backend with configuration."""
        self.language = get_config("ocr.tesseract.lang", "nor+eng")
        self.psm = get_config("ocr.tesseract.psm", 6)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config(
            "ocr.tesseract.config",
            "-c preserve_interword_spaces=1"
        )
        self.preprocessor = preprocessor or TableImagePreprocessor()

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check if the Tesseract binary is available.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            )
        logger.info(f"Tesseract version: {version}")

    def _build_config(self) -> str:
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]
        if self.extra_config:
            config_parts.append(self.extra_config)
        return ' '.join(config_parts)

    def read_text(self, source: ImageSource) -> str:
        """
        Preprocess an image and read its text.

        Args:
            source: Image path, raw bytes, open binary file or PIL Image.

        Returns:
            Extracted text, line structure and column spacing preserved.

        Raises:
            OCRProcessingError: If preprocessing or OCR fails.
        """
        start_time = time.time()
        image = self.preprocessor.process(source)
        config = self._build_config()

        logger.debug(f"Running Tesseract OCR (config: {config})")
        try:
            text = pytesseract.image_to_string(
                image,
                lang=self.language,
                config=config
            )
        except (pytesseract.TesseractError, RuntimeError) as e:
            logger.error(f"OCR processing failed: {e}")
            raise OCRProcessingError("image", str(e))

        logger.info(
            f"OCR completed: {len(text.splitlines())} lines "
            f"({time.time() - start_time:.2f}s)"
        )
        return text

    __call__ = read_text
