"""
OCR Engine Module for the Invoice Scan pipeline.

Only the vendor table path reads images itself; every other path takes
OCR text from the caller.

Author: ML Engineering Team
"""

from .image_processor import TableImagePreprocessor
from .tesseract_backend import TesseractBackend

__all__ = ['TableImagePreprocessor', 'TesseractBackend']
