"""
Table Image Preprocessor Module.

Prepares a scanned invoice for a table-friendly OCR read:
    - Image loading from path, bytes, binary file or PIL Image
    - EXIF orientation correction
    - Upscaling (small table text reads poorly at phone resolution)
    - Grayscale conversion and binary threshold (removes the blue logo
      and light table shading)

Supports: JPG, JPEG, PNG, TIFF, BMP

Author: ML Engineering Team
"""

import io
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, ImageOps

from config import get_config
from invoice_scan.utils.logger import get_logger
from invoice_scan.utils.exceptions import OCRProcessingError

logger = get_logger(__name__)

ImageSource = Union[str, Path, bytes, BinaryIO, Image.Image]


class TableImagePreprocessor:
    """
    Preprocessor for vendor invoice images before table OCR.

    Attributes:
        scale: Upscaling factor applied before thresholding.
        threshold: Gray level (0-255) above which a pixel becomes white.

    Example:
        >>> preprocessor = TableImagePreprocessor()
        >>> image = preprocessor.process("invoice.jpg")
        >>> image.mode
        'L'
    """

    def __init__(self, scale: float = None, threshold: int = None) -> None:
        self.scale = scale if scale is not None else get_config("ocr.preprocessing.scale", 2)
        self.threshold = (
            threshold if threshold is not None
            else get_config("ocr.preprocessing.threshold", 180)
        )
        logger.debug(
            f"TableImagePreprocessor initialized (scale={self.scale}, "
            f"threshold={self.threshold})"
        )

    def load(self, source: ImageSource) -> Image.Image:
        """
        Load an image from a path, raw bytes, an open binary file or a PIL Image.

        Raises:
            OCRProcessingError: If the source cannot be read as an image.
        """
        if isinstance(source, Image.Image):
            return source

        if isinstance(source, bytes):
            name = "bytes"
        elif hasattr(source, "read"):
            name = str(getattr(source, "name", "stream"))
        else:
            name = str(source)

        try:
            if isinstance(source, bytes):
                image = Image.open(io.BytesIO(source))
            elif hasattr(source, "read"):
                image = Image.open(source)
            else:
                image = Image.open(Path(source))
            image.load()
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load image {name}: {e}")
            raise OCRProcessingError(name, str(e))

        return image

    def process(self, source: ImageSource) -> Image.Image:
        """
        Load and preprocess an image.

        Processing steps:
            1. Fix orientation from EXIF
            2. Upscale
            3. Convert to grayscale
            4. Apply binary threshold

        Returns:
            Black-and-white image in mode "L".
        """
        image = self.load(source)
        image = ImageOps.exif_transpose(image)

        if self.scale and self.scale != 1:
            width, height = image.size
            new_size = (int(width * self.scale), int(height * self.scale))
            image = image.resize(new_size, Image.LANCZOS)
            logger.debug(f"Upscaled image from {width}x{height} to {new_size[0]}x{new_size[1]}")

        image = image.convert('L')

        threshold = self.threshold
        image = image.point(lambda gray: 255 if gray > threshold else 0)

        return image
