"""Loading of title documents into page images.

Accepts scanned or photographed pages in common bitmap formats and
multi-page PDFs, from a path or raw bytes, and returns one RGB (or
grayscale) numpy array per page.
"""

import io
from pathlib import Path

import numpy as np
from pdf2image import convert_from_bytes, convert_from_path
from PIL import Image, ImageOps, UnidentifiedImageError

from title_ocr.utils.logger import get_logger

logger = get_logger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".webp")
PDF_SUFFIX = ".pdf"
_PDF_MAGIC = b"%PDF"


def _pil_to_array(img: Image.Image) -> np.ndarray:
    # Phone photos carry their rotation in EXIF.
    img = ImageOps.exif_transpose(img)
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    return np.array(img)


class PageLoader:
    """Turns an image or PDF into page arrays.

    Args:
        dpi: Resolution for rendering PDF pages.
    """

    def __init__(self, dpi: int = 300) -> None:
        self.dpi = dpi

    def load(self, source: Path | bytes) -> list[np.ndarray]:
        """Load every page of a document.

        Args:
            source: Path to an image or PDF file, or its raw bytes.

        Returns:
            Page images in document order.

        Raises:
            FileNotFoundError: If a path is given and does not exist.
            ValueError: If the content is neither a readable image nor a PDF.
            RuntimeError: If PDF rendering fails.
        """
        if isinstance(source, bytes):
            if source[:4] == _PDF_MAGIC:
                return self.pdf_to_images(source)
            return [self._decode_image(io.BytesIO(source), "<bytes>")]

        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {path}")
        if path.suffix.lower() == PDF_SUFFIX:
            return self.pdf_to_images(path)
        return [self._decode_image(path, str(path))]

    def pdf_to_images(self, pdf_source: Path | bytes) -> list[np.ndarray]:
        """Render each PDF page at ``self.dpi``.

        Raises:
            RuntimeError: If PDF conversion fails.
        """
        try:
            if isinstance(pdf_source, bytes):
                pil_images = convert_from_bytes(pdf_source, dpi=self.dpi)
            else:
                pil_images = convert_from_path(str(pdf_source), dpi=self.dpi)
        except Exception as exc:
            raise RuntimeError(f"PDF conversion failed: {exc}") from exc

        images = [_pil_to_array(img) for img in pil_images]
        logger.info("Converted PDF to %d page images at %d DPI", len(images), self.dpi)
        return images

    def _decode_image(self, fp: io.BytesIO | Path, name: str) -> np.ndarray:
        try:
            with Image.open(fp) as img:
                return _pil_to_array(img)
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError(f"Unreadable image {name}: {exc}") from exc
