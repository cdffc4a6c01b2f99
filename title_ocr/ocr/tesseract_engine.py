"""Tesseract adapter used as the recognition engine.

Turns a :class:`RecognitionPassConfig` into a prepared image plus a
Tesseract command-line configuration and returns the raw text.
Failures are raised to the caller; the multi-pass recognizer decides
what a failed pass means.
"""

import numpy as np
import pytesseract
from PIL import Image

from title_ocr.preprocessing.image_ops import prepare_for_pass
from title_ocr.utils.config import PreprocessingConfig, RecognitionPassConfig
from title_ocr.utils.logger import get_logger

logger = get_logger(__name__)


def build_tesseract_config(pass_config: RecognitionPassConfig, oem: int = 3) -> str:
    """Build the Tesseract ``config`` string for one pass.

    Args:
        pass_config: Pass with segmentation mode, whitelist and DPI hint.
        oem: Tesseract OCR engine mode.

    Returns:
        Configuration string such as ``"--oem 3 --psm 6 --dpi 300"``.
    """
    parts = [f"--oem {oem}", f"--psm {pass_config.psm}"]
    if pass_config.dpi:
        parts.append(f"--dpi {pass_config.dpi}")
    if pass_config.whitelist:
        parts.append(f"-c tessedit_char_whitelist={pass_config.whitelist}")
    return " ".join(parts)


class TesseractEngine:
    """Wrapper around pytesseract for configurable recognition passes.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: OCR language code.
        oem: Tesseract OCR engine mode.
        preprocessing: Parameters for per-pass image preparation.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        oem: int = 3,
        preprocessing: PreprocessingConfig | None = None,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.oem = oem
        self.preprocessing = preprocessing or PreprocessingConfig()

    def recognize(
        self,
        image: np.ndarray,
        pass_config: RecognitionPassConfig,
        timeout: float | None = None,
    ) -> str:
        """Run one recognition pass over a page image.

        Args:
            image: Page image as a uint8 numpy array.
            pass_config: Segmentation, whitelist, resolution and
                preprocessing settings for this pass.
            timeout: Seconds before Tesseract is killed; ``None`` waits.

        Returns:
            The raw recognized text.

        Raises:
            pytesseract.TesseractError: If Tesseract fails.
            RuntimeError: If the pass times out.
        """
        prepared = prepare_for_pass(image, pass_config, self.preprocessing)
        config = build_tesseract_config(pass_config, self.oem)
        text = pytesseract.image_to_string(
            Image.fromarray(prepared),
            lang=self.default_lang,
            config=config,
            timeout=timeout or 0,
        )
        logger.info(
            "Pass %s recognized %d characters (%s)",
            pass_config.config_id,
            len(text),
            config,
        )
        return text
