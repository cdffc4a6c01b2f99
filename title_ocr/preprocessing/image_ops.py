"""Image preparation applied before each recognition pass.

Each pass configuration names one preparation (none, Otsu or adaptive
binarization, CLAHE) and an optional upscale factor, so the passes
see the same page in different forms.
"""

import cv2
import numpy as np

from title_ocr.utils.config import PreprocessingConfig, RecognitionPassConfig
from title_ocr.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an RGB, RGBA or BGR image to grayscale; pass grayscale through."""
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    if image.ndim == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image


def upscale(image: np.ndarray, factor: float) -> np.ndarray:
    """Resize by ``factor`` with cubic interpolation; 1.0 returns the input."""
    if factor == 1.0:
        return image
    interpolation = cv2.INTER_CUBIC if factor > 1.0 else cv2.INTER_AREA
    return cv2.resize(image, None, fx=factor, fy=factor, interpolation=interpolation)


def binarize_otsu(image: np.ndarray) -> np.ndarray:
    """Binarize with Otsu's global threshold."""
    _, binary = cv2.threshold(to_gray(image), 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return binary


def binarize_adaptive(image: np.ndarray, block_size: int = 31, c: int = 10) -> np.ndarray:
    """Binarize with a Gaussian adaptive threshold.

    Handles uneven lighting on photographed titles better than a single
    global threshold.
    """
    return cv2.adaptiveThreshold(
        to_gray(image),
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY,
        block_size,
        c,
    )


def apply_clahe(image: np.ndarray, clip_limit: float = 2.0, tile_size: int = 8) -> np.ndarray:
    """Enhance local contrast with CLAHE."""
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    return clahe.apply(to_gray(image))


def prepare_for_pass(
    image: np.ndarray,
    pass_config: RecognitionPassConfig,
    settings: PreprocessingConfig | None = None,
) -> np.ndarray:
    """Produce the image variant a recognition pass should read.

    Args:
        image: Page image as a uint8 array (grayscale or color).
        pass_config: The pass whose ``scale`` and ``preprocess`` apply.
        settings: Threshold and CLAHE parameters.

    Returns:
        The prepared image. The input array is not modified.
    """
    settings = settings or PreprocessingConfig()
    result = upscale(image, pass_config.scale)

    if pass_config.preprocess == "otsu":
        result = binarize_otsu(result)
    elif pass_config.preprocess == "adaptive":
        result = binarize_adaptive(result, settings.adaptive_block_size, settings.adaptive_c)
    elif pass_config.preprocess == "clahe":
        result = apply_clahe(result, settings.clahe_clip_limit, settings.clahe_tile_size)

    logger.debug(
        "Prepared image for pass %s: %s -> %s",
        pass_config.config_id,
        image.shape,
        result.shape,
    )
    return result
