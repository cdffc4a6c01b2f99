"""Multi-pass recognition over a single page image.

Runs the recognition engine once per configured pass on a small
thread pool and collects the raw text of every pass that succeeds.
A failed or timed-out pass is dropped, never retried. When every pass
fails, one fallback pass is attempted; when that fails too the result
is an empty list. :meth:`MultiPassRecognizer.recognize` never raises.
"""

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Protocol

import numpy as np

from title_ocr.extraction.fields import RecognitionPass
from title_ocr.utils.config import AppConfig, RecognitionPassConfig
from title_ocr.utils.logger import get_logger

from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

# Called with (config_id, fraction of passes finished).
ProgressCallback = Callable[[str, float], None]


class RecognitionEngine(Protocol):
    def recognize(
        self,
        image: np.ndarray,
        pass_config: RecognitionPassConfig,
        timeout: float | None = None,
    ) -> str: ...


class MultiPassRecognizer:
    """Runs several OCR configurations over the same image.

    Args:
        engine: Engine with a ``recognize(image, pass_config, timeout)``
            method.
        passes: Ordered pass configurations.
        fallback_pass: Configuration tried once if every pass fails.
        max_workers: Upper bound on concurrently running passes.
        pass_timeout: Per-pass timeout in seconds.
        progress: Optional callback notified after each pass.
    """

    def __init__(
        self,
        engine: RecognitionEngine,
        passes: Sequence[RecognitionPassConfig],
        fallback_pass: RecognitionPassConfig,
        max_workers: int = 3,
        pass_timeout: float | None = 30.0,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.engine = engine
        self.passes = tuple(passes)
        self.fallback_pass = fallback_pass
        self.max_workers = max(1, max_workers)
        self.pass_timeout = pass_timeout
        self.progress = progress

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        engine: RecognitionEngine | None = None,
        progress: ProgressCallback | None = None,
    ) -> "MultiPassRecognizer":
        """Build a recognizer (and a Tesseract engine if none is given)."""
        if engine is None:
            engine = TesseractEngine(
                tesseract_cmd=config.ocr.tesseract_cmd,
                default_lang=config.ocr.default_lang,
                oem=config.ocr.oem,
                preprocessing=config.preprocessing,
            )
        return cls(
            engine=engine,
            passes=config.ocr.passes,
            fallback_pass=config.ocr.fallback_pass,
            max_workers=config.ocr.max_workers,
            pass_timeout=config.ocr.pass_timeout_s,
            progress=progress,
        )

    def recognize(self, image: np.ndarray) -> list[RecognitionPass]:
        """Collect the raw text of every successful pass, in pass order."""
        results = self._run_passes(image)
        if results:
            logger.info("%d of %d recognition passes succeeded", len(results), len(self.passes))
            return results

        logger.warning(
            "All %d recognition passes failed, trying fallback pass %s",
            len(self.passes),
            self.fallback_pass.config_id,
        )
        fallback = self._run_one(image, self.fallback_pass)
        self._notify(self.fallback_pass.config_id, 1.0)
        if fallback is None:
            logger.error("Fallback recognition pass failed; no text recovered")
            return []
        return [fallback]

    def _run_passes(self, image: np.ndarray) -> list[RecognitionPass]:
        if not self.passes:
            return []

        outcomes: dict[int, RecognitionPass | None] = {}
        workers = min(self.max_workers, len(self.passes))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ocr-pass") as pool:
            futures = {
                pool.submit(self._run_one, image, pass_config): index
                for index, pass_config in enumerate(self.passes)
            }
            for finished, future in enumerate(as_completed(futures), start=1):
                index = futures[future]
                outcomes[index] = future.result()
                self._notify(self.passes[index].config_id, finished / len(self.passes))

        return [outcomes[i] for i in sorted(outcomes) if outcomes[i] is not None]

    def _run_one(
        self, image: np.ndarray, pass_config: RecognitionPassConfig
    ) -> RecognitionPass | None:
        try:
            text = self.engine.recognize(image, pass_config, timeout=self.pass_timeout)
        except Exception as exc:
            logger.warning("Recognition pass %s failed: %s", pass_config.config_id, exc)
            return None

        if not text or not text.strip():
            logger.warning("Recognition pass %s returned no text", pass_config.config_id)
            return None
        return RecognitionPass(config_id=pass_config.config_id, raw_text=text)

    def _notify(self, config_id: str, fraction: float) -> None:
        if self.progress is None:
            return
        try:
            self.progress(config_id, fraction)
        except Exception as exc:
            logger.warning("Progress callback failed for pass %s: %s", config_id, exc)
