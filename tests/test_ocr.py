"""Tests for the Tesseract engine and the multi-pass recognizer."""

import threading
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from title_ocr.extraction.fields import RecognitionPass
from title_ocr.ocr.recognizer import MultiPassRecognizer
from title_ocr.ocr.tesseract_engine import TesseractEngine, build_tesseract_config
from title_ocr.utils.config import (
    TITLE_WHITELIST,
    AppConfig,
    RecognitionPassConfig,
    default_passes,
)

_FALLBACK = RecognitionPassConfig(config_id="default")


class FakeEngine:
    """Engine returning canned text (or raising) per pass id."""

    def __init__(self, outputs: dict) -> None:
        self.outputs = outputs
        self.calls: list[str] = []
        self.timeouts: list[float | None] = []
        self._lock = threading.Lock()

    def recognize(self, image, pass_config, timeout=None) -> str:
        with self._lock:
            self.calls.append(pass_config.config_id)
            self.timeouts.append(timeout)
        outcome = self.outputs.get(pass_config.config_id, "")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _recognizer(engine: FakeEngine, **kwargs) -> MultiPassRecognizer:
    return MultiPassRecognizer(
        engine=engine,
        passes=default_passes(),
        fallback_pass=_FALLBACK,
        **kwargs,
    )


class TestBuildTesseractConfig:
    """Tests for the Tesseract configuration string."""

    def test_restricted_block_pass(self) -> None:
        config = build_tesseract_config(default_passes()[0])
        assert config == f"--oem 3 --psm 6 -c tessedit_char_whitelist={TITLE_WHITELIST}"

    def test_high_res_pass(self) -> None:
        assert build_tesseract_config(default_passes()[1]) == "--oem 3 --psm 3 --dpi 300"

    def test_sparse_pass_custom_oem(self) -> None:
        assert build_tesseract_config(default_passes()[2], oem=1) == "--oem 1 --psm 11"


class TestTesseractEngine:
    """Tests for the TesseractEngine class (mocked)."""

    @patch("title_ocr.ocr.tesseract_engine.pytesseract")
    def test_recognize(self, mock_pytesseract: MagicMock, sample_image: np.ndarray) -> None:
        mock_pytesseract.image_to_string.return_value = "VIN 1HGCM82633A004352"

        engine = TesseractEngine(default_lang="eng")
        text = engine.recognize(sample_image, default_passes()[2], timeout=5.0)

        assert text == "VIN 1HGCM82633A004352"
        kwargs = mock_pytesseract.image_to_string.call_args.kwargs
        assert kwargs["lang"] == "eng"
        assert kwargs["config"] == "--oem 3 --psm 11"
        assert kwargs["timeout"] == 5.0

    @patch("title_ocr.ocr.tesseract_engine.pytesseract")
    def test_recognize_scales_image(
        self, mock_pytesseract: MagicMock, sample_color_image: np.ndarray
    ) -> None:
        mock_pytesseract.image_to_string.return_value = ""

        engine = TesseractEngine()
        engine.recognize(sample_color_image, default_passes()[1])

        pil_image = mock_pytesseract.image_to_string.call_args.args[0]
        assert pil_image.size == (600, 400)
        assert mock_pytesseract.image_to_string.call_args.kwargs["timeout"] == 0

    @patch("title_ocr.ocr.tesseract_engine.pytesseract")
    def test_errors_propagate(self, mock_pytesseract: MagicMock, sample_image: np.ndarray) -> None:
        mock_pytesseract.image_to_string.side_effect = RuntimeError("Tesseract process timeout")

        engine = TesseractEngine()
        with pytest.raises(RuntimeError, match="timeout"):
            engine.recognize(sample_image, _FALLBACK)

    def test_custom_tesseract_cmd(self) -> None:
        with patch("title_ocr.ocr.tesseract_engine.pytesseract") as mock_pt:
            TesseractEngine(tesseract_cmd="/usr/bin/tesseract")
            assert mock_pt.pytesseract.tesseract_cmd == "/usr/bin/tesseract"


class TestMultiPassRecognizer:
    """Tests for concurrent pass execution and fallback."""

    def test_results_in_pass_order(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine(
            {"block_restricted": "A", "high_res_auto": "B", "sparse_text": "C"}
        )
        results = _recognizer(engine).recognize(sample_image)

        assert results == [
            RecognitionPass("block_restricted", "A"),
            RecognitionPass("high_res_auto", "B"),
            RecognitionPass("sparse_text", "C"),
        ]
        assert sorted(engine.calls) == ["block_restricted", "high_res_auto", "sparse_text"]

    def test_failed_pass_dropped_not_retried(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine(
            {
                "block_restricted": "A",
                "high_res_auto": RuntimeError("timeout"),
                "sparse_text": "C",
            }
        )
        results = _recognizer(engine).recognize(sample_image)

        assert [r.config_id for r in results] == ["block_restricted", "sparse_text"]
        assert engine.calls.count("high_res_auto") == 1
        assert "default" not in engine.calls

    def test_blank_output_counts_as_failure(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine(
            {"block_restricted": "  \n", "high_res_auto": "B", "sparse_text": ""}
        )
        results = _recognizer(engine).recognize(sample_image)
        assert results == [RecognitionPass("high_res_auto", "B")]

    def test_fallback_when_all_fail(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine(
            {
                "block_restricted": RuntimeError("boom"),
                "high_res_auto": RuntimeError("boom"),
                "sparse_text": RuntimeError("boom"),
                "default": "FALLBACK TEXT",
            }
        )
        results = _recognizer(engine).recognize(sample_image)

        assert results == [RecognitionPass("default", "FALLBACK TEXT")]
        assert engine.calls[-1] == "default"

    def test_fallback_failure_returns_empty(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine({"default": RuntimeError("still broken")})
        assert _recognizer(engine).recognize(sample_image) == []

    def test_timeout_passed_to_engine(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine({"block_restricted": "A"})
        _recognizer(engine, pass_timeout=12.5).recognize(sample_image)
        assert set(engine.timeouts) == {12.5}

    def test_single_worker(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine({"sparse_text": "C"})
        results = _recognizer(engine, max_workers=1).recognize(sample_image)
        assert results == [RecognitionPass("sparse_text", "C")]

    def test_progress_reported_per_pass(self, sample_image: np.ndarray) -> None:
        events: list[tuple[str, float]] = []
        engine = FakeEngine(
            {"block_restricted": "A", "high_res_auto": "B", "sparse_text": "C"}
        )
        _recognizer(engine, progress=lambda cid, frac: events.append((cid, frac))).recognize(
            sample_image
        )

        assert len(events) == 3
        assert [frac for _, frac in events] == pytest.approx([1 / 3, 2 / 3, 1.0])
        assert {cid for cid, _ in events} == {"block_restricted", "high_res_auto", "sparse_text"}

    def test_progress_reported_for_fallback(self, sample_image: np.ndarray) -> None:
        events: list[tuple[str, float]] = []
        engine = FakeEngine({"default": "X"})
        _recognizer(engine, progress=lambda cid, frac: events.append((cid, frac))).recognize(
            sample_image
        )
        assert events[-1] == ("default", 1.0)

    def test_failing_progress_callback_ignored(self, sample_image: np.ndarray) -> None:
        def broken(config_id: str, fraction: float) -> None:
            raise ValueError("listener gone")

        engine = FakeEngine({"block_restricted": "A"})
        results = _recognizer(engine, progress=broken).recognize(sample_image)
        assert results == [RecognitionPass("block_restricted", "A")]

    def test_no_passes_uses_fallback(self, sample_image: np.ndarray) -> None:
        engine = FakeEngine({"default": "ONLY"})
        recognizer = MultiPassRecognizer(engine, passes=[], fallback_pass=_FALLBACK)
        assert recognizer.recognize(sample_image) == [RecognitionPass("default", "ONLY")]

    def test_from_config_builds_tesseract_engine(self) -> None:
        config = AppConfig()
        with patch("title_ocr.ocr.tesseract_engine.pytesseract"):
            recognizer = MultiPassRecognizer.from_config(config)

        assert isinstance(recognizer.engine, TesseractEngine)
        assert [p.config_id for p in recognizer.passes] == [
            "block_restricted",
            "high_res_auto",
            "sparse_text",
        ]
        assert recognizer.fallback_pass.config_id == "default"
        assert recognizer.max_workers == 3
        assert recognizer.pass_timeout == 30.0

    def test_from_config_keeps_given_engine(self) -> None:
        engine = FakeEngine({})
        recognizer = MultiPassRecognizer.from_config(AppConfig(), engine=engine)
        assert recognizer.engine is engine
