"""Tests for loading title documents into page images."""

import io
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from title_ocr.ocr.page_loader import PageLoader


def _png_bytes(mode: str = "RGB", size: tuple[int, int] = (40, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size).save(buffer, format="PNG")
    return buffer.getvalue()


class TestPageLoader:
    """Tests for PageLoader."""

    def test_load_png_path(self, tmp_path: Path) -> None:
        path = tmp_path / "title.png"
        path.write_bytes(_png_bytes())

        pages = PageLoader().load(path)
        assert len(pages) == 1
        assert pages[0].shape == (30, 40, 3)
        assert pages[0].dtype == np.uint8

    def test_load_bytes(self) -> None:
        pages = PageLoader().load(_png_bytes(mode="L"))
        assert pages[0].shape == (30, 40)

    def test_rgba_converted_to_rgb(self) -> None:
        pages = PageLoader().load(_png_bytes(mode="RGBA"))
        assert pages[0].shape == (30, 40, 3)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            PageLoader().load(tmp_path / "nope.png")

    def test_unreadable_bytes(self) -> None:
        with pytest.raises(ValueError, match="Unreadable image"):
            PageLoader().load(b"definitely not an image")

    def test_unreadable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.jpg"
        path.write_text("garbage")
        with pytest.raises(ValueError):
            PageLoader().load(path)

    def test_pdf_bytes(self) -> None:
        rendered = [Image.new("RGB", (20, 10)), Image.new("RGB", (20, 10))]
        with patch(
            "title_ocr.ocr.page_loader.convert_from_bytes", return_value=rendered
        ) as mock_convert:
            pages = PageLoader(dpi=150).load(b"%PDF-1.7 ...")

        assert len(pages) == 2
        assert mock_convert.call_args.kwargs["dpi"] == 150

    def test_pdf_path(self, tmp_path: Path) -> None:
        path = tmp_path / "title.PDF"
        path.write_bytes(b"%PDF-1.4")
        with patch(
            "title_ocr.ocr.page_loader.convert_from_path",
            return_value=[Image.new("L", (20, 10))],
        ) as mock_convert:
            pages = PageLoader().load(path)

        assert pages[0].shape == (10, 20)
        assert mock_convert.call_args.args[0] == str(path)

    def test_pdf_failure_wrapped(self) -> None:
        with patch(
            "title_ocr.ocr.page_loader.convert_from_bytes",
            side_effect=OSError("poppler not installed"),
        ):
            with pytest.raises(RuntimeError, match="PDF conversion failed"):
                PageLoader().load(b"%PDF-1.4")
