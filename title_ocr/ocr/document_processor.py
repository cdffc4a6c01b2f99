"""Document-level processing of vehicle titles.

Loads every page of a title document, runs the multi-pass recognizer
and the extraction pipeline on each page, and merges the page results
into one best guess per field.
"""

from dataclasses import dataclass
from pathlib import Path

from title_ocr.extraction.aliases import MakeAliasTable, load_configured_aliases
from title_ocr.extraction.fields import ExtractionResult, RecognitionPass
from title_ocr.extraction.pipeline import TitleExtractionPipeline
from title_ocr.extraction.scorer import select_best
from title_ocr.utils.config import AppConfig
from title_ocr.utils.logger import get_logger

from .page_loader import PageLoader
from .recognizer import MultiPassRecognizer, ProgressCallback

logger = get_logger(__name__)


@dataclass
class PageResult:
    """Recognition and extraction results for a single page."""

    page_number: int
    passes: list[RecognitionPass]
    selected_text: str | None
    extraction: ExtractionResult


@dataclass
class DocumentResult:
    """Results for every page of a title document."""

    source_file: str
    page_count: int
    pages: list[PageResult]

    def best_result(self) -> ExtractionResult:
        """Merge page results, keeping the most confident value per field."""
        merged = ExtractionResult.empty()
        for page in self.pages:
            merged = merged.merge(page.extraction)
        return merged


class DocumentProcessor:
    """End-to-end title processing for images and PDFs.

    Args:
        config: Application configuration object.
        aliases: Make alias table. Defaults to the packaged table, or
            the file named by ``config.extraction.make_aliases_path``.
        recognizer: Multi-pass recognizer. Built from ``config`` with a
            Tesseract engine when omitted.
        progress: Optional per-pass progress callback.
    """

    def __init__(
        self,
        config: AppConfig,
        aliases: MakeAliasTable | None = None,
        recognizer: MultiPassRecognizer | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        self.page_loader = PageLoader(dpi=config.ocr.pdf_dpi)
        if aliases is None:
            aliases = load_configured_aliases(config.extraction)
        self.recognizer = recognizer or MultiPassRecognizer.from_config(config, progress=progress)
        self.pipeline = TitleExtractionPipeline(
            aliases=aliases,
            recognizer=self.recognizer,
            config=config.extraction,
        )

    def process(self, source: Path | bytes, filename: str = "document") -> DocumentResult:
        """Process a title document from a file path or bytes.

        Args:
            source: Path to an image/PDF file, or its raw bytes.
            filename: Display name for the source document.

        Returns:
            Per-page recognition and extraction results.
        """
        logger.info("Processing title document: %s", filename)
        images = self.page_loader.load(source)
        pages: list[PageResult] = []

        for i, image in enumerate(images):
            passes = self.recognizer.recognize(image)
            selected = select_best([p.raw_text for p in passes])
            extraction = (
                self.pipeline.extract_text(selected)
                if selected is not None
                else ExtractionResult.empty()
            )
            pages.append(
                PageResult(
                    page_number=i + 1,
                    passes=passes,
                    selected_text=selected,
                    extraction=extraction,
                )
            )

        logger.info("Processed %d pages from %s", len(pages), filename)
        return DocumentResult(source_file=filename, page_count=len(pages), pages=pages)
