"""FastAPI application exposing title extraction over HTTP.

Provides endpoints for single and batch extraction, the list of
recognized manufacturers, and a health check.
"""

import shutil
import time
import uuid
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from title_ocr import __version__
from title_ocr.extraction.aliases import load_configured_aliases
from title_ocr.ocr.document_processor import DocumentProcessor
from title_ocr.utils.config import load_config
from title_ocr.utils.logger import get_logger

from .schemas import (
    BatchExtractionResponse,
    BatchItemResponse,
    ExtractionResponse,
    HealthResponse,
    MakesResponse,
    PageResponse,
    VehicleFieldsResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="Vehicle Title OCR API",
    description="Extract VIN suffix, plate, year, make and model from vehicle titles",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/webp",
    "application/pdf",
    "application/octet-stream",
}


def _get_processor() -> DocumentProcessor:
    """Build the document processor from the current configuration."""
    return DocumentProcessor(load_config())


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.get("/makes", response_model=MakesResponse)
async def list_makes() -> MakesResponse:
    """List the canonical manufacturer names."""
    aliases = load_configured_aliases(load_config().extraction)
    return MakesResponse(makes=aliases.canonical_makes())


@app.post("/extract", response_model=ExtractionResponse)
async def extract_document(
    file: Annotated[UploadFile, File(...)],
) -> ExtractionResponse:
    """Extract vehicle fields from an uploaded title image or PDF.

    Args:
        file: Uploaded document file.

    Returns:
        The merged result for the document and the per-page results.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    content = await file.read()
    filename = file.filename or "document"
    try:
        doc = _get_processor().process(content, filename)
    except (ValueError, RuntimeError) as exc:
        logger.warning("Could not read %s: %s", filename, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Extraction failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return ExtractionResponse(
        success=True,
        document_id=str(uuid.uuid4()),
        filename=filename,
        page_count=doc.page_count,
        result=VehicleFieldsResponse.from_result(doc.best_result()),
        pages=[
            PageResponse(
                page_number=page.page_number,
                passes=[p.config_id for p in page.passes],
                result=VehicleFieldsResponse.from_result(page.extraction),
            )
            for page in doc.pages
        ],
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.post("/extract/batch", response_model=BatchExtractionResponse)
async def extract_batch(
    files: Annotated[list[UploadFile], File(...)],
) -> BatchExtractionResponse:
    """Extract vehicle fields from several uploaded documents.

    Args:
        files: List of uploaded title documents.

    Returns:
        Batch extraction results with per-file outcomes.
    """
    results: list[BatchItemResponse] = []
    successful = 0

    for file in files:
        name = file.filename or "unknown"
        try:
            result = await extract_document(file)
            results.append(BatchItemResponse(filename=name, result=result))
            successful += 1
        except HTTPException as exc:
            results.append(BatchItemResponse(filename=name, error=exc.detail))

    return BatchExtractionResponse(
        success=successful > 0,
        total_documents=len(files),
        successful=successful,
        failed=len(files) - successful,
        results=results,
    )
