"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel

from title_ocr.extraction.fields import ExtractedField, ExtractionResult


class FieldResponse(BaseModel):
    """One extracted field; ``value`` is null when nothing was found."""

    value: str | None = None
    confidence: float = 0.0
    method: str | None = None

    @classmethod
    def from_field(cls, field: ExtractedField) -> "FieldResponse":
        return cls(value=field.value, confidence=field.confidence, method=field.method)


class VehicleFieldsResponse(BaseModel):
    """The five vehicle fields plus their confidence map."""

    vehicle_id: FieldResponse
    license_plate: FieldResponse
    year: FieldResponse
    make: FieldResponse
    model: FieldResponse
    confidence: dict[str, float]

    @classmethod
    def from_result(cls, result: ExtractionResult) -> "VehicleFieldsResponse":
        fields = {name: FieldResponse.from_field(f) for name, f in result.fields().items()}
        return cls(**fields, confidence=result.confidence)


class PageResponse(BaseModel):
    """Per-page outcome: which passes produced text and what was found."""

    page_number: int
    passes: list[str]
    result: VehicleFieldsResponse


class ExtractionResponse(BaseModel):
    """Response schema for a title extraction request."""

    success: bool
    document_id: str
    filename: str
    page_count: int
    result: VehicleFieldsResponse
    pages: list[PageResponse]
    processing_time_ms: float


class BatchItemResponse(BaseModel):
    """Response schema for a single item in a batch extraction."""

    filename: str
    result: ExtractionResponse | None = None
    error: str | None = None


class BatchExtractionResponse(BaseModel):
    """Response schema for batch extraction of multiple documents."""

    success: bool
    total_documents: int
    successful: int
    failed: int
    results: list[BatchItemResponse]


class MakesResponse(BaseModel):
    """Canonical manufacturer names the make extractor can report."""

    makes: list[str]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
