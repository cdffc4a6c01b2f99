"""Result records produced by the title extraction pipeline."""

from dataclasses import dataclass, field

FIELD_NAMES: tuple[str, ...] = (
    "vehicle_id",
    "license_plate",
    "year",
    "make",
    "model",
)


@dataclass(frozen=True)
class RecognitionPass:
    """Raw text returned by one OCR engine configuration."""

    config_id: str
    raw_text: str


@dataclass(frozen=True)
class ScoredCandidate:
    """A raw OCR candidate with its heuristic score."""

    text: str
    score: int


@dataclass(frozen=True)
class ExtractedField:
    """A single extracted value and the confidence of the tier that found it.

    An absent value always carries confidence 0 and no method.
    """

    value: str | None = None
    confidence: float = 0.0
    method: str | None = None

    def __post_init__(self) -> None:
        if self.value is None:
            object.__setattr__(self, "confidence", 0.0)
            object.__setattr__(self, "method", None)
        elif not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    @classmethod
    def absent(cls) -> "ExtractedField":
        return cls()

    @property
    def found(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ExtractionResult:
    """Structured vehicle fields inferred from one document page."""

    vehicle_id: ExtractedField = field(default_factory=ExtractedField)
    license_plate: ExtractedField = field(default_factory=ExtractedField)
    year: ExtractedField = field(default_factory=ExtractedField)
    make: ExtractedField = field(default_factory=ExtractedField)
    model: ExtractedField = field(default_factory=ExtractedField)

    @classmethod
    def empty(cls) -> "ExtractionResult":
        """Return a result with every field absent."""
        return cls()

    @property
    def confidence(self) -> dict[str, float]:
        """Confidence per field name; 0.0 for absent fields."""
        return {name: getattr(self, name).confidence for name in FIELD_NAMES}

    def fields(self) -> dict[str, ExtractedField]:
        return {name: getattr(self, name) for name in FIELD_NAMES}

    def found_count(self) -> int:
        return sum(1 for f in self.fields().values() if f.found)

    def to_dict(self) -> dict[str, object]:
        """Flatten into plain values plus a confidence map."""
        data: dict[str, object] = {name: getattr(self, name).value for name in FIELD_NAMES}
        data["confidence"] = self.confidence
        return data

    def merge(self, other: "ExtractionResult") -> "ExtractionResult":
        """Combine two page results, keeping the higher-confidence value per field.

        Ties keep ``self``.
        """
        merged = {}
        for name in FIELD_NAMES:
            mine = getattr(self, name)
            theirs = getattr(other, name)
            merged[name] = theirs if theirs.confidence > mine.confidence else mine
        return ExtractionResult(**merged)
