"""Data models."""

from chapterizer.models.book import (
    BookMetadata,
    ManifestItem,
    PackageDocument,
    SpineItem,
    TOCEntry,
)
from chapterizer.models.extraction import (
    Chapter,
    ClassificationResult,
    ExcludedSection,
    ExclusionReason,
    Section,
)
from chapterizer.models.output import (
    ParseResult,
    ProcessingInfo,
)

__all__ = [
    # Package models
    "BookMetadata",
    "ManifestItem",
    "SpineItem",
    "TOCEntry",
    "PackageDocument",
    # Extraction models
    "Section",
    "Chapter",
    "ExclusionReason",
    "ExcludedSection",
    "ClassificationResult",
    # Output models
    "ProcessingInfo",
    "ParseResult",
]
