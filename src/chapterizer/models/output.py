"""Data models for the parse result handed to the host application."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chapterizer.models.book import BookMetadata, TOCEntry
from chapterizer.models.extraction import (
    Chapter,
    ClassificationResult,
    ExcludedSection,
)


class ProcessingInfo(BaseModel):
    """Summary of how the chapter list was produced."""

    model_config = ConfigDict(frozen=True)

    total_sections: int
    excluded_sections: list[str] = Field(default_factory=list)
    chapter_count: int
    used_fallback: bool = False

    @classmethod
    def from_classification(
        cls,
        result: ClassificationResult,
        dropped: list[ExcludedSection] | None = None,
    ) -> "ProcessingInfo":
        """Summarize a classification; ``dropped`` lists sections that failed to load."""
        excluded = result.excluded_sections + (dropped or [])
        return cls(
            total_sections=result.total_sections,
            excluded_sections=[str(e) for e in excluded],
            chapter_count=result.chapter_count,
            used_fallback=result.used_fallback,
        )


class ParseResult(BaseModel):
    """Complete, immutable result of parsing one EPUB archive."""

    model_config = ConfigDict(frozen=True)

    metadata: BookMetadata
    chapters: list[Chapter]
    processing_info: ProcessingInfo
    toc: list[TOCEntry] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON shape consumed by the host application."""
        return {
            "metadata": self.metadata.model_dump(),
            "chapters": [
                {
                    "id": c.id,
                    "title": c.title,
                    "content": c.content,
                    "href": c.href,
                    "order": c.order,
                }
                for c in self.chapters
            ],
            "processingInfo": {
                "totalSections": self.processing_info.total_sections,
                "excludedSections": list(self.processing_info.excluded_sections),
                "chapterCount": self.processing_info.chapter_count,
            },
        }
