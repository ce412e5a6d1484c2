"""Data models for section loading and chapter classification."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExclusionReason(str, Enum):
    """Why a candidate section was not classified as a chapter."""

    EXCLUDE_PATTERN = "exclude_pattern"
    TOO_SHORT = "too_short"
    LOW_SCORE = "low_score"
    LOAD_FAILURE = "load_failure"


class Section(BaseModel):
    """A loaded and cleaned spine document, before classification."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str | None = None
    content: str
    href: str
    order: int
    word_count: int = 0

    @property
    def display_title(self) -> str:
        """Resolved title, or the generic "Section N" default."""
        if self.title and self.title.strip():
            return self.title.strip()
        return f"Section {self.order + 1}"


class Chapter(BaseModel):
    """A section that passed classification."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str
    href: str
    order: int
    word_count: int = 0


class ExcludedSection(BaseModel):
    """Audit record for a section that did not become a chapter."""

    model_config = ConfigDict(frozen=True)

    title: str
    reason: str
    kind: ExclusionReason

    def __str__(self) -> str:
        return f"{self.title} ({self.reason})"


class ClassificationResult(BaseModel):
    """Chapters plus the audit trail of excluded sections."""

    model_config = ConfigDict(frozen=True)

    chapters: list[Chapter] = Field(default_factory=list)
    excluded_sections: list[ExcludedSection] = Field(default_factory=list)
    total_sections: int = 0
    used_fallback: bool = False

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)
