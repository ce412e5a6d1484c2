"""Extraction settings."""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClassifierConfig(BaseModel):
    """Thresholds used by the chapter classifier."""

    model_config = ConfigDict(frozen=True)

    # Hard gate: anything shorter is never a chapter
    min_word_count: int = 100
    # Substantial content (+2)
    preferred_word_count: int = 200
    # Raw length bonus (+1)
    long_word_count: int = 1000
    # Short title with long body (+1)
    short_title_length: int = 20
    short_title_min_words: int = 500
    # Ratio of capitalized words to total words (+1)
    proper_noun_density: float = 0.02
    # Minimum total score to be a chapter
    chapter_threshold: int = 3
    # Sections kept when nothing passes classification
    fallback_limit: int = 10
    # Shorter sections are only used when nothing else is left
    min_fallback_chars: int = 300


class Settings(BaseSettings):
    """Settings loaded from environment variables (CHAPTERIZER_*)."""

    # Pipeline
    ready_timeout_seconds: float = 30.0
    max_workers: int = 1  # >1 loads sections on a thread pool

    # Section loading
    max_heading_length: int = 100

    # Classification
    min_word_count: int = 100
    preferred_word_count: int = 200
    long_word_count: int = 1000
    short_title_length: int = 20
    short_title_min_words: int = 500
    proper_noun_density: float = 0.02
    chapter_threshold: int = 3
    fallback_limit: int = 10
    min_fallback_chars: int = 300

    # CLI upload limit
    max_archive_size_mb: int = 50

    model_config = SettingsConfigDict(
        env_prefix="CHAPTERIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def classifier_config(self) -> ClassifierConfig:
        """Build the classifier thresholds from these settings."""
        return ClassifierConfig(
            **{
                name: getattr(self, name)
                for name in ClassifierConfig.model_fields
            }
        )


settings = Settings()
