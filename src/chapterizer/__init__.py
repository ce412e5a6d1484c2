"""Extract narrative chapters from EPUB archives."""

from chapterizer.core.pipeline import EpubParser, parse_epub
from chapterizer.errors import (
    EpubError,
    InvalidContainer,
    InvalidPackageDescriptor,
    MalformedArchive,
    ParseTimeout,
    SectionLoadFailure,
)
from chapterizer.models import ParseResult

__all__ = [
    "EpubParser",
    "parse_epub",
    "ParseResult",
    "EpubError",
    "MalformedArchive",
    "InvalidContainer",
    "InvalidPackageDescriptor",
    "ParseTimeout",
    "SectionLoadFailure",
]
