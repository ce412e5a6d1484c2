"""Data models for EPUB package structure."""

import posixpath

from pydantic import BaseModel, ConfigDict, Field

CONTENT_MEDIA_MARKERS = ("html", "xml")
PLAIN_TEXT_MEDIA_TYPE = "text/plain"
STRUCTURAL_PROPERTIES = frozenset({"nav", "cover-image"})


class BookMetadata(BaseModel):
    """Book-level metadata."""

    model_config = ConfigDict(frozen=True)

    title: str = "Unknown Title"
    author: str = "Unknown Author"
    language: str = "en"
    publisher: str | None = None
    publication_date: str | None = None
    description: str | None = None
    identifier: str | None = None


class ManifestItem(BaseModel):
    """Single resource declared in the package manifest."""

    model_config = ConfigDict(frozen=True)

    id: str
    href: str
    media_type: str = ""
    properties: frozenset[str] = Field(default_factory=frozenset)

    @property
    def is_content_file(self) -> bool:
        """True for narrative documents, False for nav/cover/media items."""
        media_type = self.media_type.lower()
        is_text = media_type == PLAIN_TEXT_MEDIA_TYPE or any(
            marker in media_type for marker in CONTENT_MEDIA_MARKERS
        )
        if not is_text:
            return False
        return not (self.properties & STRUCTURAL_PROPERTIES)


class SpineItem(BaseModel):
    """Reference to a manifest item in reading order."""

    model_config = ConfigDict(frozen=True)

    idref: str
    linear: bool = True


class TOCEntry(BaseModel):
    """Single entry in table of contents."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    href: str
    level: int = 0
    children: list["TOCEntry"] = Field(default_factory=list)
    # Spine-derived placeholder, not a label from the book itself
    synthetic: bool = False

    def walk(self):
        """Yield this entry and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.walk()


class PackageDocument(BaseModel):
    """Parsed package descriptor: metadata, manifest and spine."""

    model_config = ConfigDict(frozen=True)

    path: str
    metadata: BookMetadata
    manifest: dict[str, ManifestItem] = Field(default_factory=dict)
    spine: list[SpineItem] = Field(default_factory=list)
    toc_id: str | None = None

    @property
    def directory(self) -> str:
        """Directory containing the descriptor ("" for the archive root)."""
        return posixpath.dirname(self.path)

    def resolve(self, href: str) -> str:
        """Resolve an href relative to the descriptor into an archive path."""
        href = href.split("#", 1)[0]
        return posixpath.normpath(posixpath.join(self.directory, href)).lstrip("/")

    def relative(self, archive_path: str) -> str:
        """Express an archive path relative to the descriptor directory."""
        if not self.directory:
            return archive_path
        return posixpath.relpath(archive_path, self.directory)

    def item_for(self, spine_item: SpineItem) -> ManifestItem | None:
        return self.manifest.get(spine_item.idref)

    def nav_item(self) -> ManifestItem | None:
        """Manifest item flagged as the navigation document, if any."""
        for item in self.manifest.values():
            if "nav" in item.properties:
                return item
        return None
