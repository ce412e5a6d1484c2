"""Load spine documents and turn them into classification candidates."""

import logging
from concurrent.futures import ThreadPoolExecutor

from chapterizer.core.archive import EpubArchive
from chapterizer.core.content_processor import ContentProcessor, count_words
from chapterizer.core.navigation import normalize_href
from chapterizer.errors import EpubError, SectionLoadFailure
from chapterizer.models.book import PackageDocument, SpineItem
from chapterizer.models.extraction import ExcludedSection, ExclusionReason, Section

log = logging.getLogger(__name__)


class SectionLoader:
    """Load, clean and title every content document in the spine."""

    def __init__(
        self,
        archive: EpubArchive,
        package: PackageDocument,
        toc_titles: dict[str, str],
        processor: ContentProcessor | None = None,
    ):
        self.archive = archive
        self.package = package
        self.toc_titles = toc_titles
        self.processor = processor or ContentProcessor()
        # Sections that failed to load, in spine order
        self.dropped: list[ExcludedSection] = []

    def load(self, order: int, spine_item: SpineItem) -> Section | None:
        """Load one spine entry.

        Returns None for non-content items and documents with no text.
        Raises SectionLoadFailure when the document cannot be read.
        """
        item = self.package.item_for(spine_item)
        if item is None or not item.is_content_file:
            return None

        path = self.package.resolve(item.href)
        try:
            content = self.archive.read(path)
        except EpubError as e:
            raise SectionLoadFailure(item.id, item.href, e) from e
        if content is None:
            raise SectionLoadFailure(item.id, item.href, f"{path} not in archive")

        try:
            heading, text = self.processor.process(content)
        except Exception as e:
            raise SectionLoadFailure(item.id, item.href, e) from e

        if not text:
            log.debug("Section %s (%s) has no text, dropped", item.id, item.href)
            return None

        title = self.toc_titles.get(normalize_href(item.href)) or heading
        section = Section(
            id=item.id,
            title=title,
            content=text,
            href=item.href,
            order=order,
            word_count=count_words(text),
        )
        log.debug(
            "Section %d/%d: %r (%d words)",
            order + 1,
            len(self.package.spine),
            section.display_title,
            section.word_count,
        )
        return section

    def _load_or_skip(
        self, order: int, spine_item: SpineItem
    ) -> Section | ExcludedSection | None:
        try:
            return self.load(order, spine_item)
        except SectionLoadFailure as e:
            log.warning("Skipping section %d: %s", order + 1, e)
            title = self.toc_titles.get(normalize_href(e.href))
            return ExcludedSection(
                title=title or f"Section {order + 1}",
                reason="load failed",
                kind=ExclusionReason.LOAD_FAILURE,
            )

    def load_all(self, max_workers: int = 1) -> list[Section]:
        """Load every spine entry, skipping the ones that fail.

        Sections come back in spine order whatever ``max_workers`` is.
        Failures are recorded in ``dropped``.
        """
        spine = list(enumerate(self.package.spine))
        if max_workers > 1 and len(spine) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(lambda args: self._load_or_skip(*args), spine))
        else:
            results = [self._load_or_skip(order, item) for order, item in spine]

        sections = [r for r in results if isinstance(r, Section)]
        self.dropped = [r for r in results if isinstance(r, ExcludedSection)]
        log.info(
            "Loaded %d sections from %d spine entries (%d failed)",
            len(sections),
            len(spine),
            len(self.dropped),
        )
        return sections
