"""End-to-end extraction: archive bytes in, classified chapters out."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

from chapterizer.config import Settings, settings as default_settings
from chapterizer.core.archive import EpubArchive, resolve_container
from chapterizer.core.classifier import ChapterClassifier
from chapterizer.core.content_processor import ContentProcessor
from chapterizer.core.navigation import NavigationResolver, build_title_map
from chapterizer.core.package import parse_package
from chapterizer.core.section_loader import SectionLoader
from chapterizer.errors import ParseTimeout
from chapterizer.models.book import PackageDocument
from chapterizer.models.output import ParseResult, ProcessingInfo

log = logging.getLogger(__name__)


def _open_structure(data: bytes) -> tuple[EpubArchive, PackageDocument]:
    """Open the archive and parse its package descriptor."""
    archive = EpubArchive(data)
    try:
        package = parse_package(archive, resolve_container(archive))
    except BaseException:
        archive.close()
        raise
    return archive, package


def _close_late(future: Future) -> None:
    # Structure finished loading after the caller gave up on it
    if not future.cancelled() and future.exception() is None:
        archive, _ = future.result()
        archive.close()


class EpubParser:
    """Parse EPUB archives into metadata plus narrative chapters.

    The parser holds configuration only; every call to ``parse`` opens
    its own archive and closes it before returning, on success or failure.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

    def parse(self, data: bytes) -> ParseResult:
        """Parse archive bytes. Raises an ``EpubError`` subclass on fatal errors."""
        log.info("Starting EPUB parsing (%.2f MB)", len(data) / 1024 / 1024)
        archive, package = self._wait_until_ready(data)
        with archive:
            return self._extract(archive, package)

    def parse_file(self, path: Path | str) -> ParseResult:
        """Read a file from disk and parse it."""
        return self.parse(Path(path).read_bytes())

    def _wait_until_ready(self, data: bytes) -> tuple[EpubArchive, PackageDocument]:
        timeout = self.settings.ready_timeout_seconds
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="epub-ready")
        future = pool.submit(_open_structure, data)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            future.add_done_callback(_close_late)
            raise ParseTimeout(
                f"EPUB structure not ready after {timeout:g} seconds"
            ) from None
        finally:
            pool.shutdown(wait=False)

    def _extract(self, archive: EpubArchive, package: PackageDocument) -> ParseResult:
        metadata = package.metadata
        log.info("Book: %r by %s", metadata.title, metadata.author)

        toc = NavigationResolver(archive, package).resolve()

        loader = SectionLoader(
            archive,
            package,
            build_title_map(toc),
            ContentProcessor(max_heading_length=self.settings.max_heading_length),
        )
        sections = loader.load_all(max_workers=self.settings.max_workers)

        classifier = ChapterClassifier(self.settings.classifier_config())
        result = classifier.classify(sections)

        log.info(
            "Chapter processing complete: %d chapters found from %d sections",
            result.chapter_count,
            result.total_sections,
        )
        return ParseResult(
            metadata=metadata,
            chapters=result.chapters,
            processing_info=ProcessingInfo.from_classification(result, loader.dropped),
            toc=toc,
        )


def parse_epub(data: bytes, settings: Settings | None = None) -> ParseResult:
    """Parse EPUB bytes into a ``ParseResult``."""
    return EpubParser(settings).parse(data)
