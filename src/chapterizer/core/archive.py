"""In-memory EPUB archive access and container resolution."""

import io
import logging
import zipfile
import zlib
from urllib.parse import unquote

from lxml import etree

from chapterizer.core.xml import find_local, get_attr, parse_xml
from chapterizer.errors import InvalidContainer, MalformedArchive

log = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"


class EpubArchive:
    """Read-only view over an EPUB (ZIP) held in memory."""

    def __init__(self, data: bytes):
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise MalformedArchive(f"Not a ZIP archive: {e}") from e
        self._names = set(self._zip.namelist())
        log.debug("Opened archive with %d entries", len(self._names))

    def __enter__(self) -> "EpubArchive":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying ZIP handle."""
        self._zip.close()

    def _lookup(self, path: str) -> str | None:
        path = path.lstrip("/")
        if path in self._names:
            return path
        # Manifest hrefs are URL-encoded; ZIP entry names usually are not
        decoded = unquote(path)
        if decoded in self._names:
            return decoded
        return None

    def read(self, path: str) -> bytes | None:
        """Raw bytes for an entry, or None when the entry is absent."""
        name = self._lookup(path)
        if name is None:
            return None
        # Damaged, encrypted or oddly compressed members fail in several ways
        try:
            return self._zip.read(name)
        except (
            zipfile.BadZipFile,
            zlib.error,
            OSError,
            RuntimeError,
            NotImplementedError,
        ) as e:
            raise MalformedArchive(f"Cannot read {name}: {e}") from e


def resolve_container(archive: EpubArchive) -> str:
    """Return the package descriptor path named by META-INF/container.xml."""
    content = archive.read(CONTAINER_PATH)
    if content is None:
        raise InvalidContainer(f"{CONTAINER_PATH} not found")

    try:
        root = parse_xml(content)
    except etree.XMLSyntaxError as e:
        raise InvalidContainer(f"{CONTAINER_PATH} is not valid XML: {e}") from e

    rootfile = find_local(root, "rootfile")
    if rootfile is None:
        raise InvalidContainer(f"No rootfile element in {CONTAINER_PATH}")

    full_path = (get_attr(rootfile, "full-path") or "").strip()
    if not full_path:
        raise InvalidContainer(f"rootfile in {CONTAINER_PATH} has no full-path")

    log.debug("Package descriptor at %s", full_path)
    return full_path
