"""Package descriptor (OPF) parsing: metadata, manifest and spine."""

import logging

from lxml import etree

from chapterizer.core.archive import EpubArchive
from chapterizer.core.xml import (
    children_local,
    find_local,
    get_attr,
    iter_local,
    parse_xml,
    text_of,
)
from chapterizer.errors import InvalidPackageDescriptor
from chapterizer.models.book import (
    BookMetadata,
    ManifestItem,
    PackageDocument,
    SpineItem,
)

log = logging.getLogger(__name__)


def parse_package(archive: EpubArchive, path: str) -> PackageDocument:
    """Load and parse the package descriptor at ``path``."""
    content = archive.read(path)
    if content is None:
        raise InvalidPackageDescriptor(f"Package descriptor not found: {path}")

    try:
        root = parse_xml(content)
    except etree.XMLSyntaxError as e:
        raise InvalidPackageDescriptor(f"{path} is not valid XML: {e}") from e

    metadata_elem = find_local(root, "metadata")
    if metadata_elem is None:
        raise InvalidPackageDescriptor(f"No metadata element in {path}")

    manifest_elem = find_local(root, "manifest")
    if manifest_elem is None:
        raise InvalidPackageDescriptor(f"No manifest element in {path}")

    manifest = _parse_manifest(manifest_elem)

    spine_elem = find_local(root, "spine")
    if spine_elem is None:
        raise InvalidPackageDescriptor(f"No spine element in {path}")

    spine = _parse_spine(spine_elem, manifest)
    toc_id = get_attr(spine_elem, "toc")

    log.info(
        "Package %s: %d manifest items, %d spine entries",
        path,
        len(manifest),
        len(spine),
    )

    return PackageDocument(
        path=path,
        metadata=_parse_metadata(metadata_elem),
        manifest=manifest,
        spine=spine,
        toc_id=toc_id,
    )


def _parse_metadata(metadata_elem: etree._Element) -> BookMetadata:
    """Extract Dublin Core metadata, matching elements by local name."""

    def first(name: str) -> str | None:
        return text_of(find_local(metadata_elem, name))

    fields = {
        "title": first("title"),
        "author": first("creator"),
        "language": first("language"),
        "publisher": first("publisher"),
        "publication_date": first("date"),
        "description": first("description"),
        "identifier": first("identifier"),
    }
    # Absent values fall back to the model defaults
    return BookMetadata(**{k: v for k, v in fields.items() if v})


def _parse_manifest(manifest_elem: etree._Element) -> dict[str, ManifestItem]:
    manifest: dict[str, ManifestItem] = {}
    for item in iter_local(manifest_elem, "item"):
        item_id = get_attr(item, "id")
        href = get_attr(item, "href")
        if not item_id or not href:
            continue
        if item_id in manifest:
            log.debug("Duplicate manifest id %s ignored", item_id)
            continue
        manifest[item_id] = ManifestItem(
            id=item_id,
            href=href,
            media_type=get_attr(item, "media-type") or "",
            properties=frozenset((get_attr(item, "properties") or "").split()),
        )
    return manifest


def _parse_spine(
    spine_elem: etree._Element, manifest: dict[str, ManifestItem]
) -> list[SpineItem]:
    spine: list[SpineItem] = []
    for itemref in children_local(spine_elem, "itemref"):
        idref = get_attr(itemref, "idref") or ""
        # Kept so later entries keep their spine index; loading skips it
        if idref not in manifest:
            log.warning("Spine references unknown manifest id %s", idref)
        spine.append(
            SpineItem(
                idref=idref,
                linear=(get_attr(itemref, "linear") or "yes").lower() != "no",
            )
        )
    return spine
