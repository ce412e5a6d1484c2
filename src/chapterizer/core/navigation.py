"""Table of contents recovery from nav documents, NCX files or the spine."""

import logging
import posixpath
import warnings
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning

from chapterizer.core.archive import EpubArchive
from chapterizer.core.xml import children_local, find_local, get_attr, parse_xml, text_of
from chapterizer.models.book import PackageDocument, TOCEntry

# Nav documents are XHTML; parsing them as HTML is intended
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)

NCX_MEDIA_TYPE = "application/x-dtbncx+xml"


class NavigationResolver:
    """Recover a TOC forest, trying nav document, NCX, then the spine."""

    def __init__(self, archive: EpubArchive, package: PackageDocument):
        self.archive = archive
        self.package = package

    def resolve(self) -> list[TOCEntry]:
        """Return the TOC forest. Never raises."""
        strategies = (
            ("nav document", self._from_nav_document),
            ("NCX", self._from_ncx),
        )
        for name, strategy in strategies:
            try:
                toc = strategy()
            except Exception as e:
                log.warning("Ignoring unreadable %s: %s", name, e)
                continue
            if toc:
                log.debug("TOC recovered from %s (%d top-level entries)", name, len(toc))
                return toc

        log.debug("No navigation found, deriving TOC from spine")
        return self._from_spine()

    def _to_package_href(self, doc_path: str, href: str) -> str:
        """Rewrite an href found in ``doc_path`` relative to the descriptor directory."""
        if not href:
            return ""
        path, _, fragment = href.partition("#")
        if path:
            full = posixpath.normpath(
                posixpath.join(posixpath.dirname(doc_path), path)
            )
            path = self.package.relative(full)
        else:
            path = self.package.relative(doc_path)
        return f"{path}#{fragment}" if fragment else path

    # -- EPUB 3 navigation document ------------------------------------------

    def _from_nav_document(self) -> list[TOCEntry]:
        nav_item = self.package.nav_item()
        if nav_item is None:
            return []

        nav_path = self.package.resolve(nav_item.href)
        content = self.archive.read(nav_path)
        if content is None:
            log.warning("Nav document %s missing from archive", nav_path)
            return []

        soup = BeautifulSoup(content, "lxml")
        nav = self._find_toc_nav(soup)
        if nav is None:
            return []

        top_list = nav.find(["ol", "ul"])
        if top_list is None:
            return []
        return self._parse_nav_list(top_list, nav_path, level=0)

    def _find_toc_nav(self, soup: BeautifulSoup) -> Tag | None:
        navs = soup.find_all("nav")
        for nav in navs:
            for key, value in nav.attrs.items():
                if key.split(":")[-1] == "type" and "toc" in str(value).split():
                    return nav
        return navs[0] if navs else None

    def _parse_nav_list(self, list_tag: Tag, nav_path: str, level: int) -> list[TOCEntry]:
        entries = []
        for index, item in enumerate(list_tag.find_all("li", recursive=False)):
            link = item.find("a", recursive=False)
            label = link if link is not None else item.find("span", recursive=False)
            nested = item.find(["ol", "ul"], recursive=False)
            children = (
                self._parse_nav_list(nested, nav_path, level + 1) if nested is not None else []
            )
            if label is None:
                entries.extend(children)
                continue

            # A <span> label groups its children without pointing anywhere
            href = link.get("href", "") if link is not None else ""
            entries.append(
                TOCEntry(
                    id=label.get("id") or f"nav_{level}_{index}",
                    title=" ".join(label.get_text(" ").split()) or "Untitled",
                    href=self._to_package_href(nav_path, href),
                    level=level,
                    children=children,
                )
            )
        return entries

    # -- EPUB 2 NCX ------------------------------------------------------------

    def _ncx_path(self) -> str | None:
        toc_id = self.package.toc_id
        item = self.package.manifest.get(toc_id) if toc_id else None
        if item is None:
            item = next(
                (
                    i
                    for i in self.package.manifest.values()
                    if i.media_type == NCX_MEDIA_TYPE
                ),
                None,
            )
        return self.package.resolve(item.href) if item else None

    def _from_ncx(self) -> list[TOCEntry]:
        ncx_path = self._ncx_path()
        if ncx_path is None:
            return []

        content = self.archive.read(ncx_path)
        if content is None:
            log.warning("NCX %s missing from archive", ncx_path)
            return []

        nav_map = find_local(parse_xml(content), "navMap")
        if nav_map is None:
            return []
        return [
            self._parse_nav_point(point, ncx_path, level=0)
            for point in children_local(nav_map, "navPoint")
        ]

    def _parse_nav_point(self, point, ncx_path: str, level: int) -> TOCEntry:
        label = find_local(point, "navLabel")
        content = next(iter(children_local(point, "content")), None)
        src = get_attr(content, "src") if content is not None else None
        return TOCEntry(
            id=get_attr(point, "id") or "",
            title=text_of(label) or "Untitled",
            href=self._to_package_href(ncx_path, src or ""),
            level=level,
            children=[
                self._parse_nav_point(child, ncx_path, level + 1)
                for child in children_local(point, "navPoint")
            ],
        )

    # -- Spine fallback -----------------------------------------------------------

    def _from_spine(self) -> list[TOCEntry]:
        entries = []
        for position, spine_item in enumerate(self.package.spine):
            item = self.package.item_for(spine_item)
            if item is None:
                continue
            entries.append(
                TOCEntry(
                    id=spine_item.idref,
                    title=f"Chapter {position + 1}",
                    href=item.href,
                    level=0,
                    synthetic=True,
                )
            )
        return entries


def build_title_map(toc: list[TOCEntry]) -> dict[str, str]:
    """Map document hrefs (fragment stripped) to their first TOC label."""
    title_map: dict[str, str] = {}
    for root in toc:
        for entry in root.walk():
            if entry.synthetic or not entry.href or not entry.title:
                continue
            file_ref = normalize_href(entry.href)
            if file_ref not in title_map:
                title_map[file_ref] = entry.title
    return title_map


def normalize_href(href: str) -> str:
    """Canonical form of an href for matching: decoded, no fragment."""
    return posixpath.normpath(unquote(href.split("#", 1)[0]))
