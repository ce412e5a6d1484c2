"""Shared fixtures: build EPUB archives in memory."""

import io
import struct
import zipfile
from dataclasses import dataclass
from typing import Callable

import pytest

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

FILLER_WORDS = ["alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta"]


def filler(count: int) -> str:
    """``count`` lowercase words with no narrative markers or proper nouns."""
    return " ".join(FILLER_WORDS[i % len(FILLER_WORDS)] for i in range(count))


def dialogue(count: int) -> str:
    """``count`` words of prose with quoted dialogue and named characters."""
    unit = ('"Wait," Mara said to Tobin. ' + filler(15)).split()
    words: list[str] = []
    while len(words) < count:
        words.extend(unit)
    return " ".join(words[:count])


def xhtml(body: str, title: str = "") -> str:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml" '
        'xmlns:epub="http://www.idpf.org/2007/ops">\n'
        f"<head><title>{title}</title></head>\n"
        f"<body>{body}</body>\n</html>\n"
    )


@dataclass
class Doc:
    """One spine document for the archive builder."""

    id: str
    body: str
    label: str | None = None  # TOC label
    href: str | None = None
    in_spine: bool = True

    @property
    def file_name(self) -> str:
        return self.href or f"{self.id}.xhtml"


def _nav_document(docs: list[Doc]) -> str:
    items = "\n".join(
        f'<li><a href="{d.file_name}">{d.label}</a></li>' for d in docs if d.label
    )
    return xhtml(f'<nav epub:type="toc"><h1>Contents</h1><ol>{items}</ol></nav>')


def _ncx_document(docs: list[Doc]) -> str:
    points = "\n".join(
        f'<navPoint id="np{i}" playOrder="{i + 1}">'
        f"<navLabel><text>{d.label}</text></navLabel>"
        f'<content src="{d.file_name}"/></navPoint>'
        for i, d in enumerate(d for d in docs if d.label)
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">'
        f"<navMap>{points}</navMap></ncx>"
    )


def build_epub(
    docs: list[Doc],
    *,
    toc: str | None = "nav",
    opf_dir: str = "OEBPS",
    title: str = "Test Book",
    author: str = "Jane Doe",
    container_xml: str | None = None,
    opf_xml: str | None = None,
    skip_files: tuple[str, ...] = (),
    extra_files: dict[str, bytes | str] | None = None,
    ghost_itemrefs: tuple[str, ...] = (),
) -> bytes:
    """Assemble an EPUB in memory.

    ``toc`` is "nav", "ncx" or None (no navigation at all).
    ``ghost_itemrefs`` open the spine with ids missing from the manifest.
    """
    prefix = f"{opf_dir}/" if opf_dir else ""
    opf_path = f"{prefix}content.opf"

    manifest = [
        f'<item id="{d.id}" href="{d.file_name}" media-type="application/xhtml+xml"/>'
        for d in docs
    ]
    spine_attr = ""
    files: dict[str, bytes | str] = {}
    if toc == "nav":
        manifest.append(
            '<item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" '
            'properties="nav"/>'
        )
        files[f"{prefix}nav.xhtml"] = _nav_document(docs)
    elif toc == "ncx":
        manifest.append(
            '<item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>'
        )
        spine_attr = ' toc="ncx"'
        files[f"{prefix}toc.ncx"] = _ncx_document(docs)

    spine_ids = [*ghost_itemrefs, *(d.id for d in docs if d.in_spine)]
    itemrefs = "\n".join(f'<itemref idref="{i}"/>' for i in spine_ids)
    opf = opf_xml or (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" '
        'unique-identifier="uid">\n'
        '<metadata xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
        f"<dc:title>{title}</dc:title>\n"
        f"<dc:creator>{author}</dc:creator>\n"
        "<dc:language>en</dc:language>\n"
        '<dc:identifier id="uid">urn:uuid:1234</dc:identifier>\n'
        "</metadata>\n"
        f"<manifest>\n{chr(10).join(manifest)}\n</manifest>\n"
        f"<spine{spine_attr}>\n{itemrefs}\n</spine>\n"
        "</package>\n"
    )

    files["META-INF/container.xml"] = container_xml or CONTAINER_XML.format(
        opf_path=opf_path
    )
    files[opf_path] = opf
    for d in docs:
        files[f"{prefix}{d.file_name}"] = xhtml(d.body)
    files.update(extra_files or {})

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("mimetype", "application/epub+zip", zipfile.ZIP_STORED)
        for name, content in files.items():
            if name in skip_files:
                continue
            zf.writestr(name, content)
    return buffer.getvalue()


def corrupt_member(data: bytes, name: str, length: int = 40) -> bytes:
    """Overwrite the start of one member's compressed bytes with 0xFF."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = zf.getinfo(name)
    buffer = bytearray(data)
    # Local header: 30 fixed bytes, then the file name and extra field
    header = info.header_offset
    name_len, extra_len = struct.unpack("<HH", buffer[header + 26 : header + 30])
    start = header + 30 + name_len + extra_len
    size = min(length, info.compress_size)
    buffer[start : start + size] = b"\xff" * size
    return bytes(buffer)


@pytest.fixture
def epub_factory() -> Callable[..., bytes]:
    return build_epub


@pytest.fixture
def front_matter_book() -> bytes:
    """Cover, title page and copyright followed by two chapters."""
    return build_epub(
        [
            Doc("cover", "<h1>Cover</h1><p>The Long Road</p>", label="Cover"),
            Doc("titlepage", "<h1>Title Page</h1><p>The Long Road by Jane Doe</p>",
                label="Title Page"),
            Doc("copyright", "<h1>Copyright</h1><p>All rights reserved. 2024</p>",
                label="Copyright"),
            Doc("ch1", f"<h1>Chapter 1</h1><p>{dialogue(250)}</p>", label="Chapter 1"),
            Doc("ch2", f"<h1>Chapter 2</h1><p>{filler(300)}</p>", label="Chapter 2"),
        ]
    )
