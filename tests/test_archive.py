"""Tests for archive access and container resolution."""

import pytest

from chapterizer.core.archive import EpubArchive, resolve_container
from chapterizer.errors import InvalidContainer, MalformedArchive
from conftest import Doc, build_epub, corrupt_member


@pytest.fixture
def simple_book() -> bytes:
    return build_epub([Doc("ch1", "<p>Hello</p>", href="my%20chapter.xhtml")])


def test_rejects_non_zip_bytes():
    with pytest.raises(MalformedArchive):
        EpubArchive(b"this is not a zip file")


def test_rejects_empty_bytes():
    with pytest.raises(MalformedArchive):
        EpubArchive(b"")


def test_read_returns_none_for_missing_entry(simple_book):
    with EpubArchive(simple_book) as archive:
        assert archive.read("OEBPS/missing.xhtml") is None


def test_read_bytes(simple_book):
    with EpubArchive(simple_book) as archive:
        assert archive.read("mimetype") == b"application/epub+zip"


def test_read_decodes_url_encoded_paths():
    data = build_epub([Doc("ch1", "<p>Hello</p>", href="my chapter.xhtml")])
    with EpubArchive(data) as archive:
        assert archive.read("OEBPS/my%20chapter.xhtml") is not None


def test_resolve_container(simple_book):
    with EpubArchive(simple_book) as archive:
        assert resolve_container(archive) == "OEBPS/content.opf"


def test_resolve_container_missing_file():
    data = build_epub([Doc("ch1", "<p>x</p>")], skip_files=("META-INF/container.xml",))
    with EpubArchive(data) as archive:
        with pytest.raises(InvalidContainer):
            resolve_container(archive)


def test_resolve_container_without_rootfile():
    data = build_epub(
        [Doc("ch1", "<p>x</p>")],
        container_xml='<container xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
        "<rootfiles/></container>",
    )
    with EpubArchive(data) as archive:
        with pytest.raises(InvalidContainer):
            resolve_container(archive)


def test_resolve_container_without_full_path():
    data = build_epub(
        [Doc("ch1", "<p>x</p>")],
        container_xml="<container><rootfiles><rootfile/></rootfiles></container>",
    )
    with EpubArchive(data) as archive:
        with pytest.raises(InvalidContainer):
            resolve_container(archive)


def test_resolve_container_ignores_namespace_prefix():
    data = build_epub(
        [Doc("ch1", "<p>x</p>")],
        container_xml=(
            '<c:container xmlns:c="urn:oasis:names:tc:opendocument:xmlns:container">'
            '<c:rootfiles><c:rootfile full-path="OEBPS/content.opf"/></c:rootfiles>'
            "</c:container>"
        ),
    )
    with EpubArchive(data) as archive:
        assert resolve_container(archive) == "OEBPS/content.opf"


def test_resolve_container_garbage_xml():
    data = build_epub([Doc("ch1", "<p>x</p>")], container_xml="not xml at all")
    with EpubArchive(data) as archive:
        with pytest.raises(InvalidContainer):
            resolve_container(archive)


def test_read_corrupt_member_raises_malformed(simple_book):
    data = corrupt_member(simple_book, "OEBPS/content.opf")
    with EpubArchive(data) as archive:
        with pytest.raises(MalformedArchive):
            archive.read("OEBPS/content.opf")
