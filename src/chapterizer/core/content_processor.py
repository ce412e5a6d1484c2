"""Convert section markup into clean narrative text."""

import re
import warnings

from bs4 import (
    BeautifulSoup,
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
    XMLParsedAsHTMLWarning,
)

# EPUB files use XHTML; parsing them with the HTML parser is intended
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

# Elements removed together with everything inside them
REMOVED_TAGS = [
    "script", "style", "noscript", "template",
    # Embedded media
    "iframe", "object", "embed", "audio", "video", "canvas", "svg", "math",
    "img", "picture", "figure", "figcaption",
    # Structural chrome
    "nav", "header", "footer", "aside",
    # Forms
    "form", "input", "button", "select", "textarea", "label", "fieldset", "legend",
    # Tables
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption", "colgroup", "col",
]

REMOVED_ROLES = {
    "navigation", "banner", "contentinfo", "complementary", "search", "form",
    "dialog", "alert", "status", "tooltip", "toolbar", "menu", "menubar",
    "tablist", "tabpanel", "tree", "treeitem", "doc-pagebreak",
}

# Elements whose boundaries become paragraph breaks
BLOCK_TAGS = {
    "p", "div", "section", "article", "main", "blockquote", "body",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "li", "ul", "ol", "dl", "dt", "dd", "pre", "hr", "address",
}

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

SKIPPED_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

_PARAGRAPH_BREAK = "\x00"
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
_WHITESPACE_RE = re.compile(r"\s+")


def count_words(text: str) -> int:
    """Number of whitespace-separated tokens."""
    return len(text.split())


class ContentProcessor:
    """Process section markup into plain text with paragraph breaks."""

    def __init__(self, max_heading_length: int = 100):
        self.max_heading_length = max_heading_length

    def process(self, html_content: bytes | str) -> tuple[str | None, str]:
        """Return ``(heading, text)`` for one document."""
        soup = BeautifulSoup(html_content, "lxml")
        heading = self.extract_heading(soup)
        return heading, self.to_plain_text(soup)

    def extract_heading(self, soup: BeautifulSoup) -> str | None:
        """First non-empty h1-h6 in document order, if short enough."""
        for element in soup.find_all(HEADING_TAGS):
            text = " ".join(element.get_text(" ").split())
            if text:
                return text if len(text) < self.max_heading_length else None
        return None

    def to_plain_text(self, soup: BeautifulSoup) -> str:
        """Strip non-narrative elements and flatten the rest to text."""
        body = soup.body or soup
        self._remove_non_narrative(body)

        pieces: list[str] = []
        self._collect(body, pieces)
        raw = "".join(pieces)

        paragraphs = []
        for block in raw.split(_PARAGRAPH_BREAK):
            # Two consecutive <br> inside a block also separate paragraphs
            for part in _BLANK_LINE_RE.split(block):
                text = _WHITESPACE_RE.sub(" ", part).strip()
                if text:
                    paragraphs.append(text)
        return "\n\n".join(paragraphs)

    def _remove_non_narrative(self, root: Tag) -> None:
        for tag in root.find_all(REMOVED_TAGS):
            if not tag.decomposed:
                tag.decompose()
        for tag in root.find_all(attrs={"role": True}):
            if tag.decomposed:
                continue
            roles = set(str(tag.get("role", "")).lower().split())
            if roles & REMOVED_ROLES:
                tag.decompose()

    def _collect(self, node: Tag, pieces: list[str]) -> None:
        for child in node.children:
            if isinstance(child, SKIPPED_STRINGS):
                continue
            if isinstance(child, NavigableString):
                pieces.append(_WHITESPACE_RE.sub(" ", str(child)))
            elif isinstance(child, Tag):
                if child.name == "br":
                    pieces.append("\n")
                elif child.name in BLOCK_TAGS:
                    pieces.append(_PARAGRAPH_BREAK)
                    self._collect(child, pieces)
                    pieces.append(_PARAGRAPH_BREAK)
                else:
                    self._collect(child, pieces)
