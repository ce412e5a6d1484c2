"""Tests for markup cleaning and heading extraction."""

from bs4 import BeautifulSoup

from chapterizer.core.content_processor import ContentProcessor, count_words
from conftest import xhtml


def _clean(body: str) -> str:
    _, text = ContentProcessor().process(xhtml(body))
    return text


def test_paragraphs_become_double_newlines():
    text = _clean("<p>First paragraph.</p><p>Second   paragraph.</p>")
    assert text == "First paragraph.\n\nSecond paragraph."


def test_inline_markup_is_flattened():
    text = _clean("<p>She <em>really</em> meant <a href='#x'>it</a>.</p>")
    assert text == "She really meant it."


def test_whitespace_runs_collapse():
    text = _clean("<p>  lots \n\n  of\t\twhitespace  </p>\n\n\n<div>\n\nnext</div>")
    assert text == "lots of whitespace\n\nnext"


def test_non_narrative_elements_removed():
    body = """
    <script>var x = 1;</script>
    <style>p { color: red; }</style>
    <header><p>Running header</p></header>
    <nav><a href="#">Next</a></nav>
    <p>Story text.</p>
    <figure><img src="a.png"/><figcaption>Figure 1</figcaption></figure>
    <table><tr><td>cell</td></tr></table>
    <form><label>Name</label><input/></form>
    <div role="doc-pagebreak">12</div>
    <aside>Side note</aside>
    <footer>Page footer</footer>
    """
    assert _clean(body) == "Story text."


def test_nested_blocks_do_not_duplicate_text():
    text = _clean("<section><div><p>One.</p><p>Two.</p></div></section>")
    assert text == "One.\n\nTwo."


def test_line_breaks():
    text = _clean("<p>line one<br/>line two<br/><br/>line three</p>")
    assert text == "line one line two\n\nline three"


def test_comments_are_ignored():
    assert _clean("<p>Visible<!-- hidden --> text</p>") == "Visible text"


def test_empty_document_gives_empty_text():
    assert _clean("") == ""
    assert _clean("<div><img src='cover.jpg'/></div>") == ""


def test_process_returns_first_heading():
    processor = ContentProcessor()
    heading, text = processor.process(
        xhtml("<h2>Chapter  <span>3</span></h2><h1>Later</h1><p>Body.</p>")
    )
    assert heading == "Chapter 3"
    assert text == "Chapter 3\n\nLater\n\nBody."


def test_heading_inside_header_still_found():
    heading, text = ContentProcessor().process(
        xhtml("<header><h1>The Storm</h1></header><p>Rain fell.</p>")
    )
    assert heading == "The Storm"
    assert text == "Rain fell."


def test_long_heading_is_ignored():
    processor = ContentProcessor(max_heading_length=20)
    heading, _ = processor.process(
        xhtml("<h1>This heading is much too long to be a title</h1><p>x</p>")
    )
    assert heading is None


def test_no_heading():
    soup = BeautifulSoup(xhtml("<p>No headings here.</p>", title="Book"), "lxml")
    assert ContentProcessor().extract_heading(soup) is None


def test_count_words():
    assert count_words("  a  b\nc ") == 3
