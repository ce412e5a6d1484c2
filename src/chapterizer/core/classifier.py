"""Chapter classification: separate narrative chapters from front/back matter.

Each candidate section goes through two hard gates and then a weighted
score built from independent signals:

1. Exclusion gate: administrative titles (cover, copyright, contents...)
   are rejected before any scoring.
2. Length gate: sections under ``min_word_count`` words are rejected.
3. Scoring: see ``SIGNALS``. A section is a chapter when its score
   reaches ``chapter_threshold``.

If nothing qualifies, the longest sections are taken instead so callers
always receive some content.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from chapterizer.config import ClassifierConfig
from chapterizer.models.extraction import (
    Chapter,
    ClassificationResult,
    ExcludedSection,
    ExclusionReason,
    Section,
)

log = logging.getLogger(__name__)


# =============================================================================
# Title patterns
# =============================================================================

_NUMBER_WORDS = (
    "one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|"
    "thirteen|fourteen|fifteen|sixteen|seventeen|eighteen|nineteen|twenty"
)

# Matched against the whole normalized (lowercase) title
EXCLUDE_PATTERNS: list[re.Pattern] = [
    re.compile(p)
    for p in [
        # Front and back matter
        r"title\s*page|half\s*title|cover(\s*page)?|front\s*matter|back\s*matter",
        r"copyright(\s*page)?|dedication|acknowledge?ments?|about\s+the\s+author",
        r"preface|foreword|introduction|prologue|epilogue",
        r"table\s+of\s+contents|contents|toc",
        r"bibliography|references|index|glossary|appendix|appendices",
        r"notes?|endnotes?|footnotes?",
        r"credits?|attributions?|licen[cs]e",
        r"also\s+by(\s+.*)?|other\s+books?(\s+by\s+.*)?|more\s+from(\s+.*)?",
        # Publishing notices
        r"isbn(\W.*)?|publication|publisher|imprint",
        r"version|edition|printing|print",
        r"legal(\s+notice)?|disclaimer|notice",
        # Navigation labels
        r"start|begin|go\s+to|jump\s+to",
        r"next|previous|back|home",
    ]
]

# Matched against the start of the normalized title
CHAPTER_PATTERNS: list[re.Pattern] = [
    re.compile(p)
    for p in [
        rf"^chapter\s+(\d+|{_NUMBER_WORDS}|[ivxlc]+)\b",
        r"^ch\.?\s*\d+",
        rf"^part\s+(\d+|{_NUMBER_WORDS}|[ivxlc]+)\b",
        rf"^section\s+(\d+|{_NUMBER_WORDS}|[ivxlc]+)\b",
        r"^\d+\.?(\s+|$)",  # "1.", "2 The Storm"
        r"^[ivxlc]+\.?$",  # Roman numerals
    ]
]

NARRATIVE_PATTERNS: list[re.Pattern] = [
    # Reported speech and action
    re.compile(
        r"\b(he|she|they|i|we)\s+"
        r"(said|asked|replied|whispered|shouted|walked|looked|felt|thought|saw|heard)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(the|a|an)\s+\w+\s+(was|were|is|are)\b", re.IGNORECASE),
    # Temporal connectives
    re.compile(
        r"\b(suddenly|then|later|meanwhile|after|before|when|while)\b",
        re.IGNORECASE,
    ),
    # Quoted dialogue
    re.compile(r"[\"“'‘][^\"“”'‘’]+[\"”'’]"),
]

_PROPER_NOUN_RE = re.compile(r"\b[A-Z][a-z]+\b")
_TRAILING_PUNCT_RE = re.compile(r"[\s.:;,\-–—]+$")


def normalize_title(title: str | None) -> str:
    """Lowercase, collapse whitespace and drop trailing punctuation."""
    if not title:
        return ""
    return _TRAILING_PUNCT_RE.sub("", " ".join(title.split()).lower())


# =============================================================================
# Predicates
# =============================================================================


def is_excluded_title(title: str | None) -> bool:
    """True if the title is an administrative / navigation label."""
    normalized = normalize_title(title)
    if not normalized:
        return False
    return any(p.fullmatch(normalized) for p in EXCLUDE_PATTERNS)


def has_chapter_title(title: str | None) -> bool:
    """True if the title looks like "Chapter 3", "Part II", "12." etc."""
    normalized = normalize_title(title)
    if not normalized:
        return False
    return any(p.search(normalized) for p in CHAPTER_PATTERNS)


def has_narrative_markers(text: str) -> bool:
    """True if the text reads like prose: speech, dialogue, time connectives."""
    return any(p.search(text) for p in NARRATIVE_PATTERNS)


def proper_noun_ratio(text: str, word_count: int | None = None) -> float:
    """Share of capitalized words among all words."""
    if word_count is None:
        word_count = len(text.split())
    if word_count == 0:
        return 0.0
    return len(_PROPER_NOUN_RE.findall(text)) / word_count


# =============================================================================
# Scoring
# =============================================================================


@dataclass(frozen=True)
class Signal:
    """One weighted test contributing to a section's chapter score."""

    name: str
    weight: int
    test: Callable[[Section, ClassifierConfig], bool]


SIGNALS: list[Signal] = [
    Signal(
        "title_pattern",
        3,
        lambda s, c: has_chapter_title(s.title),
    ),
    Signal(
        "substantial_length",
        2,
        lambda s, c: s.word_count >= c.preferred_word_count,
    ),
    Signal(
        "narrative_markers",
        2,
        lambda s, c: has_narrative_markers(s.content),
    ),
    Signal(
        "proper_noun_density",
        1,
        lambda s, c: proper_noun_ratio(s.content, s.word_count) > c.proper_noun_density,
    ),
    Signal(
        "long_content",
        1,
        lambda s, c: s.word_count > c.long_word_count,
    ),
    Signal(
        "short_title",
        1,
        lambda s, c: len(s.display_title) < c.short_title_length
        and s.word_count > c.short_title_min_words,
    ),
]


def score_section(
    section: Section, config: ClassifierConfig | None = None
) -> tuple[int, list[str]]:
    """Return the total score and the names of the signals that fired."""
    config = config or ClassifierConfig()
    fired = [signal for signal in SIGNALS if signal.test(section, config)]
    return sum(signal.weight for signal in fired), [signal.name for signal in fired]


# =============================================================================
# Classifier
# =============================================================================


class ChapterClassifier:
    """Partition loaded sections into chapters and excluded sections."""

    def __init__(self, config: ClassifierConfig | None = None):
        self.config = config or ClassifierConfig()

    def classify(self, sections: list[Section]) -> ClassificationResult:
        ordered = sorted(sections, key=lambda s: s.order)
        chapters: list[Chapter] = []
        excluded: list[ExcludedSection] = []
        candidates: list[Section] = []
        seen_ids: set[str] = set()

        for section in ordered:
            if section.id in seen_ids:
                log.debug("Duplicate section id %s ignored", section.id)
                continue
            seen_ids.add(section.id)
            candidates.append(section)

            rejection = self._reject(section)
            if rejection is not None:
                log.debug("Excluding section: %s", rejection)
                excluded.append(rejection)
                continue

            chapter = Chapter(
                id=section.id,
                title=section.title or f"Chapter {len(chapters) + 1}",
                content=section.content,
                href=section.href,
                order=section.order,
                word_count=section.word_count,
            )
            chapters.append(chapter)

        used_fallback = False
        if not chapters and candidates:
            log.warning(
                "No chapters detected using filters, falling back to longest sections"
            )
            chapters = self._fallback(candidates)
            used_fallback = True

        log.info(
            "Classified %d chapters from %d sections (%d excluded)",
            len(chapters),
            len(candidates),
            len(excluded),
        )
        return ClassificationResult(
            chapters=sorted(chapters, key=lambda c: c.order),
            excluded_sections=excluded,
            total_sections=len(candidates),
            used_fallback=used_fallback,
        )

    def _reject(self, section: Section) -> ExcludedSection | None:
        """Run the gates and the score; return why the section is not a chapter."""
        title = section.display_title

        if is_excluded_title(section.title):
            return ExcludedSection(
                title=title,
                reason="exclude pattern",
                kind=ExclusionReason.EXCLUDE_PATTERN,
            )

        if section.word_count < self.config.min_word_count:
            return ExcludedSection(
                title=title,
                reason=f"too short: {section.word_count} words",
                kind=ExclusionReason.TOO_SHORT,
            )

        score, fired = score_section(section, self.config)
        if score < self.config.chapter_threshold:
            return ExcludedSection(
                title=title,
                reason=f"score: {score}",
                kind=ExclusionReason.LOW_SCORE,
            )

        log.debug(
            "Including chapter: %r (score: %d, words: %d, signals: %s)",
            title,
            score,
            section.word_count,
            ", ".join(fired),
        )
        return None

    def _fallback(self, sections: list[Section]) -> list[Chapter]:
        """Take the longest sections by character count, titled by rank.

        Stub pages under ``min_fallback_chars`` are left out unless every
        section is that short.
        """
        pool = [
            s for s in sections if len(s.content) >= self.config.min_fallback_chars
        ] or sections
        by_length = sorted(pool, key=lambda s: (-len(s.content), s.order))
        selected = by_length[: self.config.fallback_limit]
        return [
            Chapter(
                id=section.id,
                title=f"Chapter {rank}",
                content=section.content,
                href=section.href,
                order=section.order,
                word_count=section.word_count,
            )
            for rank, section in enumerate(selected, start=1)
        ]
