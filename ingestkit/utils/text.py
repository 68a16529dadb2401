"""Text helpers shared by document processors and chunking strategies.

Two concerns live here:

1. **Normalization** -- Unicode NFC, control-character stripping and
   whitespace collapsing applied before chunking so that token counts and
   embeddings see content rather than formatting noise.

2. **Segmentation** -- paragraph splitting (double-newline boundaries) and
   an abbreviation-aware sentence splitter that avoids breaking on "Dr.",
   "vs.", "e.g." and friends.
"""

import re
import unicodedata

# Control characters other than tab, newline, carriage return and form feed.
# Form feed survives because section detection uses it as a page break.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0e-\x1f\x7f]")

_CRLF = re.compile(r"\r\n?")

# Collapse 3+ newlines to a single paragraph break.
_MULTI_NEWLINE = re.compile(r"\n{3,}")

# Collapse 2+ spaces/tabs to a single space.
_MULTI_SPACE = re.compile(r"[ \t]{2,}")

_TRAILING_SPACE = re.compile(r"[ \t]+\n")

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

_SENTENCE_END = re.compile(r"[.!?](?:\s|$)")

# Common abbreviations that should NOT trigger a sentence split.
_ABBREVIATIONS = frozenset(
    {
        "Dr",
        "Mr",
        "Mrs",
        "Ms",
        "Prof",
        "Jr",
        "Sr",
        "St",
        "No",
        "Vol",
        "Fig",
        "vs",
        "etc",
        "approx",
        "e.g",
        "i.e",
        "inc",
        "ltd",
        "co",
    }
)

# Whole-word abbreviation followed by its period ("co." but not "disco.").
_ABBREVIATION_PERIOD = re.compile(
    r"\b(?:"
    + "|".join(re.escape(abbr) for abbr in sorted(_ABBREVIATIONS, key=len, reverse=True))
    + r")\."
)


def normalize_text(text: str) -> str:
    """Return *text* with normalized Unicode and whitespace.

    Leading indentation inside lines is collapsed but line structure is
    kept, so Markdown headings and paragraph breaks survive.
    """
    if not text:
        return text

    cleaned = unicodedata.normalize("NFC", text)
    cleaned = _CRLF.sub("\n", cleaned)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _TRAILING_SPACE.sub("\n", cleaned)
    cleaned = _MULTI_SPACE.sub(" ", cleaned)
    cleaned = _MULTI_NEWLINE.sub("\n\n", cleaned)
    return cleaned.strip()


def strip_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Narrow ``text[start:end]`` so it neither starts nor ends with whitespace."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def paragraph_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of the non-blank paragraphs of *text*."""
    spans: list[tuple[int, int]] = []
    last = 0
    for match in _PARAGRAPH_BREAK.finditer(text):
        spans.append(strip_span(text, last, match.start()))
        last = match.end()
    spans.append(strip_span(text, last, len(text)))
    return [(start, end) for start, end in spans if start < end]


def split_paragraphs(text: str) -> list[str]:
    """Split *text* on blank lines, discarding empty paragraphs."""
    return [text[start:end] for start, end in paragraph_spans(text)]


def sentence_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of the sentences of *text*.

    Periods after known abbreviations are masked with ``\\x00`` (same
    length, so indices stay aligned with the original text) before
    searching for ``.``, ``!`` or ``?`` followed by whitespace.
    """
    masked = _ABBREVIATION_PERIOD.sub(lambda m: m.group(0)[:-1] + "\x00", text)

    spans: list[tuple[int, int]] = []
    last = 0
    for match in _SENTENCE_END.finditer(masked):
        spans.append(strip_span(text, last, match.end()))
        last = match.end()
    spans.append(strip_span(text, last, len(text)))
    return [(start, end) for start, end in spans if start < end]


def split_sentences(text: str) -> list[str]:
    """Split *text* at sentence boundaries while respecting abbreviations."""
    spans = sentence_spans(text)
    return [text[start:end] for start, end in spans] if spans else [text]
