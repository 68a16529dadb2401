"""Line-oriented Markdown boundary detection.

Recognizes ATX headings (``#`` to ``######``), setext headings (a text
line underlined with ``===`` or ``---``), thematic breaks (``---``,
``***``, ``___``) and fenced code blocks, inside which nothing is treated
as a boundary.  Used by the header-based strategy and by
:class:`~ingestkit.services.chunking.section.MarkdownSectionDetector`.
"""

from __future__ import annotations

import re

_ATX_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+|$)")
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_THEMATIC_BREAK = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


def atx_heading_level(line: str) -> int | None:
    """Return the level of an ATX heading line, or ``None``."""
    match = _ATX_HEADING.match(line)
    return len(match.group(1)) if match else None


def split_markdown(text: str, max_level: int = 6, split_on_breaks: bool = False) -> list[str]:
    """Split *text* into units starting at headings of level <= *max_level*.

    With *split_on_breaks*, thematic breaks and form feeds also end a unit
    and are dropped from the output.  Text before the first boundary forms
    its own unit.  Returned units are stripped; empty ones are omitted.
    """
    pages = text.split("\f") if split_on_breaks else [text]
    units: list[str] = []
    for page in pages:
        units.extend(_split_page(page, max_level, split_on_breaks))
    return units


def _split_page(text: str, max_level: int, split_on_breaks: bool) -> list[str]:
    sections: list[list[str]] = [[]]
    fence: str | None = None

    for line in text.split("\n"):
        current = sections[-1]
        fence_match = _FENCE.match(line)
        if fence is not None:
            current.append(line)
            if fence_match and fence_match.group(1)[0] == fence[0] and len(
                fence_match.group(1)
            ) >= len(fence):
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            current.append(line)
            continue

        level = atx_heading_level(line)
        if level is not None:
            if level <= max_level:
                sections.append([line])
            else:
                current.append(line)
            continue

        underline = _SETEXT_UNDERLINE.match(line)
        previous = current[-1] if current else ""
        if (
            underline
            and previous.strip()
            and atx_heading_level(previous) is None
            and not _FENCE.match(previous)
        ):
            setext_level = 1 if underline.group(1).startswith("=") else 2
            if setext_level <= max_level:
                current.pop()
                sections.append([previous, line])
            else:
                current.append(line)
            continue

        if split_on_breaks and _THEMATIC_BREAK.match(line):
            sections.append([])
            continue

        current.append(line)

    units = ["\n".join(lines).strip() for lines in sections]
    return [unit for unit in units if unit]
