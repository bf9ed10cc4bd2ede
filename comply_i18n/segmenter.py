"""Document sectioning and translation eligibility.

Classification is line-local and heuristic: it never parses YAML or
markdown into a tree. Callers depend on :class:`SectionClassifier` only, so a
structured parser can replace :class:`HeuristicClassifier` later.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from .structures import Segment, SegmentKind

YAML_DELIMITER = "---"
CODE_FENCE = "```"
RENDERER_DIRECTIVE = "%"
TABLE_CAPTION = "Table:"
METADATA_MARKERS = ("header-includes:", "\\usepackage")


def split_sections(body: str) -> List[str]:
    """Split a body into non-blank runs of lines and single blank lines.

    ``"\\n".join(split_sections(body)) == body`` for every input.
    """

    sections: List[str] = []
    current: List[str] = []
    for line in body.split("\n"):
        if line == "":
            if current:
                sections.append("\n".join(current))
                current = []
            sections.append(line)
        else:
            current.append(line)
    if current:
        sections.append("\n".join(current))
    return sections


def classify_section(section: str) -> SegmentKind:
    """Decide whether a section may be sent for translation."""

    text = section.strip()
    preserved = SegmentKind.PRESERVED

    if not text:
        return preserved
    # Frontmatter boundary.
    if text.startswith(YAML_DELIMITER) or text.endswith(YAML_DELIMITER):
        return preserved
    if text.startswith(RENDERER_DIRECTIVE):
        return preserved
    # Markdown table.
    if "|" in text and (YAML_DELIMITER in text or TABLE_CAPTION in text):
        return preserved
    if text.startswith(CODE_FENCE) or text.endswith(CODE_FENCE):
        return preserved
    if any(marker in text for marker in METADATA_MARKERS):
        return preserved
    return SegmentKind.TRANSLATABLE


def join_segments(segments: Sequence[Segment]) -> str:
    return "\n".join(segment.text for segment in segments)


def is_frontmatter(segment: Segment) -> bool:
    """True for a preserved segment delimited by a ``---`` line."""

    if segment.translatable:
        return False
    text = segment.text.strip()
    return text.startswith(YAML_DELIMITER) or text.endswith(YAML_DELIMITER)


class SectionClassifier(ABC):
    """Turns a document body into classified segments."""

    @abstractmethod
    def classify(self, body: str) -> List[Segment]:
        """Return segments whose texts joined by newlines equal ``body``."""


class HeuristicClassifier(SectionClassifier):
    """Line-local classifier for frontmatter, tables, code and directives."""

    def classify(self, body: str) -> List[Segment]:
        return [
            Segment(text=section, kind=classify_section(section))
            for section in split_sections(body)
        ]
