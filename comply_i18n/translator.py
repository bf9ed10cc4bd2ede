"""Structure-preserving translation of compliance documents and templates."""

from __future__ import annotations

import re
from typing import List, Optional

from .providers import TranslationProvider
from .segmenter import HeuristicClassifier, SectionClassifier, is_frontmatter
from .structures import Segment

DEFAULT_SOURCE_LANGUAGE = "en"

TEMPLATE_PROMPT = """You are a professional translator. Your task is to translate a markdown template document while preserving its exact structure and format.

**Instructions:**
1. Translate the YAML metadata fields: `name` and `comment` values to {target}
2. Translate all content after the `---` separator to {target}
3. Keep all other YAML fields unchanged (acronym, satisfies, dates, etc.)
4. Preserve all markdown formatting, template variables (like {{{{.Name}}}}), and document structure
5. Return only the translated content with no additional comments or explanations
6. Maintain the exact same line breaks and spacing as the original

**Input document:**
{content}

**Target language:** {target}"""

SECTION_PROMPT = """Translate the following section of a compliance document to {target}.

**Instructions:**
1. If the section contains YAML metadata, translate only the `name` and `comment` values and keep every other field unchanged
2. Translate all prose to {target}
3. Preserve all markdown formatting and template variables (like {{{{.Name}}}}) verbatim
4. Return only the translated section with no additional comments or explanations
5. Maintain the exact same line breaks and spacing as the original

**Section:**
{content}"""

METADATA_PROMPT = """Translate this document metadata value to {target}. Keep template variables (like {{{{.Name}}}}) verbatim. Return a single line with only the translated value.

{content}"""

PREFIX_PATTERNS = [
    re.compile(r"^\s*here\s+is\s+the\s+translated\s+document\s*(?::[ \t]*\n?|\n)", re.IGNORECASE),
    re.compile(r"^\s*translated\s+document\s*(?::[ \t]*\n?|\n)", re.IGNORECASE),
    re.compile(r"^\s*result\s*(?::[ \t]*\n?|\n)", re.IGNORECASE),
    re.compile(r"^\s*translation\s*(?::[ \t]*\n?|\n)", re.IGNORECASE),
]
YAML_FIELD_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9]*:\s*")
METADATA_LINE_PATTERN = re.compile(
    r"^(?P<lead>\s*(?:-\s+)?)(?P<key>name|comment):(?P<gap>[ \t]+)(?P<value>\S.*?)\s*$"
)
YAML_SPECIAL_START = tuple("[]{}&*!|>'\"%@`#,?-")
# Block scalars, anchors, aliases and flow collections are copied verbatim.
YAML_STRUCTURED_START = tuple("|>&*[{")


def _is_anchor_line(line: str) -> bool:
    """Line that looks like a YAML field, a ``---`` delimiter or a heading."""

    trimmed = line.strip()
    return (
        trimmed == "---"
        or bool(YAML_FIELD_PATTERN.match(trimmed))
        or trimmed.startswith("#")
    )


def strip_boilerplate(response: str, original: str = "") -> str:
    """Remove prefixes such as "Here is the translated document:"."""

    result = response
    for pattern in PREFIX_PATTERNS:
        if pattern.match(original):
            continue
        result = pattern.sub("", result, count=1)
    return result


def clean_response(response: str, original: str, *, anchored: Optional[bool] = None) -> str:
    """Light cleanup that keeps document structure intact.

    Boilerplate prefixes are stripped, then everything before the first line
    that looks like a YAML field, a ``---`` delimiter or a markdown heading is
    discarded. The line scan only runs when ``anchored`` is true, which by
    default means the original text itself begins with such a line.
    """

    result = strip_boilerplate(response, original)

    if anchored is None:
        first = next((line for line in original.split("\n") if line.strip()), "")
        anchored = _is_anchor_line(first)

    if anchored:
        lines = result.split("\n")
        start_index = next(
            (index for index, line in enumerate(lines) if _is_anchor_line(line)), -1
        )
        if start_index > 0:
            result = "\n".join(lines[start_index:])

    return result.strip()


def _quote_if_needed(value: str, original: str) -> str:
    if len(original) >= 2 and original[0] == original[-1] and original[0] in "\"'":
        quote = original[0]
        inner = value.strip(quote)
        if quote == '"':
            inner = inner.replace('"', '\\"')
        else:
            inner = inner.replace("'", "''")
        return f"{quote}{inner}{quote}"
    if ": " in value or " #" in value or value.startswith(YAML_SPECIAL_START):
        escaped = value.replace('"', '\\"')
        return f'"{escaped}"'
    return value


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


class DocumentTranslator:
    """Translates documents through a provider without touching their structure."""

    def __init__(
        self,
        provider: TranslationProvider,
        *,
        classifier: SectionClassifier | None = None,
        source_language: str = DEFAULT_SOURCE_LANGUAGE,
    ) -> None:
        self.provider = provider
        self.classifier = classifier or HeuristicClassifier()
        self.source_language = source_language

    def translate_document(self, content: str, target_language: str) -> str:
        """Translate eligible sections of ``content``; copy the rest verbatim.

        Frontmatter keeps every field except the ``name`` and ``comment``
        values. A body without translatable sections or metadata values makes
        no provider calls and is returned unchanged.
        """

        segments = self.classifier.classify(content)
        translated: List[str] = []
        for segment in segments:
            translated.append(self._translate_segment(segment, target_language))
        return "\n".join(translated)

    def translate_template(self, content: str, target_language: str) -> str:
        """Translate a whole raw template in a single provider call."""

        prompt = TEMPLATE_PROMPT.format(target=target_language, content=content)
        response = self.provider.translate(prompt, self.source_language, target_language)
        cleaned = clean_response(response, content, anchored=True)
        if content.endswith("\n") and not cleaned.endswith("\n"):
            cleaned += "\n"
        return cleaned

    def _translate_segment(self, segment: Segment, target_language: str) -> str:
        if segment.translatable:
            prompt = SECTION_PROMPT.format(target=target_language, content=segment.text)
            response = self.provider.translate(prompt, self.source_language, target_language)
            return clean_response(response, segment.text)
        if is_frontmatter(segment):
            return self._translate_metadata(segment.text, target_language)
        return segment.text

    def _translate_metadata(self, block: str, target_language: str) -> str:
        lines = block.split("\n")
        for index, line in enumerate(lines):
            match = METADATA_LINE_PATTERN.match(line)
            if not match:
                continue
            raw_value = match.group("value")
            if raw_value.startswith(YAML_STRUCTURED_START):
                continue
            prompt = METADATA_PROMPT.format(target=target_language, content=_unquote(raw_value))
            response = self.provider.translate(prompt, self.source_language, target_language)
            cleaned = strip_boilerplate(response, raw_value).strip()
            value = next((part.strip() for part in cleaned.split("\n") if part.strip()), raw_value)
            lines[index] = (
                f"{match.group('lead')}{match.group('key')}:{match.group('gap')}"
                f"{_quote_if_needed(value, raw_value)}"
            )
        return "\n".join(lines)
