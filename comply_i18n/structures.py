"""Core data structures for the comply translation pipeline."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .errors import ErrorRecord


class SegmentKind(Enum):
    """Whether a segment is sent to a provider or copied verbatim."""

    TRANSLATABLE = "translatable"
    PRESERVED = "preserved"


@dataclass(frozen=True)
class Segment:
    """A contiguous run of non-blank lines, or a single blank line."""

    text: str
    kind: SegmentKind

    @property
    def translatable(self) -> bool:
        return self.kind is SegmentKind.TRANSLATABLE


@dataclass(frozen=True)
class Revision:
    """A single entry of a document's revision history."""

    date: str
    comment: str


@dataclass(frozen=True)
class Document:
    """A policy, procedure, or narrative ready for translation."""

    name: str
    body: str
    full_path: str
    output_filename: str
    modified_at: float
    satisfies: Tuple[str, ...] = ()
    revisions: Tuple[Revision, ...] = ()


@dataclass(frozen=True)
class ProviderConfig:
    """Identifies the backend used for one pipeline run."""

    kind: str
    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None


@dataclass
class BatchReport:
    """Outcome of one translated batch (one format, one language)."""

    output_format: str
    language: str
    rendered: List[pathlib.Path] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[ErrorRecord] = field(default_factory=list)
    first_error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.first_error is None


@dataclass
class TemplateTranslationSummary:
    """Report returned after a template translation run."""

    provider_name: str
    model: Optional[str]
    languages: List[str]
    generated: List[pathlib.Path] = field(default_factory=list)
    skipped: List[pathlib.Path] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.generated) + len(self.skipped)
