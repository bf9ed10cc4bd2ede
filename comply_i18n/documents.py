"""Compliance documents read from the project tree, and their preprocessing."""

from __future__ import annotations

import pathlib
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Tuple

import yaml

from .errors import DocumentFormatError
from .filenames import language_from_filename
from .segmenter import YAML_DELIMITER
from .structures import Document, Revision

COLLECTIONS = ("policies", "procedures", "narratives")
DOCUMENT_EXTENSION = ".md"


def split_frontmatter(text: str) -> Tuple[str, str]:
    """Return ``(frontmatter, prose)`` split at the first ``---`` line.

    An opening ``---`` line before the metadata is tolerated.
    """

    lines = text.split("\n")
    start = 1 if lines and lines[0].strip() == YAML_DELIMITER else 0
    for index in range(start, len(lines)):
        if lines[index].strip() == YAML_DELIMITER:
            return "\n".join(lines[start:index]), "\n".join(lines[index + 1 :])
    raise DocumentFormatError("missing '---' line terminating the YAML frontmatter")


def _flatten_satisfies(value: Any) -> Tuple[str, ...]:
    if isinstance(value, Mapping):
        refs: List[str] = []
        for standard, controls in value.items():
            if isinstance(controls, (list, tuple)):
                refs.extend(f"{standard}:{control}" for control in controls)
            elif controls is not None:
                refs.append(f"{standard}:{controls}")
        return tuple(refs)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return ()


def _revisions(value: Any) -> Tuple[Revision, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(
        Revision(date=str(item.get("date", "")), comment=str(item.get("comment", "")))
        for item in value
        if isinstance(item, Mapping)
    )


def parse_document(path: pathlib.Path) -> Document:
    """Build a :class:`Document` from a markdown file with YAML frontmatter."""

    body = path.read_text(encoding="utf-8")
    try:
        frontmatter, _ = split_frontmatter(body)
        metadata = yaml.safe_load(frontmatter) or {}
    except DocumentFormatError as exc:
        raise DocumentFormatError(f"{path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise DocumentFormatError(f"{path}: invalid YAML frontmatter ({exc})") from exc
    if not isinstance(metadata, Mapping):
        raise DocumentFormatError(f"{path}: frontmatter must be a mapping")

    return Document(
        name=str(metadata.get("name") or path.stem),
        body=body,
        full_path=str(path.resolve()),
        output_filename=path.stem,
        modified_at=path.stat().st_mtime,
        satisfies=_flatten_satisfies(metadata.get("satisfies")),
        revisions=_revisions(metadata.get("majorRevisions")),
    )


class DocumentSource(ABC):
    """Supplies the three document collections for a batch."""

    @abstractmethod
    def documents(self, collection: str) -> List[Document]:
        """Return the original documents of one collection in listing order."""

    def policies(self) -> List[Document]:
        return self.documents("policies")

    def procedures(self) -> List[Document]:
        return self.documents("procedures")

    def narratives(self) -> List[Document]:
        return self.documents("narratives")


class FileDocumentSource(DocumentSource):
    """Reads ``policies/``, ``procedures/`` and ``narratives/`` under a root."""

    def __init__(self, root: pathlib.Path) -> None:
        self.root = root

    def documents(self, collection: str) -> List[Document]:
        return [
            parse_document(path)
            for path in self._files(collection)
            if language_from_filename(path.name) is None
        ]

    def _files(self, collection: str) -> List[pathlib.Path]:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown document collection '{collection}'.")
        directory = self.root / collection
        if not directory.is_dir():
            return []
        return sorted(
            path
            for path in directory.iterdir()
            if path.is_file()
            and path.suffix == DOCUMENT_EXTENSION
            and not path.name.upper().startswith("README")
        )


class MarkdownPreprocessor:
    """Writes a document's body to the intermediate markdown path."""

    def preprocess(self, document: Document, destination: pathlib.Path) -> pathlib.Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(document.body, encoding="utf-8")
        return destination
