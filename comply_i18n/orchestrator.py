"""Per-document pipeline producing translated PDF and HTML artifacts."""

from __future__ import annotations

import os
import pathlib
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

from .documents import MarkdownPreprocessor
from .errors import ComplyError, DocumentTranslationError
from .providers import TranslationProvider
from .renderer import PandocRenderer, artifact_filename, check_format
from .segmenter import SectionClassifier
from .staleness import StalenessTracker
from .structures import Document
from .translator import DEFAULT_SOURCE_LANGUAGE, DocumentTranslator


class Preprocessor(Protocol):
    def preprocess(self, document: Document, destination: pathlib.Path) -> pathlib.Path:
        ...


class Renderer(Protocol):
    def render(
        self,
        markdown_path: pathlib.Path,
        output_path: pathlib.Path,
        output_format: str,
    ) -> pathlib.Path:
        ...


@contextmanager
def intermediate_directory(output_dir: pathlib.Path, prefix: str) -> Iterator[pathlib.Path]:
    """Yield a private directory under ``output_dir``, removed on every exit path.

    Concurrent batches for other formats or languages write intermediates
    for the same document, so each call gets its own directory.
    """

    output_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix=f".{prefix}-", dir=output_dir) as workdir:
        yield pathlib.Path(workdir)


class TranslationOrchestrator:
    """Coordinates preprocessing, translation, rendering and cleanup."""

    def __init__(
        self,
        provider: TranslationProvider,
        tracker: StalenessTracker,
        *,
        preprocessor: Preprocessor | None = None,
        renderer: Renderer | None = None,
        classifier: SectionClassifier | None = None,
        source_language: str = DEFAULT_SOURCE_LANGUAGE,
    ) -> None:
        self.provider = provider
        self.tracker = tracker
        self.preprocessor = preprocessor or MarkdownPreprocessor()
        self.renderer = renderer or PandocRenderer()
        self.translator = DocumentTranslator(
            provider, classifier=classifier, source_language=source_language
        )

    def translate_for_rendering(
        self,
        document: Document,
        output_dir: pathlib.Path,
        target_language: str,
        output_format: str,
    ) -> Optional[pathlib.Path]:
        """Translate and render one document.

        Returns the rendered artifact, or ``None`` when the document was
        already processed at this or a later modification time.
        """

        with self._stage(document, "select output format", target_language):
            output_format = check_format(output_format)

        # Recorded before any work so a path is processed at most once per run.
        if not self.tracker.claim(document.full_path, document.modified_at):
            return None

        stem = document.output_filename
        artifact = output_dir / artifact_filename(stem, target_language, output_format)

        workspace = intermediate_directory(output_dir, f"{stem}_{target_language}_{output_format}")
        with self._stage(document, "prepare output directory", target_language), workspace as workdir:
            preprocessed_path = workdir / f"{stem}.md"
            translated_path = workdir / f"{stem}_{target_language}.md"

            with self._stage(document, "preprocess document", target_language):
                self.preprocessor.preprocess(document, preprocessed_path)

            with self._stage(document, "read preprocessed document", target_language):
                content = preprocessed_path.read_text(encoding="utf-8")

            print(f"Translating {document.name} to {target_language}...")
            with self._stage(document, "translate document", target_language):
                translated = self.translator.translate_document(content, target_language)

            with self._stage(document, "write translated markdown", target_language):
                translated_path.write_text(translated, encoding="utf-8")

            with self._stage(document, f"render {output_format} output", target_language):
                self.renderer.render(translated_path, artifact, output_format)

        print(f"{_relative(document.full_path)} -> {artifact} ({target_language})")
        return artifact

    @contextmanager
    def _stage(self, document: Document, stage: str, language: str) -> Iterator[None]:
        try:
            yield
        except DocumentTranslationError:
            raise
        except (ComplyError, OSError, UnicodeError) as exc:
            raise DocumentTranslationError(document.name, stage, language) from exc


def _relative(path: str) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:
        return path
