"""Batch drivers rendering translated policies, procedures and narratives."""

from __future__ import annotations

import pathlib
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence

from .documents import DocumentSource
from .errors import (
    BatchError,
    ComplyError,
    DocumentTranslationError,
    ErrorRecord,
    categorise,
)
from .orchestrator import Preprocessor, Renderer, TranslationOrchestrator
from .providers import TranslationProvider
from .renderer import check_format
from .staleness import StalenessTracker
from .structures import BatchReport

BatchDriver = Callable[
    [TranslationOrchestrator, DocumentSource, pathlib.Path, str], BatchReport
]

COLLECTION_LABELS = (
    ("policies", "policy"),
    ("procedures", "procedure"),
    ("narratives", "narrative"),
)


def _record(report: BatchReport, exc: BaseException, message: str) -> None:
    report.errors.append(ErrorRecord(category=categorise(exc), message=message, details=str(exc)))
    if report.first_error is None:
        report.first_error = exc


def _translate_collections(
    orchestrator: TranslationOrchestrator,
    source: DocumentSource,
    output_dir: pathlib.Path,
    language: str,
    output_format: str,
) -> BatchReport:
    print(f"Generating translated {output_format.upper()} documents ({language})...")
    report = BatchReport(output_format=output_format, language=language)

    for collection, label in COLLECTION_LABELS:
        try:
            documents = source.documents(collection)
        except (ComplyError, OSError) as exc:
            _record(report, exc, f"unable to read {collection} for translation")
            continue

        for document in documents:
            try:
                artifact = orchestrator.translate_for_rendering(
                    document, output_dir, language, output_format
                )
            except DocumentTranslationError as exc:
                print(f"Error: {exc}")
                _record(report, exc, f"unable to render translated {label}: {document.name}")
                continue
            if artifact is None:
                report.skipped.append(document.name)
            else:
                report.rendered.append(artifact)

    return report


def pdf_translated(
    orchestrator: TranslationOrchestrator,
    source: DocumentSource,
    output_dir: pathlib.Path,
    language: str,
) -> BatchReport:
    """Render translated PDFs for every document, in listing order."""

    return _translate_collections(orchestrator, source, output_dir, language, "pdf")


def html_translated(
    orchestrator: TranslationOrchestrator,
    source: DocumentSource,
    output_dir: pathlib.Path,
    language: str,
) -> BatchReport:
    """Render translated HTML files for every document, in listing order."""

    return _translate_collections(orchestrator, source, output_dir, language, "html")


DRIVERS: Dict[str, BatchDriver] = {"pdf": pdf_translated, "html": html_translated}


def run_translated_batches(
    source: DocumentSource,
    output_dir: pathlib.Path,
    languages: Sequence[str],
    provider: TranslationProvider,
    *,
    formats: Sequence[str] = ("pdf", "html"),
    max_workers: Optional[int] = None,
    preprocessor: Optional[Preprocessor] = None,
    renderer: Optional[Renderer] = None,
) -> List[BatchReport]:
    """Run one batch per (format, language) concurrently and wait for all of them.

    Each batch gets its own orchestrator and staleness tracker. Raises
    :class:`BatchError` with the first failure, in submission order, when any
    batch failed.
    """

    formats = [check_format(output_format) for output_format in formats]
    units = [(output_format, language) for language in languages for output_format in formats]
    if not units:
        return []

    with ThreadPoolExecutor(max_workers=max_workers or len(units)) as executor:
        futures = []
        for output_format, language in units:
            driver = DRIVERS[output_format]
            orchestrator = TranslationOrchestrator(
                provider,
                StalenessTracker(),
                preprocessor=preprocessor,
                renderer=renderer,
            )
            futures.append(executor.submit(driver, orchestrator, source, output_dir, language))
        reports = [future.result() for future in futures]

    errors = [report.first_error for report in reports if report.first_error is not None]
    if errors:
        raise BatchError(errors, reports)
    return reports
