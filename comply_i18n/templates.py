"""Translation of raw policy, procedure and narrative templates."""

from __future__ import annotations

import pathlib
import time
from typing import List, Optional, Sequence

import httpx

from .configuration import (
    EnvironmentSettings,
    TranslationSettings,
    get_environment,
    get_translation_settings,
    provider_config_from_settings,
)
from .documents import COLLECTIONS, DOCUMENT_EXTENSION
from .errors import ComplyError, ConfigurationError, TemplateTranslationError
from .filenames import is_template_file, translated_path
from .providers import TranslationProvider, build_provider
from .structures import TemplateTranslationSummary
from .translator import DEFAULT_SOURCE_LANGUAGE, DocumentTranslator


def _collect(directory: pathlib.Path) -> List[pathlib.Path]:
    return sorted(
        candidate
        for candidate in directory.rglob(f"*{DOCUMENT_EXTENSION}")
        if candidate.is_file() and is_template_file(candidate)
    )


def resolve_template_files(path: Optional[str | pathlib.Path], root: pathlib.Path) -> List[pathlib.Path]:
    """Return the templates selected by ``path``, or all templates under ``root``."""

    if path:
        candidate = pathlib.Path(path)
        if not candidate.is_absolute():
            candidate = root / candidate
        if not candidate.exists():
            raise FileNotFoundError(f"path does not exist: {path}")
        if candidate.is_dir():
            return _collect(candidate)
        if candidate.suffix == DOCUMENT_EXTENSION and is_template_file(candidate):
            return [candidate]
        raise ComplyError(f"file is not a translatable template: {path}")

    files: List[pathlib.Path] = []
    for directory in COLLECTIONS:
        template_dir = root / directory
        if not template_dir.is_dir():
            continue
        files.extend(_collect(template_dir))
    return files


def is_up_to_date(source: pathlib.Path, target: pathlib.Path) -> bool:
    """True when ``target`` exists and is at least as new as ``source``."""

    try:
        target_mtime = target.stat().st_mtime_ns
        source_mtime = source.stat().st_mtime_ns
    except OSError:
        return False
    return target_mtime >= source_mtime


class TemplateTranslationRunner:
    """Translates every template into every language, stopping at the first failure."""

    def __init__(
        self,
        *,
        provider: TranslationProvider,
        provider_name: str,
        model: Optional[str],
        languages: Sequence[str],
        source_language: str = DEFAULT_SOURCE_LANGUAGE,
    ) -> None:
        self.provider = provider
        self.provider_name = provider_name
        self.model = model
        self.languages = list(languages)
        self.translator = DocumentTranslator(provider, source_language=source_language)

    def run(self, files: Sequence[pathlib.Path]) -> TemplateTranslationSummary:
        start_time = time.time()
        summary = TemplateTranslationSummary(
            provider_name=self.provider_name,
            model=self.model,
            languages=self.languages,
        )
        if not files:
            print("No files to translate")
            return summary

        print(f"Translating {len(files)} files to languages: {', '.join(self.languages)}")
        for source in files:
            for language in self.languages:
                try:
                    self._translate_single(source, language, summary)
                except (ComplyError, OSError, UnicodeError) as exc:
                    raise TemplateTranslationError(str(source), language) from exc

        summary.elapsed_seconds = time.time() - start_time
        print("Template translation completed successfully")
        return summary

    def _translate_single(
        self,
        source: pathlib.Path,
        language: str,
        summary: TemplateTranslationSummary,
    ) -> None:
        target = translated_path(source, language)
        if is_up_to_date(source, target):
            print(f"Skipping {target} (translation is up to date)")
            summary.skipped.append(target)
            return

        content = source.read_text(encoding="utf-8")
        print(f"Translating {source} to {language}...")
        translated = self.translator.translate_template(content, language)
        target.write_text(translated, encoding="utf-8")
        print(f"Generated: {target}")
        summary.generated.append(target)


def translate_templates(
    path: Optional[str | pathlib.Path] = None,
    provider_override: Optional[str] = None,
    *,
    root: Optional[pathlib.Path] = None,
    settings: Optional[TranslationSettings] = None,
    environment: Optional[EnvironmentSettings] = None,
    provider: Optional[TranslationProvider] = None,
    http_client: Optional[httpx.Client] = None,
    debug: bool = False,
) -> TemplateTranslationSummary:
    """Translate templates under ``path`` (or all templates) into every configured language."""

    root = root or pathlib.Path.cwd()
    settings = settings or get_translation_settings(root)

    if not settings.enabled:
        raise ConfigurationError("translation not enabled in comply.yml")
    if not settings.languages:
        raise ConfigurationError("no languages configured for translation")
    provider_name = (provider_override or settings.provider or "").strip().lower()
    if not provider_name:
        raise ConfigurationError("no translation provider specified")

    if provider is None:
        environment = environment or get_environment(root)
        provider = build_provider(
            provider_config_from_settings(provider_name, settings.model, environment),
            http_client=http_client,
            debug=debug or environment.COMPLY_PROVIDER_DEBUG,
        )

    files = resolve_template_files(path, root)
    runner = TemplateTranslationRunner(
        provider=provider,
        provider_name=provider_name,
        model=settings.model,
        languages=settings.languages,
    )
    return runner.run(files)
