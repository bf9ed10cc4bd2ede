"""Command line interface for comply translations."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, List, Optional

from .batch import run_translated_batches
from .configuration import (
    get_environment,
    get_translation_settings,
    provider_config_from_settings,
)
from .documents import FileDocumentSource
from .errors import BatchError, ComplyError, ConfigurationError
from .providers import PROVIDER_KINDS, build_provider
from .renderer import SUPPORTED_FORMATS, PandocRenderer
from .structures import BatchReport, TemplateTranslationSummary
from .templates import translate_templates


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="comply",
        description=(
            "Translate compliance policies, procedures and narratives while "
            "preserving metadata, tables and code blocks."
        ),
    )
    parser.add_argument(
        "-C",
        "--directory",
        help="Project directory containing comply.yml (default: current directory).",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    templates = subparsers.add_parser(
        "translate-templates",
        aliases=["tt"],
        help="translate policy/procedure/narrative templates",
    )
    templates.add_argument(
        "path",
        nargs="?",
        help="Template file or directory (default: all templates).",
    )
    templates.add_argument(
        "-p",
        "--provider",
        help=f"LLM provider ({', '.join(PROVIDER_KINDS)}).",
    )

    rendered = subparsers.add_parser(
        "render-translated",
        help="render translated PDF/HTML documents for every configured language",
    )
    rendered.add_argument(
        "-f",
        "--format",
        choices=[*SUPPORTED_FORMATS, "both"],
        default="both",
        help="Output format (default: both).",
    )
    rendered.add_argument(
        "-o",
        "--output-dir",
        default="output",
        help="Directory receiving the rendered files (default: output).",
    )
    rendered.add_argument(
        "-p",
        "--provider",
        help=f"LLM provider ({', '.join(PROVIDER_KINDS)}).",
    )
    rendered.add_argument(
        "-w",
        "--workers",
        type=int,
        help="Maximum number of batches rendered at the same time.",
    )
    return parser


def execute_template_translation(
    *,
    root: pathlib.Path,
    path: str | None,
    provider: str | None,
    provider_debug: bool,
) -> tuple[int, TemplateTranslationSummary | None, str | None]:
    """Run template translation and return the exit code, summary, and message."""

    try:
        summary = translate_templates(
            path, provider, root=root, debug=provider_debug
        )
    except (ComplyError, OSError) as exc:
        return 1, None, f"template translation failed: {exc}"
    except KeyboardInterrupt:
        return 2, None, "Translation interrupted by user."
    except Exception as exc:
        return 1, None, _unexpected_error(exc)
    return 0, summary, None


def execute_rendering(
    *,
    root: pathlib.Path,
    output_dir: str,
    output_format: str,
    provider: str | None,
    workers: int | None,
    provider_debug: bool,
) -> tuple[int, List[BatchReport], str | None]:
    """Render translated artifacts and return the exit code, reports, and message."""

    try:
        settings = get_translation_settings(root)
        if not settings.enabled:
            raise ConfigurationError("translation not enabled in comply.yml")
        if not settings.languages:
            raise ConfigurationError("no languages configured for translation")
        provider_name = provider or settings.provider
        if not provider_name:
            raise ConfigurationError("no translation provider specified")
        environment = get_environment(root)
        translation_provider = build_provider(
            provider_config_from_settings(provider_name, settings.model, environment),
            debug=provider_debug or environment.COMPLY_PROVIDER_DEBUG,
        )
        formats = list(SUPPORTED_FORMATS) if output_format == "both" else [output_format]
        reports = run_translated_batches(
            FileDocumentSource(root),
            root / output_dir,
            settings.languages,
            translation_provider,
            formats=formats,
            max_workers=workers,
            renderer=PandocRenderer(cwd=root),
        )
    except BatchError as exc:
        return 1, exc.reports, f"translated rendering failed: {exc.first}"
    except (ComplyError, OSError) as exc:
        return 1, [], f"translated rendering failed: {exc}"
    except KeyboardInterrupt:
        return 2, [], "Translation interrupted by user."
    except Exception as exc:
        return 1, [], _unexpected_error(exc)
    return 0, reports, None


def _unexpected_error(exc: Exception) -> str:
    return (
        f"{exc}\n"
        "An unexpected error occurred. Please rerun with --debug-provider for more details."
    )


def print_template_summary(summary: TemplateTranslationSummary) -> None:
    """Output a friendly report once processing completes."""

    if not summary.total_files:
        return
    print("\nTemplate translation complete.")
    print(
        f"  Provider:        {summary.provider_name}"
        + (f" ({summary.model})" if summary.model else "")
    )
    print(f"  Languages:       {', '.join(summary.languages)}")
    print(f"  Generated:       {len(summary.generated)}")
    print(f"  Up to date:      {len(summary.skipped)}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")


def print_batch_reports(reports: List[BatchReport]) -> None:
    for report in reports:
        status = "ok" if report.succeeded else "failed"
        print(
            f"  {report.output_format.upper()} ({report.language}): "
            f"{len(report.rendered)} rendered, {len(report.skipped)} skipped, "
            f"{len(report.errors)} failed [{status}]"
        )
        for record in report.errors:
            print(f"    - {record.message}: {record.details}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.command is None:
        parser.print_help()
        return 1

    root = pathlib.Path(args.directory or ".").expanduser().resolve()

    if args.command in {"translate-templates", "tt"}:
        exit_code, summary, message = execute_template_translation(
            root=root,
            path=args.path,
            provider=args.provider,
            provider_debug=args.debug_provider,
        )
        if message:
            print(message)
        if summary:
            print_template_summary(summary)
        return exit_code

    exit_code, reports, message = execute_rendering(
        root=root,
        output_dir=args.output_dir,
        output_format=args.format,
        provider=args.provider,
        workers=args.workers,
        provider_debug=args.debug_provider,
    )
    if message:
        print(message)
    if reports:
        print_batch_reports(reports)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
