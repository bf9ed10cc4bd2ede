"""Adapter for the external document renderer (pandoc)."""

from __future__ import annotations

import pathlib
import subprocess
from typing import List, Optional

from .errors import RendererError, UnsupportedFormatError

SUPPORTED_FORMATS = ("pdf", "html")


def artifact_filename(stem: str, language: str, output_format: str) -> str:
    """Name of a rendered translation: ``<stem>_<language>.<format>``."""

    return f"{stem}_{language}.{output_format}"


def check_format(output_format: str) -> str:
    normalized = output_format.strip().lower()
    if normalized not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported output format '{output_format}'. "
            f"Use one of: {', '.join(SUPPORTED_FORMATS)}."
        )
    return normalized


class PandocRenderer:
    """Turns a finalized markdown file into a PDF or standalone HTML file."""

    def __init__(
        self,
        *,
        executable: str = "pandoc",
        latex_template: str = "templates/default.latex",
        cwd: Optional[pathlib.Path] = None,
    ) -> None:
        self.executable = executable
        self.latex_template = latex_template
        self.cwd = cwd

    def build_arguments(
        self,
        markdown_path: pathlib.Path,
        output_path: pathlib.Path,
        output_format: str,
    ) -> List[str]:
        output_format = check_format(output_format)
        arguments = ["-f", "markdown+smart", "--toc", "-N"]
        if output_format == "pdf":
            arguments += ["--template", self.latex_template]
        else:
            arguments.append("-s")
        arguments += ["-o", str(output_path), str(markdown_path)]
        return arguments

    def render(
        self,
        markdown_path: pathlib.Path,
        output_path: pathlib.Path,
        output_format: str,
    ) -> pathlib.Path:
        command = [self.executable, *self.build_arguments(markdown_path, output_path, output_format)]
        try:
            completed = subprocess.run(
                command,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise RendererError(f"Unable to run {self.executable}: {exc}") from exc
        if completed.returncode != 0:
            raise RendererError(
                f"{self.executable} exited with status {completed.returncode}: "
                f"{completed.stderr.strip()}"
            )
        return output_path
