"""Tests for the pandoc adapter."""
import subprocess
from pathlib import Path

import pytest

from comply_i18n.errors import RendererError, UnsupportedFormatError
from comply_i18n.renderer import PandocRenderer, artifact_filename, check_format


def test_artifact_filename():
    assert artifact_filename("access", "pt-BR", "pdf") == "access_pt-BR.pdf"


def test_check_format_normalises_case():
    assert check_format(" PDF ") == "pdf"


def test_check_format_rejects_unknown_formats():
    with pytest.raises(UnsupportedFormatError, match="docx"):
        check_format("docx")


class TestPandocRenderer:

    def test_pdf_arguments(self):
        arguments = PandocRenderer().build_arguments(Path("in.md"), Path("out.pdf"), "pdf")
        assert arguments == [
            "-f", "markdown+smart", "--toc", "-N",
            "--template", "templates/default.latex",
            "-o", "out.pdf", "in.md",
        ]

    def test_html_arguments(self):
        arguments = PandocRenderer().build_arguments(Path("in.md"), Path("out.html"), "html")
        assert arguments == ["-f", "markdown+smart", "--toc", "-N", "-s", "-o", "out.html", "in.md"]

    def test_missing_executable(self, tmp_path):
        renderer = PandocRenderer(executable="comply-renderer-that-does-not-exist")
        with pytest.raises(RendererError, match="Unable to run"):
            renderer.render(tmp_path / "in.md", tmp_path / "out.html", "html")

    def test_nonzero_exit(self, tmp_path, monkeypatch):
        seen = {}

        def fake_run(command, **kwargs):
            seen["command"] = command
            seen["cwd"] = kwargs.get("cwd")
            return subprocess.CompletedProcess(command, 43, stdout="", stderr="Error producing PDF.\n")

        monkeypatch.setattr(subprocess, "run", fake_run)
        renderer = PandocRenderer(cwd=tmp_path)

        with pytest.raises(RendererError, match="status 43: Error producing PDF."):
            renderer.render(tmp_path / "in.md", tmp_path / "out.pdf", "pdf")
        assert seen["command"][0] == "pandoc"
        assert seen["cwd"] == tmp_path

    def test_success_returns_output_path(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run", lambda command, **kwargs: subprocess.CompletedProcess(command, 0, "", "")
        )
        output = tmp_path / "out.html"
        assert PandocRenderer().render(tmp_path / "in.md", output, "html") == output
