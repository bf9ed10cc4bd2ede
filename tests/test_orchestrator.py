"""Tests for the per-document translate-and-render pipeline."""
import dataclasses

import pytest

from comply_i18n.documents import parse_document
from comply_i18n.errors import (
    DocumentTranslationError,
    ErrorCategory,
    RendererError,
    TranslationProviderError,
    UnsupportedFormatError,
    categorise,
)
from comply_i18n.orchestrator import TranslationOrchestrator, intermediate_directory
from comply_i18n.staleness import StalenessTracker

from conftest import FakeProvider, RecordingRenderer


@pytest.fixture
def access_policy(project):
    return parse_document(project / "policies" / "access.md")


@pytest.fixture
def output_dir(project):
    return project / "output"


def make_orchestrator(provider=None, renderer=None, tracker=None):
    return TranslationOrchestrator(
        provider or FakeProvider(),
        tracker or StalenessTracker(),
        renderer=renderer or RecordingRenderer(),
    )


class TestTranslateForRendering:

    def test_renders_translated_pdf(self, access_policy, output_dir, capsys):
        renderer = RecordingRenderer()
        orchestrator = make_orchestrator(renderer=renderer)

        artifact = orchestrator.translate_for_rendering(access_policy, output_dir, "es", "pdf")

        assert artifact == output_dir / "access_es.pdf"
        content = artifact.read_text(encoding="utf-8")
        assert "name: Política de Control de Acceso" in content
        assert "acronym: ACP" in content
        assert "    - CC6.1" in content
        assert "# Propósito y Alcance" in content
        assert "| Admin | Full |" in content
        assert renderer.calls[0][2] == "pdf"

        output = capsys.readouterr().out
        assert "Translating Access Control Policy to es..." in output
        assert "-> " in output and "(es)" in output

    def test_intermediates_are_removed(self, access_policy, output_dir):
        orchestrator = make_orchestrator()
        orchestrator.translate_for_rendering(access_policy, output_dir, "es", "html")

        assert sorted(path.name for path in output_dir.iterdir()) == ["access_es.html"]

    def test_unchanged_document_is_skipped(self, access_policy, output_dir):
        provider = FakeProvider()
        renderer = RecordingRenderer()
        orchestrator = make_orchestrator(provider=provider, renderer=renderer)

        orchestrator.translate_for_rendering(access_policy, output_dir, "es", "pdf")
        calls = len(provider.calls)

        assert orchestrator.translate_for_rendering(access_policy, output_dir, "es", "pdf") is None
        assert len(provider.calls) == calls
        assert len(renderer.calls) == 1

    def test_modified_document_is_processed_again(self, access_policy, output_dir):
        renderer = RecordingRenderer()
        orchestrator = make_orchestrator(renderer=renderer)

        orchestrator.translate_for_rendering(access_policy, output_dir, "es", "pdf")
        touched = dataclasses.replace(access_policy, modified_at=access_policy.modified_at + 60)

        assert orchestrator.translate_for_rendering(touched, output_dir, "es", "pdf") is not None
        assert len(renderer.calls) == 2

    def test_output_format_is_validated_first(self, access_policy, output_dir):
        tracker = StalenessTracker()
        orchestrator = make_orchestrator(tracker=tracker)

        with pytest.raises(DocumentTranslationError) as excinfo:
            orchestrator.translate_for_rendering(access_policy, output_dir, "es", "docx")

        assert isinstance(excinfo.value.__cause__, UnsupportedFormatError)
        assert excinfo.value.stage == "select output format"
        assert len(tracker) == 0
        assert not output_dir.exists()

    def test_renderer_failure_names_the_stage_and_cleans_up(self, access_policy, output_dir):
        orchestrator = make_orchestrator(renderer=RecordingRenderer(fail_for="ACP"))

        with pytest.raises(DocumentTranslationError) as excinfo:
            orchestrator.translate_for_rendering(access_policy, output_dir, "es", "pdf")

        error = excinfo.value
        assert error.stage == "render pdf output"
        assert error.document == "Access Control Policy"
        assert error.language == "es"
        assert isinstance(error.__cause__, RendererError)
        assert "status 43" in str(error)
        assert categorise(error) is ErrorCategory.RENDERER
        assert list(output_dir.iterdir()) == []

    def test_provider_failure_names_the_stage(self, access_policy, output_dir):
        provider = FakeProvider(
            fail_on=lambda text, target: TranslationProviderError("Ollama API request timed out")
        )
        orchestrator = make_orchestrator(provider=provider)

        with pytest.raises(DocumentTranslationError) as excinfo:
            orchestrator.translate_for_rendering(access_policy, output_dir, "fr", "html")

        assert excinfo.value.stage == "translate document"
        assert categorise(excinfo.value) is ErrorCategory.PROVIDER
        assert list(output_dir.iterdir()) == []

    def test_failed_document_is_not_retried_in_the_same_run(self, access_policy, output_dir):
        renderer = RecordingRenderer(fail_for="ACP")
        orchestrator = make_orchestrator(renderer=renderer)

        with pytest.raises(DocumentTranslationError):
            orchestrator.translate_for_rendering(access_policy, output_dir, "es", "pdf")

        assert orchestrator.translate_for_rendering(access_policy, output_dir, "es", "pdf") is None
        assert len(renderer.calls) == 1


class TestIntermediateDirectory:

    def test_private_directory_under_output(self, tmp_path):
        output_dir = tmp_path / "output"
        with intermediate_directory(output_dir, "access_es_pdf") as first, \
                intermediate_directory(output_dir, "access_es_pdf") as second:
            assert first.parent == output_dir
            assert first != second
            assert first.name.startswith(".access_es_pdf-")
        assert list(output_dir.iterdir()) == []

    def test_removed_when_the_body_raises(self, tmp_path):
        with pytest.raises(RuntimeError):
            with intermediate_directory(tmp_path, "doc") as workdir:
                (workdir / "doc.md").write_text("body", encoding="utf-8")
                raise RuntimeError("boom")
        assert list(tmp_path.iterdir()) == []
