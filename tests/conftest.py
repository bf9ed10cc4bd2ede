"""
Shared fixtures for the comply translation tests.

Providers and the renderer are replaced with in-process fakes so no test
touches the network or needs pandoc installed.
"""
import threading
from pathlib import Path

import pytest

from comply_i18n.configuration import reset_configuration_cache
from comply_i18n.errors import RendererError
from comply_i18n.providers import TranslationProvider


GLOSSARY = {
    "Access Control Policy": "Política de Control de Acceso",
    "Purpose and Scope": "Propósito y Alcance",
    "Initial document": "Documento inicial",
    "This policy governs access to production systems.": "Esta política regula el acceso a los sistemas de producción.",
    "Incident Response Procedure": "Procedimiento de Respuesta a Incidentes",
    "Report the incident.": "Informe el incidente.",
}

ACCESS_POLICY = """name: Access Control Policy
acronym: ACP
satisfies:
  TSC:
    - CC6.1
majorRevisions:
  - date: Jun 1 2018
    comment: Initial document
---

# Purpose and Scope

This policy governs access to production systems.

| Role | Access |
|------|--------|
| Admin | Full |
"""

INCIDENT_PROCEDURE = """name: Incident Response Procedure
acronym: IRP
---

# Purpose and Scope

Report the incident.
"""


def prompt_content(prompt: str) -> str:
    """Pull the text under translation back out of a translator prompt."""
    if "**Section:**\n" in prompt:
        return prompt.split("**Section:**\n", 1)[1]
    if "**Input document:**\n" in prompt:
        content = prompt.split("**Input document:**\n", 1)[1]
        return content.split("\n\n**Target language:**", 1)[0]
    return prompt.rsplit("\n\n", 1)[1]


def glossary_responder(prompt: str, target_language: str) -> str:
    content = prompt_content(prompt)
    for english, spanish in GLOSSARY.items():
        content = content.replace(english, spanish)
    return content


class FakeProvider(TranslationProvider):
    """Records every call and answers through ``responder``."""

    name = "Fake"

    def __init__(self, responder=None, fail_on=None):
        super().__init__(model="fake-model")
        self.responder = responder or glossary_responder
        self.fail_on = fail_on
        self.calls = []
        self._lock = threading.Lock()

    def translate(self, text, source_language, target_language):
        with self._lock:
            self.calls.append((text, source_language, target_language))
        if self.fail_on is not None:
            error = self.fail_on(text, target_language)
            if error is not None:
                raise error
        return self.responder(text, target_language)


class RecordingRenderer:
    """Copies the finalized markdown to the artifact path instead of running pandoc."""

    def __init__(self, fail_for=None):
        self.fail_for = fail_for
        self.calls = []

    def render(self, markdown_path, output_path, output_format):
        content = markdown_path.read_text(encoding="utf-8")
        self.calls.append((markdown_path, output_path, output_format))
        if self.fail_for and self.fail_for in content:
            raise RendererError("pandoc exited with status 43: Error producing PDF")
        output_path.write_text(content, encoding="utf-8")
        return output_path


@pytest.fixture(autouse=True)
def fresh_configuration():
    """Settings are cached per directory; start each test from a clean cache."""
    reset_configuration_cache()
    yield
    reset_configuration_cache()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "OLLAMA_URL",
        "OLLAMA_MODEL",
        "COMPLY_PROVIDER_DEBUG",
        "OPENAI_BASE_URL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A comply project with one policy and one procedure."""
    (tmp_path / "policies").mkdir()
    (tmp_path / "procedures").mkdir()
    (tmp_path / "policies" / "access.md").write_text(ACCESS_POLICY, encoding="utf-8")
    (tmp_path / "procedures" / "incident.md").write_text(INCIDENT_PROCEDURE, encoding="utf-8")
    return tmp_path


def write_config(root: Path, block: str) -> None:
    (root / "comply.yml").write_text(
        "name: Acme\nfilePrefix: Acme\n" + block, encoding="utf-8"
    )
