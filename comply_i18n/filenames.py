"""Language tags embedded in translated file names.

A translated file carries its language as the final-but-one dot-separated
component: ``policy.md`` translated to ``pt-BR`` is ``policy.pt-BR.md``.

Detection is a heuristic: with at least three dot-separated parts, the
second-to-last part is taken as a tag when it contains a hyphen or is exactly
two characters long. A coincidental two-character component such as
``notes.v2.md`` is therefore reported as tagged with ``v2``.
"""

from __future__ import annotations

import pathlib
from typing import Optional

SKIPPED_PREFIXES = ("README", "TODO")


def translated_filename(filename: str, language: str) -> str:
    """Insert ``language`` before the extension of ``filename``."""

    stem, dot, extension = filename.rpartition(".")
    if not dot or not stem:
        return f"{filename}.{language}"
    return f"{stem}.{language}.{extension}"


def translated_path(path: pathlib.Path, language: str) -> pathlib.Path:
    """Return the sibling path holding the ``language`` translation of ``path``."""

    return path.with_name(translated_filename(path.name, language))


def language_from_filename(filename: str) -> Optional[str]:
    """Return the language tag carried by ``filename``, if any."""

    parts = pathlib.PurePath(filename).name.split(".")
    if len(parts) < 3:
        return None
    candidate = parts[-2]
    if "-" in candidate or len(candidate) == 2:
        return candidate
    return None


def is_translated(filename: str) -> bool:
    return language_from_filename(filename) is not None


def base_filename(filename: str) -> str:
    """Strip the language tag back out: ``policy.pt-BR.md`` -> ``policy.md``."""

    language = language_from_filename(filename)
    if language is None:
        return filename
    stem, _, extension = filename.rpartition(".")
    return f"{stem[: -(len(language) + 1)]}.{extension}"


def is_template_file(path: pathlib.Path | str) -> bool:
    """Check that ``path`` is an original template rather than a translation."""

    filename = pathlib.PurePath(path).name
    if filename.startswith(SKIPPED_PREFIXES):
        return False
    return not is_translated(filename)
