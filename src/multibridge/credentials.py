"""Credential loading from a plain-text key file."""

from __future__ import annotations

import logging
from pathlib import Path

from .exceptions import CredentialError
from .utils import normalise_private_key

logger = logging.getLogger(__name__)


def parse_private_keys(text: str) -> list[str]:
    """Return normalised keys from file content, skipping blanks and ``#`` comments."""

    keys = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        keys.append(normalise_private_key(stripped))
    return keys


def load_private_keys(path: str | Path) -> list[str]:
    """Load the ordered wallet keys from ``path``.

    Raises:
        CredentialError: If the file is missing or holds no keys
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise CredentialError(f"Credential file {file_path} not found", source=str(file_path))

    keys = parse_private_keys(file_path.read_text(encoding="utf-8"))
    if not keys:
        raise CredentialError(f"Credential file {file_path} is empty", source=str(file_path))

    logger.info("Loaded %s wallet(s) from %s", len(keys), file_path)
    return keys
