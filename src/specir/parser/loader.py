"""Read a Swagger 2 / OpenAPI 3 document into a plain mapping.

A source is a local path, an ``http(s)`` URL or ``-`` for stdin. The text is
decoded as JSON or YAML when the file extension or the response content type
names the format. Otherwise JSON is tried first and YAML second, so that a
broken JSON document reports both parser errors.

The dialect is not checked here. :func:`~specir.parser.dialect.detect_dialect`
does that once the mapping reaches
:func:`~specir.parser.extractor.extract_client`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from specir.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_FORMAT_BY_SUFFIX = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}
_FETCH_TIMEOUT = 30.0


def load_spec(source: str) -> dict[str, Any]:
    """Load the document named by *source*.

    Args:
        source: A file path, an ``http(s)`` URL, or ``-`` for stdin.

    Returns:
        The decoded top-level object.

    Raises:
        SpecParseError: The source cannot be read, is empty, does not decode
            as JSON or YAML, or does not hold an object.
    """
    if source == "-":
        text, fmt = _read_stdin()
    elif source.startswith(("http://", "https://")):
        text, fmt = _fetch(source)
    else:
        text, fmt = _read_file(source)

    if not text.strip():
        raise SpecParseError(f"Document is empty: {'<stdin>' if source == '-' else source}")
    document = parse_document(text, fmt)
    logger.debug("Loaded %s (%d top-level keys)", source, len(document))
    return document


def parse_document(text: str, fmt: Optional[str] = None) -> dict[str, Any]:
    """Decode *text* as ``fmt`` (``"json"`` or ``"yaml"``), or sniff it when ``None``."""
    errors: list[str] = []
    if fmt != "yaml":
        try:
            return _as_object(json.loads(text))
        except json.JSONDecodeError as exc:
            if fmt == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")
    try:
        return _as_object(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")
    raise SpecParseError("Failed to parse document as JSON or YAML\n  " + "\n  ".join(errors))


def _as_object(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        got = "empty document" if value is None else type(value).__name__
        raise SpecParseError(f"Document must be a JSON/YAML object (got {got})")
    return value


def _read_stdin() -> tuple[str, Optional[str]]:
    try:
        return sys.stdin.read(), None
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc


def _fetch(url: str) -> tuple[str, Optional[str]]:
    logger.debug("Fetching %s", url)
    try:
        response = httpx.get(url, timeout=_FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.text, "json"
    if "yaml" in content_type or "yml" in content_type:
        return response.text, "yaml"
    return response.text, None


def _read_file(path: str) -> tuple[str, Optional[str]]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc
    return text, _FORMAT_BY_SUFFIX.get(file_path.suffix.lower())
