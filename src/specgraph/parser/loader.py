"""Read an OpenAPI document from a file, an HTTP(S) URL, or stdin.

The parser core expects an already-parsed document; this module is the thin
adapter that produces one for the CLI.  JSON and YAML are both accepted.  The
format is guessed from the file extension or the response ``content-type``
and otherwise from the content itself.

* :func:`load_document` -- fetch and parse a document.
* :func:`check_openapi_version` -- accept OpenAPI 3.x, reject Swagger 2.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specgraph.exceptions import SpecParseError

_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_document(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load and parse the OpenAPI document at *source*.

    Args:
        source: A file path, an ``http://`` / ``https://`` URL, or ``-``
            for stdin.
        timeout: Seconds to wait for a remote document.

    Returns:
        The parsed document.

    Raises:
        SpecParseError: If the source cannot be read or is neither JSON nor
            YAML, or does not hold a mapping.
    """
    if source == "-":
        content, hint, origin = _read_stdin()
    elif source.startswith(("http://", "https://")):
        content, hint, origin = _read_url(source, timeout)
    else:
        content, hint, origin = _read_file(source)

    if not content.strip():
        raise SpecParseError(f"Document is empty: {origin}")
    return _parse_content(content, hint, origin)


def _read_stdin() -> tuple[str, str, str]:
    try:
        return sys.stdin.read(), "", "stdin"
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc


def _read_url(url: str, timeout: float) -> tuple[str, str, str]:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return response.text, hint, url


def _read_file(path: str) -> tuple[str, str, str]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read {path}: {exc}") from exc
    return content, _SUFFIX_HINTS.get(file_path.suffix.lower(), ""), path


def _parse_content(content: str, hint: str, origin: str) -> dict[str, Any]:
    """Parse *content* as JSON unless hinted as YAML, falling back to YAML.

    Valid JSON is also valid YAML, so trying JSON first only changes which
    parser reports the error.
    """
    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content), origin)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON in {origin}: {exc}") from exc

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Failed to parse {origin} as JSON or YAML: {exc}") from exc
    return _require_mapping(data, origin)


def _require_mapping(data: Any, origin: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        kind = "empty document" if data is None else type(data).__name__
        raise SpecParseError(f"{origin} must hold a JSON/YAML object (got {kind})")
    return data


def check_openapi_version(document: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version if it is a 3.x version.

    Raises:
        SpecParseError: For Swagger 2.x documents, a missing ``openapi``
            field, or any non-3.x version.
    """
    if "swagger" in document:
        raise SpecParseError(
            f"Swagger {document['swagger']} is not supported. "
            "Only OpenAPI 3.x documents are supported."
        )

    version = document.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(f"Unsupported OpenAPI version: {version_str}")
    return version_str
