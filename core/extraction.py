"""Recover JSON objects from free-form model replies.

Two tiers:

* ``extract_json`` takes the span from the first ``{`` to the last ``}``.
  Good enough for single-object payloads.
* ``extract_project_json`` is used for multi-file payloads whose file
  contents routinely contain their own braces. It scans for the end of the
  outer object while tracking strings and escapes, so a ``}`` inside source
  code never closes the object early.
"""

from __future__ import annotations

import json
import re

from pydantic import ValidationError

from core.errors import ExtractionError, ExtractionKind

_FENCE_RE = re.compile(r"```json\n?|```\n?")
_FILES_OBJECT_RE = re.compile(r"\{[\s\S]*\"files\"[\s\S]*\}")


def _preview(text, limit=200):
    text = text.strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def extract_json(text: str) -> dict:
    """Parse the first-``{``-to-last-``}`` span of `text`."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ExtractionError(
            ExtractionKind.NO_JSON_FOUND,
            f"no JSON object in reply: {_preview(text)!r}",
            raw=text,
        )
    try:
        value = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ExtractionError(ExtractionKind.PARSE_ERROR, str(e), raw=text) from e
    if not isinstance(value, dict):
        raise ExtractionError(ExtractionKind.PARSE_ERROR, "reply JSON is not an object", raw=text)
    return value


def find_object_end(text: str) -> int:
    """Return the index just past the brace closing the object at text[0].

    Braces inside string literals are ignored and the character after a
    backslash is never structural. Returns -1 if the object never closes.
    """
    depth = 0
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text)


def _balanced_files_object(cleaned: str, raw: str) -> dict:
    # The loose pattern below is quadratic on replies without the key
    if '"files"' not in cleaned:
        raise ExtractionError(
            ExtractionKind.MISSING_FILES_FIELD,
            f'reply has no "files" field: {_preview(raw)!r}',
            raw=raw,
        )

    match = _FILES_OBJECT_RE.search(cleaned)
    if not match:
        raise ExtractionError(
            ExtractionKind.MISSING_FILES_FIELD,
            f'reply has no object with a "files" field: {_preview(raw)!r}',
            raw=raw,
        )

    candidate = match.group(0)
    end = find_object_end(candidate)
    if end > 0:
        candidate = candidate[:end]

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ExtractionError(ExtractionKind.PARSE_ERROR, str(e), raw=raw) from e

    if not isinstance(value, dict) or "files" not in value:
        raise ExtractionError(
            ExtractionKind.MISSING_FILES_FIELD,
            'outer JSON object has no "files" field',
            raw=raw,
        )
    return value


def extract_project_json(text: str) -> dict:
    """Brace-balanced extraction of an object carrying a ``files`` key.

    The reply is first scanned as-is, so fences inside file contents (a
    README with a code block, say) survive. Fence markers are stripped
    everywhere only when that fails.
    """
    try:
        return _balanced_files_object(text, text)
    except ExtractionError:
        cleaned = strip_fences(text)
        if cleaned == text:
            raise
    return _balanced_files_object(cleaned, text)


def decode(text: str, schema, balanced: bool = False):
    """Extract a JSON object from `text` and validate it against `schema`.

    `schema` is a pydantic model class. `balanced` selects the
    brace-balanced tier.
    """
    data = extract_project_json(text) if balanced else extract_json(text)
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ExtractionError(
            ExtractionKind.SCHEMA_MISMATCH,
            f"{schema.__name__}: {e.error_count()} validation error(s): "
            + "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ),
            raw=text,
        ) from e
