"""Error taxonomy for the pipeline.

Review rejections and an exhausted revision budget are normal outcomes and
have no exception class here.
"""

from __future__ import annotations

from enum import Enum


class PipelineError(Exception):
    """Base class for every fatal pipeline failure."""


class BackendError(PipelineError):
    """The model backend was unreachable or returned a non-success status."""

    def __init__(self, message, status=None, body="", cause=None):
        self.status = status
        self.body = body
        self.cause = cause
        super().__init__(message)


class ExtractionKind(str, Enum):
    NO_JSON_FOUND = "no_json_found"
    MISSING_FILES_FIELD = "missing_files_field"
    PARSE_ERROR = "parse_error"
    SCHEMA_MISMATCH = "schema_mismatch"


class ExtractionError(PipelineError):
    """A model reply could not be decoded into the expected payload."""

    def __init__(self, kind: ExtractionKind, message: str, raw: str = ""):
        self.kind = kind
        self.raw = raw
        super().__init__(f"{kind.value}: {message}")


class PersistenceValidationError(PipelineError):
    """The final artifact failed the minimum-shape checks before writing."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))
