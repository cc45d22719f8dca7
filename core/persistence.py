"""Validate the final artifact and write it to disk."""

import logging
import os
import re

from config.rules import (
    MIN_FILES,
    PINNED_MANIFESTS,
    REQUIRED_FILES,
    REQUIRED_PATTERNS,
    UNPINNED_MARKER,
)
from core.errors import PersistenceValidationError
from core.schemas import ProjectArtifact

logger = logging.getLogger(__name__)


def project_dir_name(project_name: str) -> str:
    """Lower-case the project name and replace whitespace runs with '-'."""
    return re.sub(r"\s+", "-", project_name.strip().lower())


def validate_artifact(artifact: ProjectArtifact):
    """Raise PersistenceValidationError if the artifact is not writable as-is.

    Missing required files, too few files and unpinned dependency versions
    are fatal. Missing optional path patterns are only logged.
    """
    paths = set(artifact.paths)
    problems = []

    missing = [p for p in REQUIRED_FILES if p not in paths]
    if missing:
        problems.append(f"Missing required files: {', '.join(missing)}")

    if len(artifact.files) < MIN_FILES:
        problems.append(
            f"Not enough files in project: {len(artifact.files)}/{MIN_FILES}+"
        )

    for f in artifact.files:
        if f.path in PINNED_MANIFESTS and UNPINNED_MARKER in f.content:
            problems.append(
                f"{f.path} uses {UNPINNED_MARKER} instead of a pinned version"
            )

    if problems:
        raise PersistenceValidationError(problems)

    for pattern, desc in REQUIRED_PATTERNS:
        if not any(pattern.search(p) for p in paths):
            logger.warning("No %s found (%s); the project may be incomplete",
                           desc, pattern.pattern)


def _resolve_inside(root, relative_path):
    """Resolve relative_path under root, refusing paths that escape it."""
    full_path = os.path.join(root, relative_path)
    resolved = os.path.realpath(full_path)
    if not resolved.startswith(os.path.realpath(root) + os.sep):
        raise PersistenceValidationError([f"Path escapes output directory: {relative_path}"])
    return resolved


def _write(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as fp:
        fp.write(content)


def write_project(project_name: str, artifact: ProjectArtifact, base_dir: str) -> str:
    """Validate and write the artifact under base_dir; return the project path.

    README.md and SETUP.md are written from the artifact's documentation and
    setup instructions after the generated files.
    """
    validate_artifact(artifact)

    project_path = _resolve_inside(base_dir, project_dir_name(project_name))
    targets = [(_resolve_inside(project_path, f.path), f.content) for f in artifact.files]

    os.makedirs(project_path, exist_ok=True)
    for path, content in targets:
        _write(path, content)
    _write(os.path.join(project_path, "README.md"), artifact.documentation)
    _write(os.path.join(project_path, "SETUP.md"), artifact.setup_instructions)

    logger.info("Wrote %d files to %s", len(targets) + 2, project_path)
    return project_path
