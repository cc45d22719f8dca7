"""Payload schemas decoded from agent replies.

Field names follow the camelCase JSON the agents are asked to produce; the
Python attributes are snake_case. Missing list/text fields default to empty
values, everything else is required.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self):
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Requirements
# ---------------------------------------------------------------------------

class ProductSpecification(Payload):
    project_name: str = Field(alias="projectName")
    description: str = ""
    features: list[str] = Field(default_factory=list)
    user_stories: list[str] = Field(default_factory=list, alias="userStories")
    technical_requirements: list[str] = Field(default_factory=list, alias="technicalRequirements")
    business_goals: list[str] = Field(default_factory=list, alias="businessGoals")

    @field_validator("project_name")
    @classmethod
    def _name_not_blank(cls, value):
        if not value.strip():
            raise ValueError("projectName must not be empty")
        return value.strip()


# ---------------------------------------------------------------------------
# Design
# ---------------------------------------------------------------------------

class ColorScheme(Payload):
    primary: str
    secondary: str
    accent: str


class Typography(Payload):
    headings: str
    body: str


class Layout(Payload):
    name: str
    description: str = ""


class DesignSpecification(Payload):
    color_scheme: ColorScheme = Field(alias="colorScheme")
    typography: Typography
    components: list[str] = Field(default_factory=list)
    layouts: list[Layout] = Field(default_factory=list)
    wireframes: str = ""


# ---------------------------------------------------------------------------
# Development
# ---------------------------------------------------------------------------

class FileRecord(Payload):
    path: str
    content: str = ""

    @field_validator("path")
    @classmethod
    def _relative_path(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("file path must not be empty")
        if value.startswith("/"):
            raise ValueError(f"file path must be relative: {value}")
        return value


class ProjectArtifact(Payload):
    files: list[FileRecord]
    documentation: str = ""
    setup_instructions: str = Field(default="", alias="setupInstructions")

    @field_validator("files")
    @classmethod
    def _unique_paths(cls, files):
        seen = set()
        for f in files:
            if f.path in seen:
                raise ValueError(f"duplicate file path: {f.path}")
            seen.add(f.path)
        return files

    @property
    def paths(self):
        return [f.path for f in self.files]


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------

Severity = Literal["critical", "major", "minor"]


class ReviewIssue(Payload):
    severity: Severity
    file: str = ""
    line: Optional[int] = None
    description: str
    suggestion: str = ""

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def location(self):
        if self.line:
            return f"{self.file}:{self.line}"
        return self.file


class ReviewResult(Payload):
    approved: bool
    issues: list[ReviewIssue] = Field(default_factory=list)
    general_feedback: str = Field(default="", alias="generalFeedback")

    def severity_counts(self):
        counts = {"critical": 0, "major": 0, "minor": 0}
        for issue in self.issues:
            counts[issue.severity] += 1
        return counts


# ---------------------------------------------------------------------------
# Testing
# ---------------------------------------------------------------------------

class TestCase(Payload):
    __test__ = False  # keep pytest from collecting this model

    name: str
    status: Literal["passed", "failed"]
    error: Optional[str] = None


class TestResult(Payload):
    __test__ = False

    passed: bool
    coverage: Optional[float] = Field(default=None, ge=0, le=100)
    test_cases: list[TestCase] = Field(default_factory=list, alias="testCases")
    recommendations: list[str] = Field(default_factory=list)

    @property
    def passed_count(self):
        return sum(1 for t in self.test_cases if t.status == "passed")

    @property
    def failed_count(self):
        return sum(1 for t in self.test_cases if t.status == "failed")
