"""Pipeline state models shared across all phases."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from core.schemas import (
    DesignSpecification,
    ProductSpecification,
    ProjectArtifact,
    ReviewResult,
    TestResult,
)


class AgentRole(str, Enum):
    REQUIREMENTS_ANALYST = "requirements-analyst"
    DESIGNER = "designer"
    DEVELOPER = "developer"
    REVIEWER = "reviewer"
    TESTER = "tester"
    ORCHESTRATOR = "orchestrator"


# Roles backed by an LLM agent, in pipeline order.
PHASE_ROLES = (
    AgentRole.REQUIREMENTS_ANALYST,
    AgentRole.DESIGNER,
    AgentRole.DEVELOPER,
    AgentRole.REVIEWER,
    AgentRole.TESTER,
)


class Phase(str, Enum):
    REQUIREMENTS = "requirements"
    DESIGN = "design"
    DEVELOPMENT = "development"
    REVIEW = "review"
    TESTING = "testing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class TechStack:
    frontend: str
    backend: str
    database: str
    orm: str


@dataclass(frozen=True)
class ProjectRequirements:
    idea: str
    tech_stack: TechStack
    additional_requirements: str = ""


@dataclass(frozen=True)
class DevelopmentInput:
    specification: ProductSpecification
    design: DesignSpecification
    tech_stack: TechStack
    review_feedback: Optional[ReviewResult] = None   # set => fix mode


@dataclass(frozen=True)
class TestInput:
    __test__ = False

    project: ProjectArtifact
    specification: ProductSpecification


@dataclass(frozen=True)
class WorkflowState:
    phase: Phase = Phase.REQUIREMENTS
    requirements: Optional[ProductSpecification] = None
    design: Optional[DesignSpecification] = None
    codebase: Optional[ProjectArtifact] = None
    review: Optional[ReviewResult] = None
    test_result: Optional[TestResult] = None
    revision_count: int = 0
    max_revisions: int = 1
    review_attempts: int = 0
    project_path: str = ""


def advance(state: WorkflowState, phase: Phase, **artifacts) -> WorkflowState:
    """Fold one phase result into a new state value.

    `artifacts` may only name WorkflowState fields; the old state is left
    untouched.
    """
    return replace(state, phase=phase, **artifacts)
