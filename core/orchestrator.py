"""Main pipeline orchestrator: fixed phases with a bounded review/fix loop."""

import logging

from agents.analyst import RequirementsAnalystAgent
from agents.designer import DesignerAgent
from agents.developer import DeveloperAgent
from agents.reviewer import ReviewerAgent
from agents.tester import TesterAgent
from config import settings
from config.stacks import DEFAULT_TECH_STACK
from core.messages import BROADCAST, MessageLog
from core.persistence import write_project
from core.state import (
    AgentRole,
    DevelopmentInput,
    Phase,
    ProjectRequirements,
    TestInput,
    WorkflowState,
    advance,
)
from utils.llm import AnthropicBackend

logger = logging.getLogger(__name__)

# One agent class per LLM-backed role.
AGENT_CLASSES = {
    AgentRole.REQUIREMENTS_ANALYST: RequirementsAnalystAgent,
    AgentRole.DESIGNER: DesignerAgent,
    AgentRole.DEVELOPER: DeveloperAgent,
    AgentRole.REVIEWER: ReviewerAgent,
    AgentRole.TESTER: TesterAgent,
}

ORCHESTRATOR = AgentRole.ORCHESTRATOR


class Orchestrator:
    """Runs requirements → design → development → review ⇄ fix → testing → complete.

    Every phase runs exactly once except review, which alternates with
    developer fix cycles until the reviewer approves or `max_revisions`
    fix cycles have run. An unapproved artifact at that point still goes on
    to testing. Any agent or persistence failure aborts the run and is
    re-raised unchanged; nothing is written in that case.

    One Orchestrator drives one run: agents keep their conversations for
    the lifetime of the instance.
    """

    def __init__(self, backend=None, max_revisions=None, output_dir=None,
                 tech_stack=None, on_chunk=None, persist=write_project):
        if max_revisions is None:
            max_revisions = settings.max_revisions()
        self.backend = backend or AnthropicBackend()
        self.output_dir = output_dir or settings.output_dir()
        self.tech_stack = tech_stack or DEFAULT_TECH_STACK
        self.persist = persist
        self.messages = MessageLog()
        self.state = WorkflowState(max_revisions=settings.clamp_revisions(max_revisions))

        self.agents = {
            role: cls(self.backend, model=settings.get_agent_model(role), on_chunk=on_chunk)
            for role, cls in AGENT_CLASSES.items()
        }
        self.analyst = self.agents[AgentRole.REQUIREMENTS_ANALYST]
        self.designer = self.agents[AgentRole.DESIGNER]
        self.developer = self.agents[AgentRole.DEVELOPER]
        self.reviewer = self.agents[AgentRole.REVIEWER]
        self.tester = self.agents[AgentRole.TESTER]

    def _enter(self, state: WorkflowState, phase: Phase, **artifacts) -> WorkflowState:
        self.state = advance(state, phase, **artifacts)
        return self.state

    def create_requirements(self, idea, additional_requirements=""):
        return ProjectRequirements(
            idea=idea.strip(),
            tech_stack=self.tech_stack,
            additional_requirements=(additional_requirements or "").strip(),
        )

    # ------------------------------------------------------------------
    # Phases. Each takes the current state and returns the next one.
    # ------------------------------------------------------------------

    def gather_requirements(self, state, requirements: ProjectRequirements) -> WorkflowState:
        state = self._enter(state, Phase.REQUIREMENTS)
        self.messages.record(AgentRole.REQUIREMENTS_ANALYST, BROADCAST,
                             f"Starting requirements analysis for: {requirements.idea}")

        spec = self.analyst.execute(requirements)

        self.messages.record(AgentRole.REQUIREMENTS_ANALYST, ORCHESTRATOR,
                             f"Specification ready: {spec.project_name}", kind="response")
        return self._enter(state, Phase.REQUIREMENTS, requirements=spec)

    def design(self, state) -> WorkflowState:
        state = self._enter(state, Phase.DESIGN)
        self.messages.record(AgentRole.DESIGNER, BROADCAST,
                             "Creating the design system from the specification")

        design = self.designer.execute(state.requirements)

        self.messages.record(AgentRole.DESIGNER, ORCHESTRATOR,
                             "Design system complete", kind="response")
        return self._enter(state, Phase.DESIGN, design=design)

    def _development_input(self, state, review_feedback=None):
        return DevelopmentInput(
            specification=state.requirements,
            design=state.design,
            tech_stack=self.tech_stack,
            review_feedback=review_feedback,
        )

    def develop(self, state) -> WorkflowState:
        state = self._enter(state, Phase.DEVELOPMENT)
        self.messages.record(AgentRole.DEVELOPER, BROADCAST, "Starting development")

        codebase = self.developer.execute(self._development_input(state))

        self.messages.record(AgentRole.DEVELOPER, ORCHESTRATOR,
                             f"Project created, files: {len(codebase.files)}", kind="response")
        return self._enter(state, Phase.DEVELOPMENT, codebase=codebase)

    def review(self, state) -> WorkflowState:
        """Review, and let the developer fix, at most max_revisions times."""
        max_attempts = state.max_revisions + 1
        attempts = 0

        while attempts < max_attempts:
            state = self._enter(state, Phase.REVIEW)
            self.messages.record(
                AgentRole.REVIEWER, AgentRole.DEVELOPER,
                "Reviewing the code" if attempts == 0 else "Reviewing the fixes",
            )

            result = self.reviewer.execute(state.codebase)
            state = self._enter(state, Phase.REVIEW, review=result,
                                review_attempts=state.review_attempts + 1)

            counts = result.severity_counts()
            logger.info("Review attempt %d/%d: approved=%s critical=%d major=%d minor=%d",
                        attempts + 1, max_attempts, result.approved,
                        counts["critical"], counts["major"], counts["minor"])

            if result.approved:
                self.messages.record(AgentRole.REVIEWER, ORCHESTRATOR,
                                     "Code approved", kind="approval")
                break

            self.messages.record(
                AgentRole.REVIEWER, AgentRole.DEVELOPER,
                f"Found {len(result.issues)} issue(s). Fixes required.", kind="feedback",
            )

            attempts += 1
            if attempts >= max_attempts:
                logger.warning("Revision budget exhausted after %d review(s); "
                               "continuing with the current version", max_attempts)
                break

            self.messages.record(AgentRole.DEVELOPER, AgentRole.REVIEWER,
                                 "Fixing review issues", kind="revision")
            state = self._enter(state, Phase.DEVELOPMENT)

            codebase = self.developer.execute(self._development_input(state, review_feedback=result))

            state = self._enter(state, Phase.DEVELOPMENT, codebase=codebase,
                                revision_count=state.revision_count + 1)
            self.messages.record(AgentRole.DEVELOPER, AgentRole.REVIEWER,
                                 "Issues fixed, ready for another review", kind="response")

        return state

    def test(self, state) -> WorkflowState:
        state = self._enter(state, Phase.TESTING)
        self.messages.record(AgentRole.TESTER, BROADCAST, "Starting project testing")

        result = self.tester.execute(TestInput(project=state.codebase,
                                               specification=state.requirements))

        self.messages.record(
            AgentRole.TESTER, ORCHESTRATOR,
            f"Testing complete. Passed: {result.passed_count}/{len(result.test_cases)}",
            kind="response",
        )
        return self._enter(state, Phase.TESTING, test_result=result)

    def finalize(self, state) -> WorkflowState:
        """Hand the final artifact, unmodified, to persistence."""
        state = self._enter(state, Phase.COMPLETE)
        path = self.persist(state.requirements.project_name, state.codebase, self.output_dir)
        return self._enter(state, Phase.COMPLETE, project_path=path)

    # ------------------------------------------------------------------

    def run(self, requirements: ProjectRequirements) -> str:
        """Run every phase and return the persisted project path."""
        state = self.state
        try:
            state = self.gather_requirements(state, requirements)
            state = self.design(state)
            state = self.develop(state)
            state = self.review(state)
            state = self.test(state)
            state = self.finalize(state)
        except Exception:
            logger.error("Pipeline failed during the %s phase", self.state.phase.value)
            raise

        logger.info("Project created at %s (revisions: %d, messages: %d)",
                    state.project_path, state.revision_count, len(self.messages))
        return state.project_path
