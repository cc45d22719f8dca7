"""Reviewer agent: checks the generated project and approves or requests fixes."""

from agents.base import BaseAgent
from core.schemas import ProjectArtifact, ReviewResult
from core.state import AgentRole


class ReviewerAgent(BaseAgent):
    """Reviews every file of the artifact in one request.

    The `approved` flag is returned exactly as the model set it; the severity
    breakdown is only logged.
    """

    role = AgentRole.REVIEWER
    name = "Code Reviewer"
    prompt_name = "reviewer"

    def execute(self, phase_input: ProjectArtifact) -> ReviewResult:
        self.log.info("Reviewing %d files...", len(phase_input.files))

        # Build context: every file, numbered
        parts = ["Do a detailed code review of the following project:\n"]
        for idx, f in enumerate(phase_input.files, 1):
            parts.append(f"=== FILE {idx}: {f.path} ===\n{f.content}\n")
        parts.append(
            "Check security, error handling, typing, structure, framework best "
            "practices, performance and code quality.\n"
            "Find every problem, rate its severity and return the result as JSON."
        )

        review = self._request("\n".join(parts), ReviewResult)

        counts = review.severity_counts()
        self.log.info(
            "Review %s: %d issue(s) (critical=%d, major=%d, minor=%d)",
            "approved" if review.approved else "requested changes",
            len(review.issues), counts["critical"], counts["major"], counts["minor"],
        )
        return review
