"""Developer agent: generates the project, or regenerates it to fix review issues."""

from agents.base import BaseAgent, numbered
from agents.fix_request import compose_fix_request
from config.rules import MIN_FILES, REQUIRED_FILES, REQUIRED_PATTERNS
from config.stacks import format_tech_stack
from core.schemas import ProjectArtifact
from core.state import AgentRole, DevelopmentInput


class DeveloperAgent(BaseAgent):
    """Writes the full project as a single JSON artifact.

    With `review_feedback` set on the input the agent runs in fix mode: the
    same conversation is asked for a complete replacement artifact that
    addresses every review issue.
    """

    role = AgentRole.DEVELOPER
    name = "Developer"
    prompt_name = "developer"

    def execute(self, phase_input: DevelopmentInput) -> ProjectArtifact:
        if phase_input.review_feedback is not None:
            return self.fix_issues(phase_input)

        self.log.info("Generating project structure and code...")
        artifact = self._request(self.build_development_prompt(phase_input),
                                 ProjectArtifact, balanced=True)
        self.log.info("Project generated: %d files", len(artifact.files))
        return artifact

    def fix_issues(self, phase_input: DevelopmentInput) -> ProjectArtifact:
        review = phase_input.review_feedback
        self.log.info("Fixing %d review issue(s)...", len(review.issues))
        artifact = self._request(compose_fix_request(review), ProjectArtifact, balanced=True)
        self.log.info("Fixes applied: %d files", len(artifact.files))
        return artifact

    def build_development_prompt(self, phase_input: DevelopmentInput) -> str:
        spec = phase_input.specification
        design = phase_input.design

        layouts = numbered(f"{layout.name}: {layout.description}" for layout in design.layouts)
        required = "\n".join(f"- {path}" for path in REQUIRED_FILES)
        patterns = "\n".join(f"- {desc} ({pattern.pattern})" for pattern, desc in REQUIRED_PATTERNS)

        return (
            "Build a COMPLETE, working full-stack project with these parameters:\n\n"
            "=== PRODUCT SPECIFICATION ===\n"
            f"Project: {spec.project_name}\n"
            f"Description: {spec.description}\n\n"
            f"Features:\n{numbered(spec.features)}\n\n"
            f"User stories:\n{numbered(spec.user_stories)}\n\n"
            f"Technical requirements:\n{numbered(spec.technical_requirements)}\n\n"
            "=== DESIGN SYSTEM ===\n"
            "Colors:\n"
            f"- Primary: {design.color_scheme.primary}\n"
            f"- Secondary: {design.color_scheme.secondary}\n"
            f"- Accent: {design.color_scheme.accent}\n\n"
            "Typography:\n"
            f"- Headings: {design.typography.headings}\n"
            f"- Body: {design.typography.body}\n\n"
            f"Components: {', '.join(design.components)}\n\n"
            f"Layouts:\n{layouts}\n\n"
            f"Wireframes:\n{design.wireframes}\n\n"
            "=== TECH STACK ===\n"
            f"{format_tech_stack(phase_input.tech_stack)}\n\n"
            "=== REQUIRED STRUCTURE ===\n"
            f"At least {MIN_FILES} files. These paths are mandatory:\n{required}\n\n"
            f"Also include at least one of each:\n{patterns}\n\n"
            'Dependency versions must be pinned (never "latest").\n\n'
            "Return the project as JSON with \"files\", \"documentation\" and "
            "\"setupInstructions\"."
        )
