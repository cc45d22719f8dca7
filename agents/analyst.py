"""Requirements analyst: turns a product idea into a product specification."""

from agents.base import BaseAgent
from config.stacks import format_tech_stack
from core.schemas import ProductSpecification
from core.state import AgentRole, ProjectRequirements


class RequirementsAnalystAgent(BaseAgent):
    """Produces a ProductSpecification from the raw idea and tech stack."""

    role = AgentRole.REQUIREMENTS_ANALYST
    name = "Requirements Analyst"
    prompt_name = "requirements_analyst"

    def execute(self, phase_input: ProjectRequirements) -> ProductSpecification:
        self.log.info("Analysing project requirements...")

        parts = [
            "Analyse the following project idea and produce a detailed specification.",
            f"\nIDEA:\n{phase_input.idea}",
        ]
        if phase_input.additional_requirements:
            parts.append(f"\nADDITIONAL REQUIREMENTS:\n{phase_input.additional_requirements}")
        parts.append(f"\nTECH STACK:\n{format_tech_stack(phase_input.tech_stack)}")
        parts.append("\nReturn the full product specification as JSON.")

        spec = self._request("\n".join(parts), ProductSpecification)

        self.log.info(
            "Specification ready: %s (%d features, %d user stories)",
            spec.project_name, len(spec.features), len(spec.user_stories),
        )
        return spec
