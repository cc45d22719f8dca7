"""Designer agent: builds a design system from the product specification."""

from agents.base import BaseAgent, numbered
from core.schemas import DesignSpecification, ProductSpecification
from core.state import AgentRole


class DesignerAgent(BaseAgent):

    role = AgentRole.DESIGNER
    name = "Designer"
    prompt_name = "designer"

    def execute(self, phase_input: ProductSpecification) -> DesignSpecification:
        self.log.info("Designing the UI...")

        spec = phase_input
        prompt = (
            "Create a detailed design based on this product specification:\n\n"
            f"PROJECT: {spec.project_name}\n"
            f"DESCRIPTION: {spec.description}\n\n"
            f"FEATURES:\n{numbered(spec.features)}\n\n"
            f"USER STORIES:\n{numbered(spec.user_stories)}\n\n"
            "Return the complete design system as JSON, including:\n"
            "- a color scheme (modern hex colors)\n"
            "- typography (suitable Google Fonts)\n"
            "- every UI component needed\n"
            "- layouts for the main pages\n"
            "- detailed wireframes for each main screen"
        )

        design = self._request(prompt, DesignSpecification)

        self.log.info(
            "Design ready: %s / %s, %d components, %d layouts",
            design.color_scheme.primary, design.color_scheme.secondary,
            len(design.components), len(design.layouts),
        )
        return design
