"""Tester agent: checks the project against the specification by reading the code."""

from agents.base import BaseAgent, numbered
from config.defaults import DEFAULTS
from core.schemas import TestResult
from core.state import AgentRole, TestInput


class TesterAgent(BaseAgent):
    """Writes test cases for every feature and judges them against the code.

    Only the first `tester_preview_chars` characters of each file are sent.
    """

    __test__ = False  # not a pytest class despite the name

    role = AgentRole.TESTER
    name = "QA Tester"
    prompt_name = "tester"

    def execute(self, phase_input: TestInput) -> TestResult:
        self.log.info("Testing the project...")

        result = self._request(self.build_test_prompt(phase_input), TestResult)

        self.log.info(
            "Testing %s: %d/%d test cases passed",
            "passed" if result.passed else "failed",
            result.passed_count, len(result.test_cases),
        )
        if result.failed_count:
            self.log.warning("%d test case(s) failed", result.failed_count)
        if result.coverage is not None:
            self.log.info("Coverage: %s%%", result.coverage)
        return result

    def build_test_prompt(self, phase_input: TestInput) -> str:
        spec = phase_input.specification
        preview = DEFAULTS["tester_preview_chars"]

        files = []
        for f in phase_input.project.files:
            content = f.content
            if len(content) > preview:
                content = content[:preview] + "..."
            files.append(f"{f.path}:\n{content}")

        return (
            "Test the following project against its requirements:\n\n"
            "=== REQUIREMENTS ===\n"
            f"Project: {spec.project_name}\n\n"
            f"Features:\n{numbered(spec.features)}\n\n"
            f"User stories:\n{numbered(spec.user_stories)}\n\n"
            "=== PROJECT CODE ===\n"
            + "\n\n".join(files)
            + "\n\n=== TASKS ===\n"
            "1. Write test cases for every feature and user story\n"
            "2. Decide from the code whether each test case passes or fails\n"
            "3. Find likely bugs and edge cases\n"
            "4. Estimate the test coverage (%)\n"
            "5. Recommend improvements\n\n"
            "Return the result as JSON."
        )
