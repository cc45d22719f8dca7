"""Shared builders and a scripted backend for the test suite."""

import json

from core.errors import BackendError
from core.schemas import (
    DesignSpecification,
    ProductSpecification,
    ProjectArtifact,
    ReviewResult,
    TestResult,
)
from utils.llm import LLMResponse


class FakeBackend:
    """Returns scripted replies in order and records every request.

    A reply that is an Exception instance is raised instead of returned.
    Streamed replies are emitted in `chunk_size` fragments.
    """

    def __init__(self, replies=None, chunk_size=7):
        self.replies = list(replies or [])
        self.calls = []
        self.chunk_size = chunk_size

    def _next(self, turns, model):
        self.calls.append({"turns": list(turns), "model": model})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def chat(self, turns, model=None):
        return LLMResponse(text=self._next(turns, model))

    def stream_chat(self, turns, on_chunk, model=None):
        text = self._next(turns, model)
        for i in range(0, len(text), self.chunk_size):
            on_chunk(text[i:i + self.chunk_size])
        return LLMResponse(text=text)


def backend_error():
    return BackendError("Claude API error 500: boom", status=500, body="boom")


SPEC_JSON = {
    "projectName": "Shopping List",
    "description": "A shared shopping list",
    "features": ["Add items", "Share lists"],
    "userStories": ["As a user, I want to add items, so that I remember them"],
    "technicalRequirements": ["Next.js"],
    "businessGoals": ["1000 users"],
}

DESIGN_JSON = {
    "colorScheme": {"primary": "#111111", "secondary": "#222222", "accent": "#ff0000"},
    "typography": {"headings": "Inter", "body": "Roboto"},
    "components": ["Button", "ItemList"],
    "layouts": [{"name": "Main", "description": "List with a header"}],
    "wireframes": "Header on top, list below",
}

REQUIRED_PATHS = [
    "package.json",
    "tsconfig.json",
    "next.config.js",
    "tailwind.config.js",
    "prisma/schema.prisma",
    ".env.example",
    "app/layout.tsx",
    "app/page.tsx",
    "app/globals.css",
    "app/api/items/route.ts",
    "app/api/items/[id]/route.ts",
    "components/Button.tsx",
    "components/ItemList.tsx",
    "lib/prisma.ts",
    "lib/types.ts",
]


def artifact_json(paths=None, package_json='{"dependencies": {"next": "14.2.5"}}'):
    files = []
    for path in paths or REQUIRED_PATHS:
        content = package_json if path == "package.json" else f"// {path}\nexport default function f() {{ return {{ a: 1 }} }}"
        files.append({"path": path, "content": content})
    return {
        "files": files,
        "documentation": "# Shopping List",
        "setupInstructions": "npm install && npm run dev",
    }


def review_json(approved, issues=None, feedback="ok"):
    return {"approved": approved, "issues": issues or [], "generalFeedback": feedback}


MAJOR_ISSUE = {
    "severity": "major",
    "file": "app/page.tsx",
    "line": 12,
    "description": "Missing error handling",
    "suggestion": "Wrap the fetch in try/except",
}

TEST_JSON = {
    "passed": True,
    "coverage": 80,
    "testCases": [
        {"name": "adds an item", "status": "passed"},
        {"name": "shares a list", "status": "failed", "error": "no share button"},
    ],
    "recommendations": ["Add e2e tests"],
}


def reply(obj, prose=True):
    """Wrap a JSON object the way models usually answer."""
    body = json.dumps(obj)
    if prose:
        return f"Here is the result:\n```json\n{body}\n```\nLet me know if you need changes."
    return body


def make_spec():
    return ProductSpecification.model_validate(SPEC_JSON)


def make_design():
    return DesignSpecification.model_validate(DESIGN_JSON)


def make_artifact(**kwargs):
    return ProjectArtifact.model_validate(artifact_json(**kwargs))


def make_review(approved, issues=None):
    return ReviewResult.model_validate(review_json(approved, issues))


def make_test_result():
    return TestResult.model_validate(TEST_JSON)
