"""Abstract base class for all phase agents."""

import logging
import os
from abc import ABC, abstractmethod

from core.conversation import Conversation
from core.errors import ExtractionError
from core.extraction import decode
from core.state import AgentRole

_PROMPTS_DIR = os.path.join(os.path.dirname(__file__), "prompts")


def load_prompt(name):
    """Read agents/prompts/<name>.txt."""
    with open(os.path.join(_PROMPTS_DIR, f"{name}.txt")) as f:
        return f.read()


class BaseAgent(ABC):
    """A role-tagged agent with its own conversation against one backend.

    Subclasses set `role`, `name` and `prompt_name` and implement execute().
    Requests are sent one at a time; an agent instance must not be shared
    between concurrently running pipelines.
    """

    role: AgentRole
    name = "base"
    prompt_name = ""

    def __init__(self, backend, model=None, on_chunk=None):
        self.backend = backend
        self.model = model
        self.on_chunk = on_chunk    # set => replies are streamed
        self.conversation = Conversation(load_prompt(self.prompt_name))
        self.log = logging.getLogger(f"agents.{self.role.value}")

    @abstractmethod
    def execute(self, phase_input):
        """Run this agent's phase and return its decoded payload."""

    def ask(self, prompt: str) -> str:
        """Send the whole conversation plus `prompt`; record and return the reply."""
        turns = self.conversation.with_prompt(prompt)
        response = self.backend.chat(turns, model=self.model)
        self.conversation.record(prompt, response.text)
        return response.text

    def ask_streaming(self, prompt: str, on_chunk) -> str:
        """Like ask(), but forwards each reply fragment to on_chunk as it arrives."""
        turns = self.conversation.with_prompt(prompt)
        fragments = []

        def _collect(chunk):
            fragments.append(chunk)
            on_chunk(chunk)

        self.backend.stream_chat(turns, _collect, model=self.model)
        reply = "".join(fragments)
        self.conversation.record(prompt, reply)
        return reply

    def _request(self, prompt: str, schema, balanced=False):
        """Ask (streamed if configured) and decode the reply into `schema`."""
        if self.on_chunk is not None:
            reply = self.ask_streaming(prompt, self.on_chunk)
        else:
            reply = self.ask(prompt)
        try:
            return decode(reply, schema, balanced=balanced)
        except ExtractionError as e:
            self.log.error("Could not decode %s reply: %s", schema.__name__, e)
            self.log.debug("First 500 chars of reply: %s", reply[:500])
            raise


def numbered(items):
    """Render items as a 1-based numbered list, one per line."""
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))
