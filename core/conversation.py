"""Per-agent conversation memory."""

from __future__ import annotations

from dataclasses import dataclass

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Turn:
    role: str           # "system", "user" or "assistant"
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown turn role: {self.role}")

    def to_dict(self):
        return {"role": self.role, "content": self.content}


class Conversation:
    """Append-only turn history owned by exactly one agent.

    The system turn is fixed at index 0. Every exchange appends a user turn
    and the matching assistant turn together, so a failed request never
    leaves a dangling user turn behind.
    """

    def __init__(self, system_prompt: str):
        self._turns = [Turn("system", system_prompt)]

    @property
    def system_prompt(self) -> str:
        return self._turns[0].content

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self):
        return len(self._turns)

    def with_prompt(self, prompt: str) -> list[Turn]:
        """Return the turns to send for a new prompt without recording it."""
        return self._turns + [Turn("user", prompt)]

    def record(self, prompt: str, reply: str):
        self._turns.append(Turn("user", prompt))
        self._turns.append(Turn("assistant", reply))
