"""Inter-agent message log."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from core.state import AgentRole

logger = logging.getLogger(__name__)

MESSAGE_KINDS = ("request", "response", "feedback", "approval", "revision")
BROADCAST = "all"
_MAX_LOGGED = 500


@dataclass(frozen=True)
class AgentMessage:
    sender: AgentRole
    recipient: Union[AgentRole, str]    # a role or BROADCAST
    content: str
    kind: str = "request"
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.kind not in MESSAGE_KINDS:
            raise ValueError(f"Unknown message kind: {self.kind}")
        if self.recipient != BROADCAST and not isinstance(self.recipient, AgentRole):
            raise ValueError(f"Unknown recipient: {self.recipient}")

    @property
    def recipient_label(self):
        if self.recipient == BROADCAST:
            return "ALL"
        return self.recipient.value


class MessageLog:
    """Records every message exchanged during one pipeline run."""

    def __init__(self):
        self._messages: list[AgentMessage] = []

    def record(self, sender, recipient, content, kind="request") -> AgentMessage:
        message = AgentMessage(sender=sender, recipient=recipient, content=content, kind=kind)
        self._messages.append(message)
        text = content if len(content) <= _MAX_LOGGED else content[:_MAX_LOGGED] + "... (truncated)"
        logger.info("[%s] %s -> %s: %s", kind, sender.value, message.recipient_label, text)
        return message

    @property
    def messages(self):
        return list(self._messages)

    def __len__(self):
        return len(self._messages)

    def summary(self):
        """Return message totals overall, per kind and per sender."""
        return {
            "total": len(self._messages),
            "by_kind": dict(Counter(m.kind for m in self._messages)),
            "by_sender": dict(Counter(m.sender.value for m in self._messages)),
        }
