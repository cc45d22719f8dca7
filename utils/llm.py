"""Claude API client used as the model backend for every agent."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import anthropic

from config.defaults import DEFAULTS
from config.settings import default_model
from core.errors import BackendError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self):
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True)
class LLMResponse:
    text: str
    usage: Optional[TokenUsage] = None


def get_client():
    """Return an Anthropic client. Raises if no API key is set."""
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError(
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Get a key at https://console.anthropic.com/ and run:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'"
        )
    return anthropic.Anthropic(api_key=api_key)


def split_turns(turns):
    """Split conversation turns into Claude's (system, messages) arguments."""
    system_parts = []
    messages = []
    for turn in turns:
        if turn.role == "system":
            system_parts.append(turn.content)
        else:
            messages.append({"role": turn.role, "content": turn.content})
    return "\n\n".join(system_parts), messages


def _usage_from(message):
    usage = getattr(message, "usage", None)
    if usage is None:
        return None
    return TokenUsage(
        prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
        completion_tokens=getattr(usage, "output_tokens", 0) or 0,
    )


def _to_backend_error(exc, model):
    if isinstance(exc, anthropic.APIStatusError):
        body = exc.response.text if exc.response is not None else ""
        return BackendError(
            f"Claude API error {exc.status_code} (model={model}): {exc.message}",
            status=exc.status_code,
            body=body,
            cause=exc,
        )
    return BackendError(f"Claude API request failed (model={model}): {exc}", cause=exc)


class AnthropicBackend:
    """Sends whole conversations to Claude over the streaming API.

    Errors are raised as BackendError and never retried here.
    """

    def __init__(self, client=None, default_model_name=None, max_tokens=None):
        self._client = client
        self.default_model = default_model_name or default_model()
        self.max_tokens = max_tokens or DEFAULTS["max_tokens"]

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def _request_args(self, turns, model):
        system, messages = split_turns(turns)
        args = {
            "model": model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if system:
            args["system"] = system
        return args

    def _stream(self, turns, model, on_chunk=None):
        # Always streamed: the SDK refuses blocking calls with a large max_tokens
        fragments = []
        try:
            with self.client.messages.stream(**self._request_args(turns, model)) as stream:
                for chunk in stream.text_stream:
                    fragments.append(chunk)
                    if on_chunk is not None:
                        on_chunk(chunk)
                final = stream.get_final_message()
        except anthropic.APIError as e:
            raise _to_backend_error(e, model) from e

        if final.stop_reason == "max_tokens":
            logger.warning("Reply from %s hit the token limit and is truncated", model)

        return LLMResponse(text="".join(fragments), usage=_usage_from(final))

    def chat(self, turns, model=None) -> LLMResponse:
        model = model or self.default_model
        logger.debug("chat: model=%s turns=%d", model, len(turns))
        return self._stream(turns, model)

    def stream_chat(self, turns, on_chunk, model=None) -> LLMResponse:
        """Stream a reply, calling on_chunk(fragment) in emission order."""
        model = model or self.default_model
        logger.debug("stream_chat: model=%s turns=%d", model, len(turns))
        return self._stream(turns, model, on_chunk)
