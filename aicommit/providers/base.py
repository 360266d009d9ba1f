from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from ..config import Config


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


@dataclass(frozen=True)
class ChatCompletionRequest:
    """Body of a chat-completions call.

    Field names and nesting match the wire format exactly, so
    ``to_payload`` can be handed to a JSON encoder as-is.
    """

    model: str
    messages: list[ChatMessage] = field(default_factory=list)
    temperature: float = 0.3
    max_tokens: int = 256

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChatError:
    message: str


@dataclass(frozen=True)
class ChatCompletionResponse:
    """Decoded chat-completions body: completion text, an error, or neither."""

    content: str = ""
    error: Optional[ChatError] = None


class BaseDriver(ABC):
    """Abstract base for provider-specific completion calls.

    Each driver owns one provider's HTTP call pattern and response
    parsing. Prompt composition stays in LLMClient so every provider sees
    the same messages.
    """

    def __init__(self, config: Config, debug: bool = False) -> None:
        self.config = config
        self.debug = debug

    @abstractmethod
    def complete(self, request: ChatCompletionRequest) -> str:
        """Return the generated text for ``request``.

        Must raise GenerationError (or a subclass) when no text can be
        obtained. Never retries.
        """
        raise NotImplementedError
