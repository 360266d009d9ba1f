"""LLM integration for aicommit.

``LLMClient`` composes the system prompt for the run mode and hands a
typed request to the provider driver. Every provider we support is
OpenAI-compatible, so there is a single driver today.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .config import Config
from .exceptions import MalformedResponse
from .providers.base import BaseDriver, ChatCompletionRequest, ChatMessage
from .providers.openai_driver import OpenAIDriver

logger = logging.getLogger(__name__)

COMMIT_PROMPT = "\n".join(
    [
        "You write git commit messages for the staged diff you are given.",
        "Output ONLY the commit message.",
        "",
        "Rules:",
        "- first line: imperative summary, at most 72 characters",
        "- no trailing period on the summary line",
        "- add a short body after a blank line only when the change needs it",
        "- no code fences, no quotes, no explanations",
    ]
)

REVIEW_PROMPT = "\n".join(
    [
        "You are an experienced code reviewer.",
        "Review the staged diff you are given and point out bugs, risky",
        "changes, missing tests and unclear code.",
        "Reference files and lines where possible. Be concise and concrete;",
        "skip praise and restating the diff.",
    ]
)

_FENCE_RE = re.compile(r"^```[\w-]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


def build_system_prompt(prompt: str, extra_prompt: Optional[str] = None) -> str:
    """Append user instructions to ``prompt`` after a blank line."""
    if extra_prompt:
        return f"{prompt}\n\n{extra_prompt}"
    return prompt


def sanitize_commit_message(raw: str) -> str:
    """Strip whitespace and a Markdown code fence wrapped around the text."""
    text = raw.strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1).strip()
    return text


class LLMClient:
    """Provider-aware client for commit messages and reviews."""

    def __init__(
        self,
        config: Config,
        debug: bool = False,
        driver: Optional[BaseDriver] = None,
    ) -> None:
        self.config = config
        self.debug = debug
        self._driver = driver or OpenAIDriver(config, debug=debug)

    def generate(
        self,
        prompt: str,
        payload_text: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Send one system and one user message; return the generated text.

        Raises GenerationError (ApiError, MalformedResponse) on failure.
        """
        request = ChatCompletionRequest(
            model=model,
            messages=[
                ChatMessage(role="system", content=prompt),
                ChatMessage(role="user", content=payload_text),
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        logger.debug("Generating with model=%s payload_len=%d", model, len(payload_text))
        return self._driver.complete(request)

    def generate_commit_message(self, diff: str) -> str:
        text = self.generate(
            build_system_prompt(COMMIT_PROMPT),
            diff,
            self.config.model,
            self.config.temperature,
            self.config.max_tokens,
        )
        message = sanitize_commit_message(text)
        if not message:
            raise MalformedResponse("Model returned an empty commit message")
        return message

    def generate_review(self, diff: str, extra_prompt: Optional[str] = None) -> str:
        return self.generate(
            build_system_prompt(REVIEW_PROMPT, extra_prompt),
            diff,
            self.config.model,
            self.config.temperature,
            self.config.max_tokens,
        )
