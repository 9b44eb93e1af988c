"""Base agent: the pattern every pipeline agent follows."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """What agents need from an LLM client (``LLMClient`` or ``DryRunClient``)."""

    async def complete(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        json_mode: bool = True,
        max_tokens: int | None = None,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str: ...


class BaseAgent(ABC):
    """Abstract base class for all pipeline agents.

    Subclasses implement:
    - ``name``: human-readable agent name for logs
    - ``get_system_prompt()``: returns the system prompt string
    """

    def __init__(self, client: CompletionClient) -> None:
        self.client = client

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logs and progress display."""

    @abstractmethod
    def get_system_prompt(self) -> str:
        """Return the system prompt for this agent."""

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        max_tokens: int | None = None,
        api_key: str | None = None,
    ) -> str:
        """One JSON-mode call with this agent's system prompt."""
        raw = await self.client.complete(
            system=self.get_system_prompt(),
            messages=messages,
            json_mode=True,
            max_tokens=max_tokens,
            api_key=api_key,
        )
        logger.debug("Agent %s raw output:\n%s", self.name, raw[:500])
        return raw
