"""Text-completion interface for the generative model."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Completion:
    """Raw model output and the reason generation stopped."""

    content: str
    stop_reason: str | None


class CompletionClient(Protocol):
    """Interface for an opaque text-completion service."""

    async def complete(
        self,
        *,
        model: str,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> Completion:
        """Return the model's text response for the given prompts."""
