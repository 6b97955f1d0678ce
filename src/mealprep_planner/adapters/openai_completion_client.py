"""OpenAI Responses API client for text completions."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from mealprep_planner.services.completion import Completion, CompletionClient


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls, api_key: str, reasoning_effort: str | None = None, store: bool = False
    ) -> "OpenAICompletionClient":
        """Create an OpenAI completion client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def complete(
        self,
        *,
        model: str,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> Completion:
        """Call OpenAI Responses API and return the output text."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": system_prompt,
            "input": user_prompt,
            "max_output_tokens": max_tokens,
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        return Completion(
            content=response.output_text or "",
            stop_reason=_stop_reason(response),
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()


def _stop_reason(response: object) -> str | None:
    """Prefer the incomplete reason, falling back to the response status."""
    details = getattr(response, "incomplete_details", None)
    reason = getattr(details, "reason", None)
    if reason:
        return reason
    return getattr(response, "status", None)
