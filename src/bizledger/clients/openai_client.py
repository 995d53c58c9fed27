"""OpenAI chat-completions client used to interpret free-text entries."""

from dataclasses import dataclass
from typing import Any

import openai
import structlog

from bizledger.config import get_settings

logger = structlog.get_logger(__name__)


@dataclass
class OpenAIResponse:
    """Response from OpenAI API."""

    content: str
    stop_reason: str
    usage: dict[str, int]


class OpenAIClient:
    """Client for OpenAI's chat API.

    Also works against OpenAI-compatible servers via a custom base_url.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ):
        settings = get_settings()
        self._api_key = api_key or settings.openai_api_key.get_secret_value()
        self._base_url = base_url or settings.openai_base_url
        self._model = model or settings.gpt_model
        self._max_tokens = max_tokens or settings.llm_max_tokens

        client_kwargs: dict[str, str] = {"api_key": self._api_key}
        if self._base_url:
            client_kwargs["base_url"] = self._base_url

        self._client = openai.OpenAI(**client_kwargs)
        self._logger = logger.bind(client="openai", model=self._model)

    def _build_messages(self, system_prompt: str, prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]

    def _parse_response(
        self, response: openai.types.chat.ChatCompletion
    ) -> OpenAIResponse:
        """Parse OpenAI response into our format."""
        choice = response.choices[0]
        stop_reason_map = {
            "stop": "end_turn",
            "length": "max_tokens",
            "content_filter": "content_filter",
        }
        return OpenAIResponse(
            content=choice.message.content or "",
            stop_reason=stop_reason_map.get(choice.finish_reason or "stop", "end_turn"),
            usage={
                "input_tokens": response.usage.prompt_tokens if response.usage else 0,
                "output_tokens": response.usage.completion_tokens if response.usage else 0,
            },
        )

    async def complete(
        self,
        system_prompt: str,
        prompt: str,
        temperature: float | None = None,
    ) -> OpenAIResponse:
        """Run a single system + user exchange.

        Args:
            system_prompt: Instructions describing the expected output.
            prompt: The user's free-text description.
            temperature: Sampling temperature; the API default when None.

        Returns:
            OpenAIResponse with the raw content and usage info.
        """
        self._logger.debug("generating_response", prompt_length=len(prompt))

        # GPT-5+ models take max_completion_tokens and only the default temperature
        is_gpt5_plus = self._model.startswith("gpt-5") or self._model.startswith("o3")
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": self._build_messages(system_prompt, prompt),
        }
        if temperature is not None and not is_gpt5_plus:
            kwargs["temperature"] = temperature
        if is_gpt5_plus:
            kwargs["max_completion_tokens"] = self._max_tokens
        else:
            kwargs["max_tokens"] = self._max_tokens

        # Synchronous SDK call behind an async interface
        try:
            response = self._client.chat.completions.create(**kwargs)

            parsed = self._parse_response(response)

            self._logger.info(
                "response_generated",
                stop_reason=parsed.stop_reason,
                input_tokens=parsed.usage["input_tokens"],
                output_tokens=parsed.usage["output_tokens"],
            )

            return parsed

        except openai.APIError as e:
            self._logger.error("api_error", error=str(e))
            raise
