import os
import logging
from typing import Optional, Sequence

import requests

from ..errors import ProviderError
from ..models import Transcript
from ..tools.schema import ToolDeclaration
from .base import Completion, CompletionProvider, check_tool_choice
from .messages import to_chat_messages, tool_params, tool_requests_from_message

logger = logging.getLogger(__name__)


class ChatCompletionsProvider(CompletionProvider):
    """
    `requests` client for any OpenAI-compatible /chat/completions
    endpoint. Defaults to Groq.
    """

    def __init__(
        self,
        model: str = "llama-3.1-8b-instant",
        url: str = "https://api.groq.com/openai/v1/chat/completions",
        api_key: Optional[str] = None,
        api_key_env: str = "GROQ_API_KEY",
        timeout_seconds: int = 60,
        temperature: Optional[float] = None,
    ):
        self.model = model
        self.url = url
        self.timeout = timeout_seconds
        self.temperature = temperature

        self.api_key = api_key or os.getenv(api_key_env)

        if not self.api_key:
            raise RuntimeError(
                f"{api_key_env} environment variable not set"
            )

    def complete(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDeclaration] = (),
        tool_choice: str = "auto",
    ) -> Completion:

        check_tool_choice(tools, tool_choice)

        payload = {
            "model": self.model,
            "messages": to_chat_messages(transcript),
            **tool_params(tools, tool_choice),
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature

        # --------------------------------------------------
        # Outgoing Request
        # --------------------------------------------------
        logger.info(
            f"[PROVIDER] {self.url} | model={self.model} | "
            f"messages={len(payload['messages'])} | tools={len(tools)}"
        )

        try:
            response = requests.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )

            response.raise_for_status()

        except requests.Timeout as e:
            raise ProviderError("Chat completions request timed out") from e

        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise ProviderError(f"Chat completions request failed: {e}", status_code=status) from e

        except requests.RequestException as e:
            raise ProviderError(f"Chat completions request failed: {e}") from e

        # --------------------------------------------------
        # Incoming Response
        # --------------------------------------------------
        try:
            data = response.json()
            message = data["choices"][0]["message"]
            if not isinstance(message, dict):
                raise TypeError(f"message is {type(message).__name__}, not an object")
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Unexpected chat completions response format: {e}") from e

        completion = Completion(
            text=message.get("content"),
            tool_requests=tool_requests_from_message(message),
            model=data.get("model", self.model),
            usage=data.get("usage") or {},
        )

        logger.debug(f"[PROVIDER RESPONSE] {completion}")
        return completion
