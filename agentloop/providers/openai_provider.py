import logging
from typing import Optional, Sequence

import openai
from openai import OpenAI

from ..errors import ProviderError
from ..models import Transcript
from ..tools.schema import ToolDeclaration
from .base import Completion, CompletionProvider, check_tool_choice
from .messages import to_chat_messages, tool_params, tool_requests_from_message

logger = logging.getLogger(__name__)


class OpenAIProvider(CompletionProvider):
    """
    Completion provider using the OpenAI chat completions API.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        client: Optional[OpenAI] = None,
        temperature: Optional[float] = None,
    ):
        self.client = client or OpenAI()
        self.model = model
        self.temperature = temperature

    def complete(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDeclaration] = (),
        tool_choice: str = "auto",
    ) -> Completion:

        check_tool_choice(tools, tool_choice)

        request = {
            "model": self.model,
            "messages": to_chat_messages(transcript),
            **tool_params(tools, tool_choice),
        }
        if self.temperature is not None:
            request["temperature"] = self.temperature

        logger.info(
            f"[PROVIDER] OpenAI | model={self.model} | messages={len(request['messages'])} "
            f"| tools={len(tools)} | tool_choice={tool_choice}"
        )

        try:
            response = self.client.chat.completions.create(**request)
        except openai.APIStatusError as e:
            raise ProviderError(f"OpenAI request failed: {e}", status_code=e.status_code) from e
        except openai.OpenAIError as e:
            raise ProviderError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise ProviderError("OpenAI response contained no choices")

        message = response.choices[0].message.model_dump(exclude_none=True)
        usage = response.usage.model_dump() if response.usage is not None else {}

        completion = Completion(
            text=message.get("content"),
            tool_requests=tool_requests_from_message(message),
            model=response.model,
            usage=usage,
        )

        logger.debug(f"[PROVIDER RESPONSE] {completion}")
        return completion
