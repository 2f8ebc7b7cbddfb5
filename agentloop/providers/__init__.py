"""
Completion provider transport layer.

Exposes:
- CompletionProvider (abstract interface)
- OpenAIProvider (OpenAI SDK backend)
- ChatCompletionsProvider (any OpenAI-compatible HTTP endpoint, Groq by default)
"""

from .base import Completion, CompletionProvider
from .messages import to_chat_messages, tool_params, tool_requests_from_message
from .openai_provider import OpenAIProvider
from .chat_completions import ChatCompletionsProvider

__all__ = [
    "Completion",
    "CompletionProvider",
    "OpenAIProvider",
    "ChatCompletionsProvider",
    "to_chat_messages",
    "tool_params",
    "tool_requests_from_message",
]
