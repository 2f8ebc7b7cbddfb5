from .config import AgentConfig
from .embedding.base import Embedder
from .providers.base import CompletionProvider


def create_provider(config: AgentConfig) -> CompletionProvider:
    """
    Factory for the completion provider.

    Supported providers:
    - "openai" → OpenAI SDK chat completions
    - "groq"   → OpenAI-compatible HTTP endpoint via requests
    """

    # Lazy imports prevent unnecessary client construction
    if config.provider == "openai":
        from .providers.openai_provider import OpenAIProvider
        return OpenAIProvider(model=config.model)

    if config.provider == "groq":
        from .providers.chat_completions import ChatCompletionsProvider
        return ChatCompletionsProvider(model=config.model)

    raise ValueError(f"Unsupported provider: {config.provider}")


def create_embedder(config: AgentConfig) -> Embedder:
    """
    Factory for the embedding backend.

    Supported backends:
    - "openai" → OpenAI embeddings (dimension truncated server-side)
    - "ollama" → local Ollama /api/embed
    """

    if config.embedding_backend == "openai":
        from .embedding.openai_embedder import OpenAIEmbedder
        return OpenAIEmbedder(
            model=config.embedding_model,
            dimensions=config.embedding_dimensions,
        )

    if config.embedding_backend == "ollama":
        from .embedding.ollama_embedder import OllamaEmbedder
        return OllamaEmbedder(
            model=config.embedding_model,
            dimensions=config.embedding_dimensions,
        )

    raise ValueError(f"Unsupported embedding_backend: {config.embedding_backend}")
