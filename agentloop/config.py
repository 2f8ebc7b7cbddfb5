import os
from typing import Mapping, Optional


DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "groq": "llama-3.1-8b-instant",
}

DEFAULT_EMBEDDING_MODELS = {
    "openai": "text-embedding-3-small",
    "ollama": "nomic-embed-text",
}


class AgentConfig:
    """
    Central configuration object for agent behavior.
    Controls provider, embedding backend, and loop limits.

    API keys are not part of the config; each client reads its own
    from the environment.
    """

    def __init__(
        self,
        provider: str = "openai",              # "openai" or "groq"
        model: Optional[str] = None,
        embedding_backend: str = "openai",     # "openai" or "ollama"
        embedding_model: Optional[str] = None,
        embedding_dimensions: int = 256,
        max_iterations: int = 10,
        max_workers: int = 4,
        memory_path: Optional[str] = None,
        retrieval_limit: int = 10,
        notepad_path: Optional[str] = None,
    ):
        self.provider = provider
        self.model = model or DEFAULT_MODELS.get(provider)
        self.embedding_backend = embedding_backend
        self.embedding_model = embedding_model or DEFAULT_EMBEDDING_MODELS.get(embedding_backend)
        self.embedding_dimensions = embedding_dimensions
        self.max_iterations = max_iterations
        self.max_workers = max_workers
        self.memory_path = memory_path
        self.retrieval_limit = retrieval_limit
        self.notepad_path = notepad_path

        self._validate()

    def _validate(self):
        if self.provider not in DEFAULT_MODELS:
            raise ValueError(f"Unsupported provider: {self.provider}")

        if self.embedding_backend not in DEFAULT_EMBEDDING_MODELS:
            raise ValueError(f"Unsupported embedding_backend: {self.embedding_backend}")

        for name in ("embedding_dimensions", "max_iterations", "max_workers", "retrieval_limit"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        """
        Build a config from AGENTLOOP_* variables. Unset variables keep
        their defaults.
        """
        env = os.environ if environ is None else environ

        kwargs = {}

        for key in ("provider", "model", "embedding_backend", "embedding_model", "memory_path",
                    "notepad_path"):
            value = env.get(f"AGENTLOOP_{key.upper()}")
            if value:
                kwargs[key] = value

        for key in ("embedding_dimensions", "max_iterations", "max_workers", "retrieval_limit"):
            var = f"AGENTLOOP_{key.upper()}"
            value = env.get(var)
            if value:
                try:
                    kwargs[key] = int(value)
                except ValueError:
                    raise ValueError(f"{var} must be an integer, got {value!r}") from None

        return cls(**kwargs)

    def __repr__(self) -> str:
        return (
            f"AgentConfig(provider={self.provider!r}, model={self.model!r}, "
            f"embedding_backend={self.embedding_backend!r}, "
            f"embedding_dimensions={self.embedding_dimensions}, "
            f"max_iterations={self.max_iterations})"
        )
