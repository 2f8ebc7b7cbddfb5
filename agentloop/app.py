from typing import Optional

from .agent import AgentLoop, Conversation, Sentinel
from .config import AgentConfig
from .embedding.base import Embedder
from .factory import create_embedder, create_provider
from .memory import VectorMemoryStore
from .providers.base import CompletionProvider
from .tools import ToolDispatcher, ToolRegistry
from .tools.builtin import Notepad, notepad_prompt, register_memory_tools, register_notepad_tool


DEFAULT_SYSTEM_PROMPT = """You are a helpful assistant with access to long-term memory.

You can use the getMemory function to retrieve relevant memories, and the saveMemory function to save new information to your long-term memory.

Use your memories to keep track of information about the user."""


class AgentApp:
    """
    Top-level facade for constructing a memory-backed conversational agent.

    Holds the wired components so entry points (REPL, HTTP server) can
    reach the conversation and the memory store.
    """

    def __init__(
        self,
        conversation: Conversation,
        store: VectorMemoryStore,
        registry: ToolRegistry,
        config: AgentConfig,
        notepad: Optional[Notepad] = None,
    ) -> None:
        self.conversation = conversation
        self.store = store
        self.registry = registry
        self.config = config
        self.notepad = notepad

    @property
    def loop(self) -> AgentLoop:
        return self.conversation.loop

    @staticmethod
    def create(
        config: Optional[AgentConfig] = None,
        *,
        registry: Optional[ToolRegistry] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        provider: Optional[CompletionProvider] = None,
        embedder: Optional[Embedder] = None,
        sentinel: Optional[Sentinel] = None,
        notepad: Optional[Notepad] = None,
    ) -> "AgentApp":
        """
        Construct and return a fully wired AgentApp.

        This method performs **pure assembly only**: consumer tools come in
        through `registry`, and the memory tools are added to it. Passing
        `provider` / `embedder` skips the config-driven factories.

        A notepad (passed in, or file-backed from `config.notepad_path`)
        adds the `notepad` tool and appends its notes to the system prompt
        on every turn.

        Architectural Notes
        -------------------
        • Provider and embedder selection is delegated to `factory`
        • Tool execution is guarded by the ToolDispatcher contract checks
        • The memory store is shared by every run of the conversation
        """

        config = config or AgentConfig()
        registry = registry if registry is not None else ToolRegistry()

        provider = provider or create_provider(config)
        embedder = embedder or create_embedder(config)

        store = VectorMemoryStore(
            embedder,
            dimensions=config.embedding_dimensions,
            persist_path=config.memory_path,
        )
        register_memory_tools(registry, store, limit=config.retrieval_limit)

        prompt = system_prompt
        if notepad is None and config.notepad_path:
            notepad = Notepad(config.notepad_path)
        if notepad is not None:
            register_notepad_tool(registry, notepad)
            prompt = notepad_prompt(notepad, system_prompt)

        dispatcher = ToolDispatcher(registry, max_workers=config.max_workers)

        loop = AgentLoop(
            provider,
            dispatcher,
            max_iterations=config.max_iterations,
            sentinel=sentinel,
        )

        return AgentApp(
            conversation=Conversation(loop, prompt),
            store=store,
            registry=registry,
            config=config,
            notepad=notepad,
        )
