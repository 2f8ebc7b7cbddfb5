import hashlib
import json
import re
import threading

import numpy as np

from agentloop.embedding.base import Embedder
from agentloop.errors import EmbeddingError
from agentloop.models import ToolRequest
from agentloop.providers.base import Completion, CompletionProvider


# ------------------------------------------------------------------
# Provider
# ------------------------------------------------------------------

class ScriptedProvider(CompletionProvider):
    """
    Returns scripted Completions (or raises scripted exceptions) in order.
    With repeat_last=True the last entry is served forever.
    """

    def __init__(self, script, repeat_last=False):
        self.script = list(script)
        self.repeat_last = repeat_last
        self.calls = []
        self._lock = threading.Lock()

    def complete(self, transcript, tools=(), tool_choice="auto"):
        with self._lock:
            self.calls.append({
                "transcript": transcript.copy(),
                "tools": [t.name for t in tools],
                "tool_choice": tool_choice,
            })

            if not self.script:
                raise AssertionError("ScriptedProvider ran out of responses")

            item = self.script[0] if (self.repeat_last and len(self.script) == 1) else self.script.pop(0)

        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item()
        return item


def text(content):
    return Completion(text=content)


def call(tool_name, arguments=None, id=None, content=None):
    """Completion carrying one tool request."""
    return calls([(tool_name, arguments, id)], content=content)


def calls(specs, content=None):
    requests = []
    for i, (tool_name, arguments, id) in enumerate(specs):
        raw = arguments if isinstance(arguments, str) else json.dumps(arguments or {})
        requests.append(ToolRequest(tool_name=tool_name, arguments=raw, id=id or f"call_{i}"))
    return Completion(text=content, tool_requests=requests)


# ------------------------------------------------------------------
# Embedder
# ------------------------------------------------------------------

class HashingEmbedder(Embedder):
    """
    Deterministic bag-of-words embedder: each lowercase word adds 1 to a
    bucket chosen by its md5 hash.
    """

    def __init__(self, dimensions=64):
        super().__init__("hashing", dimensions)
        self.calls = 0
        self.fail = False

    def _embed(self, texts):
        self.calls += 1
        if self.fail:
            raise EmbeddingError("embedding backend down", status_code=503)

        vectors = []
        for text in texts:
            vec = np.zeros(self.dimensions)
            for word in re.findall(r"[a-z0-9]+", text.lower()):
                bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % self.dimensions
                vec[bucket] += 1.0
            vectors.append(vec.tolist())
        return vectors


def word_count(text):
    return len(text.split())


