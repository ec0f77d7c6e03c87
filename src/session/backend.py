"""Contract for the remote model the session talks to."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

ChunkCallback = Callable[[str], None]


@runtime_checkable
class ModelBackend(Protocol):
    """Structural interface for the remote generative model.

    Implementations own transport details, timeouts and conversation storage.
    Failures are reported by raising; the session turns them into messages.
    """

    async def stream_text(self, prompt: str, on_chunk: ChunkCallback) -> None:
        """Stream a text reply, calling ``on_chunk`` for each fragment in order."""
        ...

    async def generate_image(self, prompt: str) -> str | None:
        """Return an encoded image (data URI), or None when nothing was produced."""
        ...

    def reset_conversation(self) -> None:
        """Discard any server-held conversation context."""
        ...
