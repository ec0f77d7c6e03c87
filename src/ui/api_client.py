"""HTTP backend for the chat session.

Implements the session's ModelBackend protocol against the FastAPI server:
SSE for streamed text, JSON for images.
"""

import logging
import os
import uuid

import httpx

from src.models.schemas import ImageResponse, StreamChunk
from src.session.backend import ChunkCallback

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


class ModelConnectionError(Exception):
    """Raised when the model API cannot be reached or reports a failure."""

    pass


class ApiModelClient:
    """Model backend that talks to the chat API over HTTP.

    Args:
        base_url: Root URL of the API server.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (ASGI or mock transports in tests).
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self.session_id: str = str(uuid.uuid4())

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def stream_text(self, prompt: str, on_chunk: ChunkCallback) -> None:
        """Consume the SSE stream from /chat/stream.

        Raises:
            ModelConnectionError: On HTTP or transport errors, an error frame,
                or a stream that closes before its final frame.
        """
        async with self._client() as client:
            try:
                async with client.stream(
                    "POST",
                    "/chat/stream",
                    json={"message": prompt, "session_id": self.session_id},
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        if not line.startswith("data: "):
                            continue
                        chunk = StreamChunk.model_validate_json(line[6:])
                        if chunk.error:
                            raise ModelConnectionError(chunk.error)
                        if chunk.done:
                            return
                        if chunk.content:
                            on_chunk(chunk.content)
            except httpx.HTTPStatusError as e:
                raise ModelConnectionError(f"HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ModelConnectionError(f"Connection failed: {e}") from e

        raise ModelConnectionError("Stream ended before completion")

    async def generate_image(self, prompt: str) -> str | None:
        """Request an image from /images/generate.

        Returns:
            The image data URI, or None if the model produced nothing.

        Raises:
            ModelConnectionError: On HTTP or transport errors.
        """
        async with self._client() as client:
            try:
                response = await client.post("/images/generate", json={"prompt": prompt})
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ModelConnectionError(f"HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ModelConnectionError(f"Connection failed: {e}") from e

        return ImageResponse.model_validate_json(response.content).image

    def reset_conversation(self) -> None:
        """Switch to a new session id so server-side history is left behind."""
        self.session_id = str(uuid.uuid4())
        logger.info(f"Started new conversation {self.session_id[:8]}")
