"""Pydantic models for conversation records and API payloads.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Message: Individual entry in the conversation timeline
    - ChatRequest: Incoming streaming chat request payload
    - StreamChunk: One SSE frame of a streamed reply
    - ImageRequest / ImageResponse: Image generation payloads
"""

from src.models.messages import Message, Role, new_message_id
from src.models.schemas import (
    ChatRequest,
    ImageRequest,
    ImageResponse,
    StreamChunk,
    StreamStatus,
)

__all__ = [
    "ChatRequest",
    "ImageRequest",
    "ImageResponse",
    "Message",
    "Role",
    "StreamChunk",
    "StreamStatus",
    "new_message_id",
]
