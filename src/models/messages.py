"""Conversation message records.

Messages are frozen. Updates produce new records through ``model_copy`` so a
snapshot handed to the UI never changes underneath it.
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker of a message."""

    USER = "user"
    MODEL = "model"


def new_message_id() -> str:
    """Generate an opaque, unique message identifier."""
    return uuid.uuid4().hex


class Message(BaseModel):
    """A single entry in the conversation timeline.

    Attributes:
        id: Opaque identifier, stable for the lifetime of the record.
        role: Who produced the message.
        text: Message content. Grows while a streamed reply is in flight.
        timestamp: Creation time.
        image: Encoded image payload (data URI) for generated images.
        is_error: Whether ``text`` holds a user-facing error message.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_message_id)
    role: Role
    text: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    image: str | None = None
    is_error: bool = False
