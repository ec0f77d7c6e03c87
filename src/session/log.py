"""Ordered, append-only message log.

The log is the single source of truth for what the timeline shows. It is an
immutable value: appending returns a new log and leaves the old one intact.
"""

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, model_validator

from src.models.messages import Message, Role


class MessageLog(BaseModel):
    """Immutable, chronologically ordered sequence of messages.

    Attributes:
        messages: Messages in submission/response order.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()

    @model_validator(mode="after")
    def check_unique_ids(self) -> "MessageLog":
        """Reject logs in which two entries share an id."""
        ids = [message.id for message in self.messages]
        if len(ids) != len(set(ids)):
            raise ValueError("Message ids must be unique within a log")
        return self

    @classmethod
    def seeded(cls, text: str) -> "MessageLog":
        """Create a log holding a single model message.

        Args:
            text: Content of the seed message (greeting or reset notice).

        Returns:
            A new log with exactly one MODEL entry.
        """
        return cls(messages=(Message(role=Role.MODEL, text=text),))

    def append(self, message: Message) -> "MessageLog":
        """Return a new log with ``message`` added at the end."""
        return MessageLog(messages=(*self.messages, message))

    @property
    def last(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    def __iter__(self) -> Iterator[Message]:  # type: ignore[override]
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def __getitem__(self, index: int) -> Message:
        return self.messages[index]
