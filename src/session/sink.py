"""Merging asynchronous results into log entries by identity.

A request only ever touches the entry it created, addressed by id. Every merge
yields a new log, so earlier snapshots stay valid.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from src.models.messages import Message, Role
from src.session.log import MessageLog


class MessagePatch(BaseModel):
    """Field updates for an existing message.

    Only ``text``, ``image`` and ``is_error`` can change. Unset fields are
    left as they are.
    """

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    image: str | None = None
    is_error: bool | None = None

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True)
class Found:
    """Lookup hit: the entry and its position in the log."""

    message: Message
    index: int


@dataclass(frozen=True)
class NotFound:
    """Lookup miss for ``message_id``."""

    message_id: str


LookupResult = Found | NotFound


def lookup(log: MessageLog, message_id: str) -> LookupResult:
    """Locate a message by id."""
    for index, message in enumerate(log):
        if message.id == message_id:
            return Found(message=message, index=index)
    return NotFound(message_id=message_id)


def mutate(log: MessageLog, target_id: str, patch: MessagePatch) -> MessageLog:
    """Apply a patch to the entry with ``target_id``.

    Args:
        log: Current log. Never modified.
        target_id: Id of the entry to update.
        patch: Fields to merge into the entry.

    Returns:
        A new log with the entry replaced, or ``log`` itself when no entry has
        that id. Appending a replacement is up to the caller (see reconcile).
    """
    match lookup(log, target_id):
        case Found(message=message, index=index):
            updated = message.model_copy(update=patch.changes())
            messages = (*log.messages[:index], updated, *log.messages[index + 1 :])
            return MessageLog(messages=messages)
        case NotFound():
            return log


def reconcile(
    log: MessageLog, target_id: str, patch: MessagePatch
) -> tuple[MessageLog, str]:
    """Apply a patch, appending a new model entry if the target is gone.

    The target disappears when the session was reset while its request was
    still in flight.

    Returns:
        The new log and the id of the entry now carrying the patched content.
    """
    match lookup(log, target_id):
        case Found():
            return mutate(log, target_id, patch), target_id
        case NotFound():
            replacement = Message(role=Role.MODEL, **patch.changes())
            return log.append(replacement), replacement.id
