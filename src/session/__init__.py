"""Conversation session core.

Owns the message timeline and the rules for how a user submission becomes a
sequence of log transitions.

Responsibilities:
    - Append-only message log with identity-addressed updates
    - Image vs text intent classification
    - Merging streamed chunks, images and failures into placeholders
    - In-flight gating and session reset

Knows nothing about HTTP or rendering. The remote model is reached through
the ModelBackend protocol.
"""

from src.session.backend import ModelBackend
from src.session.config import ChatCopy
from src.session.controller import ChunkAccumulator, SessionController, SessionState
from src.session.intent import IntentRules, RequestMode, classify_intent
from src.session.log import MessageLog
from src.session.sink import Found, MessagePatch, NotFound, lookup, mutate, reconcile

__all__ = [
    "ChatCopy",
    "ChunkAccumulator",
    "Found",
    "IntentRules",
    "MessageLog",
    "MessagePatch",
    "ModelBackend",
    "NotFound",
    "RequestMode",
    "SessionController",
    "SessionState",
    "classify_intent",
    "lookup",
    "mutate",
    "reconcile",
]
