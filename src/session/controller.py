"""Session controller: turns user submissions into timeline transitions.

The controller is the only writer of the session. A submission appends the
user's message, creates a model placeholder, dispatches to the backend and
routes streamed chunks, the final image, or a failure into that placeholder.

States per request::

    IDLE --submit--> AWAITING_RESPONSE --success | empty | error--> IDLE

``is_loading`` gates submissions so at most one request is in flight. All log
updates between awaits are synchronous, so no other submission can interleave
with them on the event loop.
"""

import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from src.models.messages import Message, Role, new_message_id
from src.session.backend import ModelBackend
from src.session.config import ChatCopy
from src.session.intent import IntentRules, RequestMode, classify_intent
from src.session.log import MessageLog
from src.session.sink import MessagePatch, reconcile

logger = logging.getLogger(__name__)

StateListener = Callable[["SessionState"], None]


class SessionState(BaseModel):
    """Read-only snapshot of the conversation.

    Attributes:
        messages: The ordered message log.
        is_loading: Whether a request is in flight.
    """

    model_config = ConfigDict(frozen=True)

    messages: MessageLog = Field(default_factory=MessageLog)
    is_loading: bool = False


class ChunkAccumulator:
    """Fold of streamed chunks, in arrival order, into the full reply text."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def add(self, chunk: str) -> str:
        """Add a chunk and return the text accumulated so far."""
        self._parts.append(chunk)
        return self.text

    @property
    def text(self) -> str:
        return "".join(self._parts)


class _Request:
    """Bookkeeping for one in-flight submission."""

    def __init__(self, prompt: str, mode: RequestMode) -> None:
        self.prompt = prompt
        self.mode = mode
        # Id of the only entry this request may update. Moves to a fresh
        # entry if the original placeholder was reset away.
        self.target_id = new_message_id()


class SessionController:
    """Orchestrates a single linear conversation against a model backend.

    Args:
        backend: Remote model capabilities (text stream, image, reset).
        copy: User-facing texts. Defaults to ChatCopy().
        rules: Image-request heuristics. Defaults to IntentRules().
    """

    def __init__(
        self,
        backend: ModelBackend,
        copy: ChatCopy | None = None,
        rules: IntentRules | None = None,
    ) -> None:
        self._backend = backend
        self._copy = copy or ChatCopy()
        self._rules = rules or IntentRules()
        self._state = SessionState(messages=MessageLog.seeded(self._copy.greeting))
        self._listeners: list[StateListener] = []
        self._active: _Request | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with the new state after each transition.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def can_submit(self, text: str) -> bool:
        """Whether ``text`` would be accepted right now."""
        return bool(text.strip()) and not self._state.is_loading

    async def submit(self, text: str) -> bool:
        """Send user text to the model and merge the reply into the log.

        Empty input and submissions while a request is in flight are ignored.
        Remote failures never propagate; they become an error message.

        Args:
            text: Raw user input.

        Returns:
            True if the submission was accepted and has been handled, False if
            it was rejected without any state change.
        """
        if not self.can_submit(text):
            return False

        prompt = text.strip()
        request = _Request(prompt, classify_intent(prompt, self._rules))
        self._active = request
        logger.info(f"Dispatching {request.mode.value} request ({len(prompt)} chars)")

        try:
            self._commit(
                messages=self._state.messages.append(Message(role=Role.USER, text=prompt)),
                is_loading=True,
            )
            if request.mode is RequestMode.IMAGE:
                await self._run_image(request)
            else:
                await self._run_text(request)
        except Exception as e:
            logger.error(f"Model request failed: {e}")
            self._apply(
                request,
                MessagePatch(text=self._copy.connection_error, is_error=True),
            )
        finally:
            self._release(request)

        return True

    def reset(self) -> None:
        """Start over with a fresh log and no server-side context.

        Allowed at any time. A request still in flight is not cancelled; its
        late results are appended after the reset notice.
        """
        self._backend.reset_conversation()
        self._active = None
        self._commit(messages=MessageLog.seeded(self._copy.reset_notice), is_loading=False)
        logger.info("Session reset")

    async def _run_image(self, request: _Request) -> None:
        self._append_placeholder(request, self._copy.image_pending)

        image = await self._backend.generate_image(request.prompt)

        if image:
            patch = MessagePatch(text=self._copy.caption_for(request.prompt), image=image)
        else:
            logger.warning("Image generation returned no image")
            patch = MessagePatch(text=self._copy.image_missing)
        self._apply(request, patch)

    async def _run_text(self, request: _Request) -> None:
        self._append_placeholder(request, "")
        accumulator = ChunkAccumulator()

        def on_chunk(chunk: str) -> None:
            self._apply(request, MessagePatch(text=accumulator.add(chunk)))

        await self._backend.stream_text(request.prompt, on_chunk)

    def _append_placeholder(self, request: _Request, text: str) -> None:
        placeholder = Message(id=request.target_id, role=Role.MODEL, text=text)
        self._commit(messages=self._state.messages.append(placeholder))

    def _apply(self, request: _Request, patch: MessagePatch) -> None:
        messages, request.target_id = reconcile(
            self._state.messages, request.target_id, patch
        )
        self._commit(messages=messages)

    def _release(self, request: _Request) -> None:
        # A reset may already have released the gate and a newer request
        # may own it now.
        if self._active is request:
            self._active = None
            self._commit(is_loading=False)

    def _commit(
        self,
        messages: MessageLog | None = None,
        is_loading: bool | None = None,
    ) -> None:
        update: dict[str, object] = {}
        if messages is not None:
            update["messages"] = messages
        if is_loading is not None:
            update["is_loading"] = is_loading
        self._state = self._state.model_copy(update=update)
        for listener in list(self._listeners):
            # Listener failures are logged and never reach the caller.
            try:
                listener(self._state)
            except Exception:
                logger.exception("Session listener failed")
