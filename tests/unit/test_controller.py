"""Unit tests for the SessionController state machine.

The remote model is a scripted FakeBackend; gated backends hold a request in
flight so tests can act while it is outstanding.
"""

import asyncio

import pytest
import pytest_check as check

from src.models.messages import Role
from src.session.config import ChatCopy
from src.session.controller import ChunkAccumulator, SessionController, SessionState
from tests.fakes import IMAGE_PAYLOAD, FakeBackend

COPY = ChatCopy()


async def _start(controller: SessionController, text: str) -> asyncio.Task[bool]:
    """Submit in the background and let it run up to the backend call."""
    task = asyncio.create_task(controller.submit(text))
    await asyncio.sleep(0)
    return task


class TestInitialState:
    """Tests for a fresh session."""

    def test_seeded_with_greeting(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)

        assert len(controller.state.messages) == 1
        check.equal(controller.state.messages[0].role, Role.MODEL)
        check.equal(controller.state.messages[0].text, COPY.greeting)
        check.is_false(controller.state.is_loading)

    def test_custom_greeting(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend, copy=ChatCopy(greeting="Selamat datang"))

        assert controller.state.messages[0].text == "Selamat datang"


class TestRejectedSubmissions:
    """Empty and busy submissions leave the session untouched."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    async def test_empty_input_is_noop(self, fake_backend: FakeBackend, text: str) -> None:
        controller = SessionController(fake_backend)
        before = controller.state

        accepted = await controller.submit(text)

        check.is_false(accepted)
        check.equal(controller.state, before)
        check.equal(fake_backend.text_prompts, [])

    async def test_submit_while_loading_is_noop(self) -> None:
        gate = asyncio.Event()
        backend = FakeBackend(chunks=("ok",), gate=gate)
        controller = SessionController(backend)

        first = await _start(controller, "first")
        before = controller.state
        accepted = await controller.submit("second")

        check.is_true(before.is_loading)
        check.is_false(accepted)
        check.equal(controller.state, before)
        check.equal(backend.text_prompts, ["first"])

        gate.set()
        assert await first is True

    async def test_can_submit(self) -> None:
        gate = asyncio.Event()
        controller = SessionController(FakeBackend(gate=gate))

        check.is_true(controller.can_submit("hello"))
        check.is_false(controller.can_submit("  "))

        task = await _start(controller, "hello")
        check.is_false(controller.can_submit("again"))

        gate.set()
        await task
        check.is_true(controller.can_submit("again"))


class TestTextMode:
    """Streaming replies merged into the placeholder."""

    async def test_hi_scenario(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)

        accepted = await controller.submit("Hi")
        messages = list(controller.state.messages)

        check.is_true(accepted)
        check.equal(len(messages), 3)
        check.equal(messages[1].role, Role.USER)
        check.equal(messages[1].text, "Hi")
        check.equal(messages[2].role, Role.MODEL)
        check.equal(messages[2].text, "Hi there!")
        check.is_false(controller.state.is_loading)

    async def test_chunks_accumulate_in_order(self) -> None:
        backend = FakeBackend(chunks=("Hel", "lo"))
        controller = SessionController(backend)

        await controller.submit("greet me")

        assert controller.state.messages.last.text == "Hello"

    async def test_input_is_trimmed(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)

        await controller.submit("   Hi  \n")

        check.equal(controller.state.messages[1].text, "Hi")
        check.equal(fake_backend.text_prompts, ["Hi"])

    async def test_each_chunk_shows_full_text_so_far(self) -> None:
        backend = FakeBackend(chunks=("a", "b", "c"))
        controller = SessionController(backend)
        seen: list[str] = []

        def on_change(state: SessionState) -> None:
            last = state.messages.last
            if last.role is Role.MODEL and len(state.messages) == 3:
                seen.append(last.text)

        controller.subscribe(on_change)
        await controller.submit("letters")

        # Placeholder, three chunks, then the loading flag release.
        assert seen == ["", "a", "ab", "abc", "abc"]

    async def test_empty_stream_leaves_empty_reply(self) -> None:
        controller = SessionController(FakeBackend(chunks=()))

        await controller.submit("say nothing")

        check.equal(len(controller.state.messages), 3)
        check.equal(controller.state.messages.last.text, "")
        check.is_false(controller.state.messages.last.is_error)

    async def test_one_model_message_per_request(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)

        await controller.submit("one")
        await controller.submit("two")

        roles = [message.role for message in controller.state.messages]
        assert roles == [Role.MODEL, Role.USER, Role.MODEL, Role.USER, Role.MODEL]


class TestImageMode:
    """Image requests end in a single terminal update."""

    async def test_draw_a_cat_scenario(self) -> None:
        backend = FakeBackend(image=IMAGE_PAYLOAD)
        controller = SessionController(backend)

        await controller.submit("draw a cat")
        reply = controller.state.messages.last

        check.equal(backend.image_prompts, ["draw a cat"])
        check.equal(backend.text_prompts, [])
        check.is_in("draw a cat", reply.text)
        check.equal(reply.image, IMAGE_PAYLOAD)
        check.is_false(controller.state.is_loading)

    async def test_placeholder_shows_pending_text(self) -> None:
        gate = asyncio.Event()
        controller = SessionController(FakeBackend(image=IMAGE_PAYLOAD, gate=gate))

        task = await _start(controller, "draw a cat")
        pending = controller.state.messages.last

        check.equal(pending.role, Role.MODEL)
        check.equal(pending.text, COPY.image_pending)
        check.is_none(pending.image)

        gate.set()
        await task
        check.equal(controller.state.messages.last.id, pending.id)

    @pytest.mark.parametrize("payload", [None, ""])
    async def test_empty_image_is_not_an_error(self, payload: str | None) -> None:
        controller = SessionController(FakeBackend(image=payload))

        await controller.submit("draw nothing")
        reply = controller.state.messages.last

        check.equal(reply.text, COPY.image_missing)
        check.is_none(reply.image)
        check.is_false(reply.is_error)
        check.is_false(controller.state.is_loading)

    async def test_indonesian_request(self) -> None:
        backend = FakeBackend(image=IMAGE_PAYLOAD)
        controller = SessionController(backend)

        await controller.submit("Buatkan gambar kucing")

        assert backend.image_prompts == ["Buatkan gambar kucing"]


class TestFailures:
    """Remote failures become error messages and release the gate."""

    async def test_stream_failure_marks_placeholder(self) -> None:
        backend = FakeBackend(error=ConnectionError("socket closed: 10.0.0.5"))
        controller = SessionController(backend)

        accepted = await controller.submit("hello")
        reply = controller.state.messages.last

        check.is_true(accepted)
        check.equal(len(controller.state.messages), 3)
        check.is_true(reply.is_error)
        check.equal(reply.text, COPY.connection_error)
        check.is_false(controller.state.is_loading)

    async def test_error_text_hides_details(self) -> None:
        controller = SessionController(FakeBackend(error=RuntimeError("secret-token-123")))

        await controller.submit("hello")

        assert "secret-token-123" not in controller.state.messages.last.text

    async def test_failure_after_partial_stream_replaces_text(self) -> None:
        backend = FakeBackend(chunks=("Partial",), error=TimeoutError())
        controller = SessionController(backend)

        await controller.submit("hello")

        check.equal(controller.state.messages.last.text, COPY.connection_error)
        check.is_true(controller.state.messages.last.is_error)

    async def test_image_failure_marks_placeholder(self) -> None:
        controller = SessionController(FakeBackend(error=RuntimeError("quota")))

        await controller.submit("draw a cat")
        reply = controller.state.messages.last

        check.is_true(reply.is_error)
        check.is_none(reply.image)
        check.equal(len(controller.state.messages), 3)

    async def test_can_resubmit_after_failure(self) -> None:
        backend = FakeBackend(error=RuntimeError("down"))
        controller = SessionController(backend)
        await controller.submit("hello")

        backend.error = None
        backend.chunks = ("back online",)
        await controller.submit("hello again")

        assert controller.state.messages.last.text == "back online"


class TestReset:
    """Reset clears the log, the gate and the remote context."""

    async def test_reset_after_conversation(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)
        await controller.submit("Hi")

        controller.reset()

        check.equal(len(controller.state.messages), 1)
        check.equal(controller.state.messages[0].role, Role.MODEL)
        check.equal(controller.state.messages[0].text, COPY.reset_notice)
        check.is_false(controller.state.is_loading)
        check.equal(fake_backend.reset_calls, 1)

    def test_reset_when_idle(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)

        controller.reset()

        check.equal([m.text for m in controller.state.messages], [COPY.reset_notice])
        check.equal(fake_backend.reset_calls, 1)

    async def test_reset_during_stream_appends_late_reply(self) -> None:
        gate = asyncio.Event()
        backend = FakeBackend(chunks=("late", " reply"), gate=gate)
        controller = SessionController(backend)
        task = await _start(controller, "Hi")

        controller.reset()
        check.is_false(controller.state.is_loading)
        check.equal(len(controller.state.messages), 1)

        gate.set()
        await task
        messages = list(controller.state.messages)

        # Every late chunk lands in the same fresh entry.
        check.equal(len(messages), 2)
        check.equal(messages[0].text, COPY.reset_notice)
        check.equal(messages[1].role, Role.MODEL)
        check.equal(messages[1].text, "late reply")
        check.is_false(controller.state.is_loading)

    async def test_reset_during_failing_request_appends_error(self) -> None:
        gate = asyncio.Event()
        backend = FakeBackend(error=RuntimeError("down"), gate=gate)
        controller = SessionController(backend)
        task = await _start(controller, "Hi")

        controller.reset()
        gate.set()
        await task
        messages = list(controller.state.messages)

        check.equal(len(messages), 2)
        check.is_true(messages[1].is_error)
        check.equal(messages[1].text, COPY.connection_error)

    async def test_stale_request_does_not_release_newer_one(self) -> None:
        backend = FakeBackend(chunks=("ok",))
        controller = SessionController(backend)

        first_gate = asyncio.Event()
        backend.gate = first_gate
        first = await _start(controller, "first")
        controller.reset()

        second_gate = asyncio.Event()
        backend.gate = second_gate
        second = await _start(controller, "second")

        first_gate.set()
        await first
        check.is_true(controller.state.is_loading)

        second_gate.set()
        await second
        check.is_false(controller.state.is_loading)


class TestSubscriptions:
    """Listeners see a snapshot after every transition."""

    async def test_listener_sees_user_message_first(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)
        states: list[SessionState] = []
        controller.subscribe(states.append)

        await controller.submit("Hi")

        check.equal(states[0].messages.last.role, Role.USER)
        check.is_true(states[0].is_loading)
        check.is_false(states[-1].is_loading)

    async def test_snapshots_are_independent(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)
        states: list[SessionState] = []
        controller.subscribe(states.append)

        await controller.submit("Hi")

        # The placeholder snapshot still shows the empty reply.
        assert states[1].messages.last.text == ""

    async def test_failing_listener_does_not_block_session(
        self, fake_backend: FakeBackend
    ) -> None:
        """A listener that raises on the first transition leaves the gate usable."""
        controller = SessionController(fake_backend)
        calls = 0

        def flaky(state: SessionState) -> None:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("client disconnected")

        controller.subscribe(flaky)

        check.is_true(await controller.submit("Hi"))
        check.is_false(controller.state.is_loading)
        check.is_true(await controller.submit("again"))
        check.is_false(controller.state.is_loading)
        check.equal(controller.state.messages.last.text, "Hi there!")

    async def test_failing_listener_does_not_starve_others(
        self, fake_backend: FakeBackend
    ) -> None:
        controller = SessionController(fake_backend)
        states: list[SessionState] = []

        def broken(state: SessionState) -> None:
            raise RuntimeError("render failed")

        controller.subscribe(broken)
        controller.subscribe(states.append)

        await controller.submit("Hi")

        check.is_false(states[-1].is_loading)
        check.equal(states[-1].messages.last.text, "Hi there!")
        check.is_false(states[-1].messages.last.is_error)

    async def test_unsubscribe(self, fake_backend: FakeBackend) -> None:
        controller = SessionController(fake_backend)
        states: list[SessionState] = []
        unsubscribe = controller.subscribe(states.append)

        unsubscribe()
        await controller.submit("Hi")

        assert states == []


class TestChunkAccumulator:
    """The accumulator returns the full text after each chunk."""

    def test_accumulates(self) -> None:
        accumulator = ChunkAccumulator()

        check.equal(accumulator.add("Hel"), "Hel")
        check.equal(accumulator.add("lo"), "Hello")
        check.equal(accumulator.text, "Hello")

    def test_starts_empty(self) -> None:
        assert ChunkAccumulator().text == ""
