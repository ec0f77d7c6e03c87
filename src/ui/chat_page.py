"""NiceGUI chat interface driven by the session controller."""

import os
from collections.abc import Awaitable, Callable

from nicegui import ui

from src.models.messages import Message, Role
from src.session.controller import SessionController, SessionState
from src.ui.api_client import API_BASE_URL, ApiModelClient

# A rendered bubble: the message record and whether a reply streams into it.
RenderKey = tuple[Message, bool]

SUBMIT_ON_ENTER_JS = "(e) => { if (!e.shiftKey) { e.preventDefault(); emit(); } }"

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #000; min-height: 100vh; }

    .app-container {
        background: #000;
        border-left: 1px solid #18181b;
        border-right: 1px solid #18181b;
    }

    .header { border-bottom: 1px solid #18181b; background: rgba(0, 0, 0, 0.8); }

    .message-user {
        background: #27272a;
        color: #fafafa;
        border-radius: 18px 18px 4px 18px;
    }

    .message-model {
        background: transparent;
        color: #e4e4e7;
        border: 1px solid #27272a;
        border-radius: 18px 18px 18px 4px;
    }

    .message-error {
        color: #fca5a5;
        border-color: #7f1d1d;
    }

    .typing-dot {
        width: 6px; height: 6px;
        background: #a1a1aa;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: rgba(24, 24, 27, 0.5);
        border: 1px solid #27272a;
        border-radius: 12px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #52525b; }

    .message-model pre { margin: 0.5rem 0; }
    .message-model code { font-family: 'Menlo', 'Monaco', monospace; }
</style>
"""


def render_typing_dots() -> None:
    with ui.row().classes("gap-1 py-1"):
        for _ in range(3):
            ui.element("div").classes("typing-dot")


def first_stale_index(rendered: list[RenderKey], wanted: list[RenderKey]) -> int:
    """Index of the first bubble that has to be rebuilt.

    Messages are immutable, so an entry whose record is the same object and
    whose in-flight flag is unchanged still shows the right content.
    """
    for index, (old, new) in enumerate(zip(rendered, wanted)):
        if old[0] is not new[0] or old[1] != new[1]:
            return index
    return min(len(rendered), len(wanted))


def render_keys(state: SessionState) -> list[RenderKey]:
    last = state.messages.last
    return [(message, state.is_loading and message is last) for message in state.messages]


def bind_submit_on_enter(field: ui.textarea, handler: Callable[[], Awaitable[None]]) -> None:
    """Submit on Enter; Shift+Enter inserts a newline."""
    field.on("keydown.enter", handler, js_handler=SUBMIT_ON_ENTER_JS)


def render_message(message: Message, in_flight: bool) -> ui.row:
    """Render one timeline entry.

    Args:
        message: The entry to render.
        in_flight: Whether a reply is still streaming into this entry.

    Returns:
        The row holding the bubble.
    """
    is_user = message.role is Role.USER
    align = "justify-end" if is_user else "justify-start"
    bubble = "message-user" if is_user else "message-model"
    if message.is_error:
        bubble += " message-error"

    with ui.row().classes(f"w-full {align}") as row:
        with ui.column().classes("max-w-[80%] gap-1"):
            with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                if is_user:
                    ui.label(message.text).classes("text-sm whitespace-pre-wrap")
                elif not message.text and in_flight:
                    render_typing_dots()
                else:
                    ui.markdown(message.text).classes("text-sm leading-relaxed")
                if message.image:
                    ui.image(message.image).classes("w-full rounded-lg mt-2")
            ui.label(message.timestamp.strftime("%I:%M %p")).classes(
                f"text-[10px] text-zinc-600 {'self-end' if is_user else 'self-start'}"
            )
    return row


@ui.page("/")
def chat_page() -> None:
    """Main chat page.

    One controller per page visit. The page only renders snapshots and
    forwards input; every state change goes through the controller.
    """
    ui.add_head_html(CUSTOM_CSS)
    controller = SessionController(ApiModelClient(base_url=API_BASE_URL))

    messages_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button

    rendered: list[RenderKey] = []
    rows: list[ui.row] = []

    def refresh(state: SessionState) -> None:
        # While streaming only the reply bubble changes; earlier rows stay.
        wanted = render_keys(state)
        start = first_stale_index(rendered, wanted)
        for row in rows[start:]:
            row.delete()
        del rows[start:]
        del rendered[start:]
        with messages_container:
            for message, in_flight in wanted[start:]:
                rows.append(render_message(message, in_flight))
                rendered.append((message, in_flight))
        if state.is_loading:
            send_btn.disable()
            input_field.disable()
        else:
            send_btn.enable()
            input_field.enable()

    async def send_message() -> None:
        text = input_field.value or ""
        if not controller.can_submit(text):
            return
        input_field.value = ""
        await controller.submit(text)

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container gap-0").style(
            "height: 100vh"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-6 h-14 items-center justify-between"):
            ui.label("Studio Chat").classes("text-sm font-medium text-white")
            ui.button("Reset", on_click=controller.reset).props(
                "flat dense no-caps color=grey-6"
            ).classes("text-xs")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full"),
            ui.column().classes("w-full p-4 md:p-6"),
        ):
            messages_container = ui.column().classes("w-full gap-6")

        # Input
        with ui.row().classes("w-full p-4 md:p-6 gap-3 items-end"):
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.textarea(placeholder="Ask anything, or 'draw a cat'...")
                    .props("autogrow borderless dense dark rows=1")
                    .classes("w-full")
                )
                bind_submit_on_enter(input_field, send_message)
            send_btn = ui.button(icon="send", on_click=send_message).props(
                "round unelevated color=white text-color=black"
            )
        ui.label("AI can make mistakes. Please verify important information.").classes(
            "w-full text-center text-[10px] text-zinc-600 pb-3"
        )

    controller.subscribe(refresh)
    refresh(controller.state)


def main() -> None:
    ui.run(title="Studio Chat", port=int(os.getenv("UI_PORT", "8080")), reload=False, dark=True)


if __name__ == "__main__":
    main()
