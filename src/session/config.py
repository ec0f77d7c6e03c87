"""User-facing copy used by the session controller."""

from pydantic import BaseModel, Field


class ChatCopy(BaseModel):
    """Fixed texts the controller writes into the timeline.

    Attributes:
        greeting: Seed message of a fresh session.
        reset_notice: Seed message after the user resets the session.
        image_pending: Placeholder text while an image is generated.
        image_caption: Caption for a generated image. ``{prompt}`` is replaced
            with the user's text.
        image_missing: Shown when the model produced no image.
        connection_error: Shown for any remote failure.
    """

    greeting: str = Field(
        default=(
            "Hello. I can help you chat or generate images. "
            "Try asking: 'Explain how vector search works' or 'Draw a neon cat'."
        ),
    )
    reset_notice: str = "Session cleared. Ready for a new topic."
    image_pending: str = "Generating image..."
    image_caption: str = 'Here is your image for: "{prompt}"'
    image_missing: str = "I couldn't generate an image for that prompt. Please try again."
    connection_error: str = "An error occurred connecting to the model. Please try again."

    def caption_for(self, prompt: str) -> str:
        return self.image_caption.format(prompt=prompt)
