"""Request intent classification.

Decides whether a submission asks for an image or a text reply. Matching is a
plain prefix/phrase heuristic over casefolded text, covering English and
Indonesian phrasings ("draw a cat", "buatkan gambar kucing").
"""

from enum import Enum

from pydantic import BaseModel, Field


class RequestMode(str, Enum):
    """How a submission is dispatched to the model."""

    IMAGE = "image"
    TEXT = "text"


class IntentRules(BaseModel):
    """Configured phrasings that mark an image request.

    Attributes:
        prefixes: Text starting with any of these is an image request.
        phrases: Text containing any of these anywhere is an image request.
    """

    prefixes: tuple[str, ...] = Field(
        default=(
            "draw ",
            "create image",
            "generate image",
            "gambar",
            "buatkan gambar",
        ),
        description="Leading phrasings that request an image",
    )
    phrases: tuple[str, ...] = Field(
        default=("buat gambar",),
        description="Embedded phrasings that request an image",
    )


DEFAULT_RULES = IntentRules()


def classify_intent(text: str, rules: IntentRules | None = None) -> RequestMode:
    """Classify user text as an image or text request.

    Args:
        text: The user's submission. Callers reject empty input beforehand.
        rules: Prefixes and phrases to match. Defaults to DEFAULT_RULES.

    Returns:
        RequestMode.IMAGE if the text matches a rule, else RequestMode.TEXT.
    """
    rules = rules or DEFAULT_RULES
    folded = text.strip().casefold()

    if any(folded.startswith(prefix.casefold()) for prefix in rules.prefixes):
        return RequestMode.IMAGE
    if any(phrase.casefold() in folded for phrase in rules.phrases):
        return RequestMode.IMAGE
    return RequestMode.TEXT
