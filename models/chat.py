# models/chat.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from core.mood import Mood


GREETING = (
    "Hello! I'm your FinCoach. I can help you track expenses, "
    "set goals, or analyze your spending."
)


class ChatMessage(BaseModel):
    """One transcript entry. Frozen: the transcript is append-only."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="What was said")
    isUser: bool = Field(False, description="True for the user's own messages")
    mood: Optional[Mood] = Field(None, description="Mood tag shown next to the message")
    xpGained: Optional[int] = Field(None, ge=0, description="XP awarded by this message")

    @classmethod
    def from_user(cls, text: str, mood: Mood) -> "ChatMessage":
        return cls(text=text, isUser=True, mood=mood)

    @classmethod
    def from_assistant(cls, text: str, mood: Optional[Mood] = None) -> "ChatMessage":
        return cls(text=text, isUser=False, mood=mood)
