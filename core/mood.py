# core/mood.py
from enum import Enum
from typing import Optional


class Mood(str, Enum):
    MOTIVATIONAL = "motivational"
    STRESSED = "stressed"
    CELEBRATORY = "celebratory"
    NEUTRAL = "neutral"

    @classmethod
    def from_profile(cls, value: Optional[str]) -> Optional["Mood"]:
        """
        Maps a profile moodState ("STRESSED", "Celebratory", ...) onto the
        closed enumeration. Unknown or empty values give None.
        """
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


DEFAULT_MOOD = Mood.MOTIVATIONAL
