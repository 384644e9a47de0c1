# models/voice.py
from dataclasses import dataclass
from enum import Enum
from typing import Union


class VoiceState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    DENIED = "denied"


# Error codes after which the engine must not be recreated
FATAL_ERROR_CODES = frozenset({"not-allowed", "service-not-allowed"})


@dataclass(frozen=True)
class PartialTranscript:
    """
    Result segment `index` of the current engine run.
    Interim results re-use the index of the segment they refine.
    """

    index: int
    text: str


@dataclass(frozen=True)
class EngineError:
    code: str
    message: str = ""

    @property
    def is_fatal(self) -> bool:
        return self.code in FATAL_ERROR_CODES


@dataclass(frozen=True)
class SessionEnded:
    """The engine stopped on its own (silence timeout, network blip...)."""


VoiceEvent = Union[PartialTranscript, EngineError, SessionEnded]
