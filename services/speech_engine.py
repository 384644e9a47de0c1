# services/speech_engine.py
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from models.voice import VoiceEvent

# Where an engine instance delivers its events
EventSink = Callable[[VoiceEvent], Awaitable[None]]

# Builds one engine instance bound to a sink; None means no speech support here
EngineFactory = Optional[Callable[[EventSink], "SpeechEngine"]]


class SpeechEngine(ABC):
    """
    Contract of one continuous speech-capture run.

    An instance is started once. It pushes PartialTranscript, EngineError
    and SessionEnded events into the sink it was built with, until it ends
    on its own or stop() is called. start()/stop() raise CapabilityError
    when the platform refuses.
    """

    @abstractmethod
    async def start(self) -> None:
        pass

    @abstractmethod
    async def stop(self) -> None:
        pass
