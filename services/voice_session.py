# services/voice_session.py
import logging
from functools import partial

from configurations.config import VOICE_MAX_RESTARTS
from core.errors import CapabilityError, UnsupportedEnvironmentError
from core.state import ChatState
from models.voice import (
    EngineError,
    PartialTranscript,
    SessionEnded,
    VoiceEvent,
    VoiceState,
)
from services.speech_engine import EngineFactory, SpeechEngine

logger = logging.getLogger(__name__)


class VoiceCaptureSession:
    """
    Continuous voice capture as a state machine: idle / listening / denied.

    Engine callbacks only ever reach the machine through on_event().
    Each engine instance gets a run number; events carrying an old run
    number are dropped, so nothing reaches the input buffer after stop().

    Restarts after an unexpected end are bounded by max_restarts; the
    budget is refilled whenever real speech comes through.
    """

    def __init__(
        self,
        state: ChatState,
        engine_factory: EngineFactory = None,
        max_restarts: int = VOICE_MAX_RESTARTS,
    ):
        self.state = state
        self.engine_factory = engine_factory
        self.max_restarts = max_restarts

        self._engine: SpeechEngine | None = None
        self._run = 0
        self._segments: dict[int, str] = {}
        self._restarts = 0

    @property
    def is_supported(self) -> bool:
        return self.engine_factory is not None

    @property
    def has_live_engine(self) -> bool:
        return self._engine is not None

    # -----------------------------
    # External toggles
    # -----------------------------
    async def toggle(self) -> VoiceState:
        if self.state.voice_state is VoiceState.LISTENING:
            await self.stop()
        else:
            await self.start()
        return self.state.voice_state

    async def start(self) -> None:
        if self.state.voice_state is VoiceState.LISTENING:
            return
        if self.state.voice_state is VoiceState.DENIED:
            logger.info("[VOICE] microphone permission denied; ignoring start")
            return
        if not self.is_supported:
            raise UnsupportedEnvironmentError(
                "Voice input is not supported in this environment."
            )

        self._restarts = 0
        self.state.voice_state = VoiceState.LISTENING
        try:
            await self._spawn()
        except CapabilityError:
            logger.exception("[VOICE] engine failed to start")
            self._engine = None
            self._run += 1
            self.state.voice_state = VoiceState.IDLE
            raise
        logger.info("[VOICE] listening")

    async def stop(self) -> None:
        if self.state.voice_state is not VoiceState.LISTENING:
            return
        self.state.voice_state = VoiceState.IDLE
        await self._halt()
        logger.info("[VOICE] stopped")

    async def shutdown(self) -> None:
        """Session teardown: no live engine may outlive the login."""
        await self._halt()
        self.state.voice_state = VoiceState.IDLE

    # -----------------------------
    # Engine events
    # -----------------------------
    async def on_event(self, event: VoiceEvent) -> None:
        if self.state.voice_state is not VoiceState.LISTENING:
            logger.debug(f"[VOICE] ignoring {type(event).__name__} while {self.state.voice_state.value}")
            return

        if isinstance(event, PartialTranscript):
            self._on_transcript(event)
        elif isinstance(event, EngineError):
            await self._on_error(event)
        elif isinstance(event, SessionEnded):
            await self._restart()

    def _on_transcript(self, event: PartialTranscript) -> None:
        self._segments[event.index] = event.text
        transcript = "".join(self._segments[i] for i in sorted(self._segments))
        if not transcript.strip():
            return
        self._restarts = 0
        self.state.pending_input = transcript

    async def _on_error(self, event: EngineError) -> None:
        if not event.is_fatal:
            logger.warning(f"[VOICE] speech error: {event.code} {event.message}".rstrip())
            return

        logger.warning(f"[VOICE] permission denied ({event.code}); microphone disabled")
        self.state.voice_state = VoiceState.DENIED
        await self._halt()

    async def _restart(self) -> None:
        # The ended instance is already dead; it only needs replacing
        self._engine = None
        while self._restarts < self.max_restarts:
            self._restarts += 1
            try:
                await self._spawn()
                logger.info(f"[VOICE] engine restarted (attempt {self._restarts}/{self.max_restarts})")
                return
            except CapabilityError:
                logger.warning(f"[VOICE] restart attempt {self._restarts} failed")
                self._engine = None
            if self.state.voice_state is not VoiceState.LISTENING:
                return

        logger.error(f"[VOICE] giving up after {self.max_restarts} restarts")
        self._run += 1
        self.state.voice_state = VoiceState.IDLE

    # -----------------------------
    # Engine lifecycle
    # -----------------------------
    async def _deliver(self, run: int, event: VoiceEvent) -> None:
        if run != self._run:
            logger.debug(f"[VOICE] dropping {type(event).__name__} from stale run {run}")
            return
        await self.on_event(event)

    async def _spawn(self) -> None:
        self._run += 1
        self._segments = {}
        engine = self.engine_factory(partial(self._deliver, self._run))
        self._engine = engine
        await engine.start()

    async def _halt(self) -> None:
        self._run += 1
        engine, self._engine = self._engine, None
        if engine is None:
            return
        try:
            await engine.stop()
        except CapabilityError:
            logger.warning("[VOICE] engine refused to stop cleanly")
