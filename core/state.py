# core/state.py
from dataclasses import dataclass, field
from typing import Optional

from core.mood import DEFAULT_MOOD, Mood
from models.chat import GREETING, ChatMessage
from models.dashboard import DashboardSnapshot
from models.session import Session
from models.voice import VoiceState


@dataclass
class ChatState:
    """
    Everything the presentation layer reads, owned by ChatController.

    Writers:
    - transcript: ChatController only (append-only)
    - snapshot: DashboardAggregator only (whole-object replacement)
    - mood: ChatController and DashboardAggregator (profile value wins)
    - pending_input / voice_state: VoiceCaptureSession and ChatController
    """

    session: Session = field(default_factory=Session)
    snapshot: Optional[DashboardSnapshot] = None
    mood: Mood = DEFAULT_MOOD
    transcript: list[ChatMessage] = field(
        default_factory=lambda: [ChatMessage.from_assistant(GREETING)]
    )
    pending_input: str = ""
    voice_state: VoiceState = VoiceState.IDLE
    is_processing: bool = False
    # Bumped on every login/logout so late results from an old session are dropped
    session_epoch: int = 0

    def append(self, message: ChatMessage) -> None:
        self.transcript.append(message)

    def reset_session(self) -> None:
        self.session = Session()
        self.snapshot = None
        self.mood = DEFAULT_MOOD
        self.pending_input = ""
        self.session_epoch += 1
