# tests/conftest.py
import sys
from pathlib import Path

# ---------------------------------------------------------
# Ensure project root is on PYTHONPATH BEFORE app imports
# ---------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# ---------------------------------------------------------
# Now safe to import app + dependencies
# ---------------------------------------------------------
import asyncio
import pytest
from unittest.mock import MagicMock

from core.errors import CapabilityError
from models.dashboard import (
    AdviceResponse,
    Goal,
    Group,
    LeaderboardEntry,
    ParsedTransaction,
    SavingsStats,
    Transaction,
    UserProfile,
)
from models.voice import SessionEnded
from services.chat_controller import ChatController
from services.data_service import DataService
from services.speech_engine import SpeechEngine


PROFILE = UserProfile(id="user_1", name="Asha", email="asha@example.com", points=250, moodState="STRESSED")
LEADERBOARD = [LeaderboardEntry(id="user_2", name="Ravi", points=400), LeaderboardEntry(id="user_1", name="Asha", points=250)]
SAVINGS = SavingsStats(balance=12000, savings=3000, totalSpent=9000)
TRANSACTIONS = [Transaction(id=1, merchant="Starbucks", amount=500, category="Food", date="2025-01-24")]
GOALS = [Goal(id="g1", title="Vacation", target=20000, current=2500)]
GROUPS = [Group(id="grp1", name="Flatmates", code="FLAT42")]


def make_data_service() -> MagicMock:
    """A DataService double whose every read succeeds."""
    service = MagicMock(spec=DataService)
    service.fetch_profile.return_value = PROFILE
    service.fetch_leaderboard.return_value = LEADERBOARD
    service.fetch_savings_stats.return_value = SAVINGS
    service.fetch_transactions.return_value = TRANSACTIONS
    service.fetch_goals.return_value = GOALS
    service.fetch_groups.return_value = GROUPS
    service.add_transaction.return_value = {"id": 2}
    service.add_goal.return_value = {"id": "g2"}
    service.add_goal_progress.return_value = {"id": "g1"}
    service.create_group.return_value = {"id": "grp2"}
    service.join_group.return_value = {"id": "grp1"}
    service.update_profile.return_value = PROFILE
    service.get_ai_advice.return_value = AdviceResponse(message="Cut back on takeaways this week.")
    service.parse_text_to_transaction.return_value = ParsedTransaction(amount=500, merchant="Starbucks")
    return service


@pytest.fixture
def data_service():
    return make_data_service()


# ---------------------------------------------------------
# Speech engine doubles
# ---------------------------------------------------------
class FakeSpeechEngine(SpeechEngine):
    def __init__(self, sink, fail_start: bool = False):
        self.sink = sink
        self.fail_start = fail_start
        self.started = False
        self.stopped = False
        self.ended = False

    async def start(self) -> None:
        if self.fail_start:
            raise CapabilityError("microphone busy")
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def emit(self, event) -> None:
        if isinstance(event, SessionEnded):
            self.ended = True
        await self.sink(event)

    @property
    def live(self) -> bool:
        return self.started and not (self.stopped or self.ended)


class FakeEngineFactory:
    """Builds FakeSpeechEngines; the next `failures` starts raise."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.engines: list[FakeSpeechEngine] = []

    def __call__(self, sink) -> FakeSpeechEngine:
        engine = FakeSpeechEngine(sink, fail_start=self.failures > 0)
        if self.failures > 0:
            self.failures -= 1
        self.engines.append(engine)
        return engine

    @property
    def latest(self) -> FakeSpeechEngine:
        return self.engines[-1]

    @property
    def live_count(self) -> int:
        return sum(1 for engine in self.engines if engine.live)


@pytest.fixture
def engine_factory():
    return FakeEngineFactory()


@pytest.fixture
def controller(data_service, engine_factory):
    """A controller with an open session and no token store."""
    ctrl = ChatController(data_service, engine_factory=engine_factory)
    asyncio.run(ctrl._open_session("test-token"))
    return ctrl
