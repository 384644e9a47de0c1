import asyncio
import pytest
from unittest.mock import AsyncMock

from core.errors import CapabilityError, UnauthenticatedError
from core.mood import Mood
from core.state import ChatState
from models.dashboard import DashboardSnapshot, Goal, UserProfile
from models.session import Session
from services.dashboard_aggregator import DashboardAggregator


READS = [
    "fetch_profile",
    "fetch_leaderboard",
    "fetch_savings_stats",
    "fetch_transactions",
    "fetch_goals",
    "fetch_groups",
]


@pytest.fixture
def state():
    s = ChatState()
    s.session = Session(token="test-token")
    return s


@pytest.fixture
def logout():
    return AsyncMock()


@pytest.fixture
def aggregator(data_service, state, logout):
    return DashboardAggregator(data_service, state, logout)


def test_successful_refresh_replaces_whole_snapshot(aggregator, data_service, state):
    snapshot = asyncio.run(aggregator.refresh())

    assert state.snapshot is snapshot
    assert snapshot.profile.name == "Asha"
    assert snapshot.leaderboard[1].id == "user_1"
    assert snapshot.balance == 12000
    assert snapshot.transactions[0].merchant == "Starbucks"
    assert snapshot.goals[0].title == "Vacation"
    assert snapshot.groups[0].code == "FLAT42"
    for read in READS:
        getattr(data_service, read).assert_awaited_once()


def test_reads_are_issued_concurrently(aggregator, data_service):
    in_flight = []
    peak = []

    def tracked(value):
        async def read():
            in_flight.append(1)
            peak.append(len(in_flight))
            await asyncio.sleep(0.01)
            in_flight.pop()
            return value
        return read

    for read in READS:
        mock = getattr(data_service, read)
        mock.side_effect = tracked(mock.return_value)

    asyncio.run(aggregator.refresh())

    assert max(peak) == 6


def test_gamification_fields_derive_from_profile(aggregator):
    snapshot = asyncio.run(aggregator.refresh())

    assert snapshot.profile.level == 3
    assert snapshot.profile.xp == 50
    assert snapshot.rank_of("user_1") == 2
    assert snapshot.daily_challenge.title == "Vacation"


def test_profile_mood_overwrites_ambient_mood(aggregator, state):
    state.mood = Mood.CELEBRATORY

    asyncio.run(aggregator.refresh())

    assert state.mood is Mood.STRESSED


def test_profile_without_mood_keeps_ambient_mood(aggregator, data_service, state):
    data_service.fetch_profile.return_value = UserProfile(id="user_1", name="Asha")
    state.mood = Mood.NEUTRAL

    asyncio.run(aggregator.refresh())

    assert state.mood is Mood.NEUTRAL


def test_unknown_profile_mood_is_ignored(aggregator, data_service, state):
    data_service.fetch_profile.return_value = UserProfile(id="user_1", moodState="ZEN")
    state.mood = Mood.NEUTRAL

    asyncio.run(aggregator.refresh())

    assert state.mood is Mood.NEUTRAL


@pytest.mark.parametrize("failing_read", READS)
def test_single_failing_read_leaves_previous_snapshot_untouched(
    aggregator, data_service, state, logout, failing_read
):
    previous = DashboardSnapshot(
        profile=UserProfile(id="user_1", name="Before", points=10),
        goals=[Goal(id="old", title="Old goal")],
    )
    state.snapshot = previous
    state.mood = Mood.NEUTRAL
    getattr(data_service, failing_read).side_effect = CapabilityError("boom", upstream_status=500)

    result = asyncio.run(aggregator.refresh())

    assert result is None
    assert state.snapshot is previous
    assert state.snapshot.profile.name == "Before"
    assert state.snapshot.goals[0].id == "old"
    assert state.mood is Mood.NEUTRAL
    logout.assert_not_called()


def test_authentication_failure_forces_logout(aggregator, data_service, state, logout):
    previous = DashboardSnapshot(profile=UserProfile(id="user_1", name="Before"))
    state.snapshot = previous
    data_service.fetch_goals.side_effect = UnauthenticatedError("token expired")

    result = asyncio.run(aggregator.refresh())

    assert result is None
    assert state.snapshot is previous
    logout.assert_awaited_once()


def test_auth_failure_wins_over_other_failures(aggregator, data_service, logout):
    data_service.fetch_profile.side_effect = CapabilityError("down")
    data_service.fetch_groups.side_effect = UnauthenticatedError("expired")

    asyncio.run(aggregator.refresh())

    logout.assert_awaited_once()


def test_refresh_finishing_after_logout_is_discarded(aggregator, data_service, state):
    async def profile_then_logout():
        state.reset_session()
        return UserProfile(id="user_1", name="Asha")

    data_service.fetch_profile.side_effect = profile_then_logout

    result = asyncio.run(aggregator.refresh())

    assert result is None
    assert state.snapshot is None


def test_late_rejection_from_previous_session_keeps_new_session(controller, data_service):
    async def scenario():
        entered = asyncio.Event()
        release = asyncio.Event()
        calls = []

        async def profile():
            calls.append(1)
            if len(calls) == 1:
                entered.set()
                await release.wait()
                raise UnauthenticatedError("old token expired")
            return UserProfile(id="user_1", name="Asha")

        data_service.fetch_profile.side_effect = profile

        old_refresh = asyncio.create_task(controller.refresh_dashboard())
        await entered.wait()
        await controller.logout()
        await controller.login("new-token")
        release.set()
        return await old_refresh

    result = asyncio.run(scenario())

    assert result is None
    assert controller.state.session.token == "new-token"
    assert controller.state.snapshot is not None
    assert controller.state.snapshot.profile.name == "Asha"
    data_service.set_auth_token.assert_called_with("new-token")


def test_unexpected_error_is_not_swallowed(aggregator, data_service, state):
    data_service.fetch_transactions.side_effect = KeyError("bug")

    with pytest.raises(KeyError):
        asyncio.run(aggregator.refresh())

    assert state.snapshot is None


def test_controller_logout_through_aggregator(controller, data_service):
    data_service.fetch_profile.side_effect = UnauthenticatedError("expired")

    asyncio.run(controller.refresh_dashboard())

    assert not controller.state.session.is_authenticated
    assert controller.state.snapshot is None
