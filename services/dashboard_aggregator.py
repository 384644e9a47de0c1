# services/dashboard_aggregator.py
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from core.errors import FinCoachError, UnauthenticatedError
from core.mood import Mood
from core.state import ChatState
from models.dashboard import DashboardSnapshot
from services.data_service import DataService

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "profile",
    "leaderboard",
    "savingsStats",
    "transactions",
    "goals",
    "groups",
)


class DashboardAggregator:
    """
    Loads the six dashboard reads concurrently and swaps them in as one
    DashboardSnapshot.

    All-or-nothing: when any read fails the previous snapshot stays in
    place untouched. When any read failed because the token was rejected,
    on_unauthenticated (the controller's logout) runs before returning.
    Results of a refresh that outlived its session are dropped, failures
    included, so a late 401 never logs out the session that replaced it.
    """

    def __init__(
        self,
        data_service: DataService,
        state: ChatState,
        on_unauthenticated: Callable[[], Awaitable[None]],
    ):
        self.data_service = data_service
        self.state = state
        self.on_unauthenticated = on_unauthenticated

    async def refresh(self) -> Optional[DashboardSnapshot]:
        epoch = self.state.session_epoch

        results = await asyncio.gather(
            self.data_service.fetch_profile(),
            self.data_service.fetch_leaderboard(),
            self.data_service.fetch_savings_stats(),
            self.data_service.fetch_transactions(),
            self.data_service.fetch_goals(),
            self.data_service.fetch_groups(),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for name, result in zip(SNAPSHOT_FIELDS, results):
                if isinstance(result, BaseException):
                    logger.error(f"[DASHBOARD] {name} read failed: {result!r}")
            for failure in failures:
                if not isinstance(failure, Exception):
                    raise failure

            stale = epoch != self.state.session_epoch
            if stale:
                logger.info("[DASHBOARD] session changed during refresh; dropping failed reads")
            elif any(isinstance(f, UnauthenticatedError) for f in failures):
                logger.warning("[DASHBOARD] session rejected; logging out")
                await self.on_unauthenticated()
                return None

            unexpected = [f for f in failures if not isinstance(f, FinCoachError)]
            if unexpected:
                raise unexpected[0]
            return None

        if epoch != self.state.session_epoch:
            logger.info("[DASHBOARD] session changed during refresh; discarding result")
            return None

        try:
            snapshot = DashboardSnapshot(**dict(zip(SNAPSHOT_FIELDS, results)))
        except ValidationError:
            logger.exception("[DASHBOARD] reads did not form a valid snapshot")
            return None

        self.state.snapshot = snapshot

        profile_mood = Mood.from_profile(snapshot.profile.moodState)
        if profile_mood is not None:
            self.state.mood = profile_mood
        elif snapshot.profile.moodState:
            logger.warning(f"[DASHBOARD] unknown profile mood '{snapshot.profile.moodState}'")

        logger.info(
            f"[DASHBOARD] refreshed: {len(snapshot.transactions)} transactions, "
            f"{len(snapshot.goals)} goals, {len(snapshot.groups)} groups"
        )
        return snapshot
