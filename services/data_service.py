# services/data_service.py
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

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


class DataService(ABC):
    """
    Contract of the remote FinCoach data service.

    Every call may raise:
    - UnauthenticatedError when the session token is rejected
    - CapabilityError for any other remote failure
    parse_text_to_transaction may also raise ParseFailure.
    """

    @abstractmethod
    def set_auth_token(self, token: Optional[str]) -> None:
        pass

    # --- dashboard reads ---

    @abstractmethod
    async def fetch_profile(self) -> UserProfile:
        pass

    @abstractmethod
    async def fetch_leaderboard(self) -> list[LeaderboardEntry]:
        pass

    @abstractmethod
    async def fetch_savings_stats(self) -> SavingsStats:
        pass

    @abstractmethod
    async def fetch_transactions(self) -> list[Transaction]:
        pass

    @abstractmethod
    async def fetch_goals(self) -> list[Goal]:
        pass

    @abstractmethod
    async def fetch_groups(self) -> list[Group]:
        pass

    # --- writes ---

    @abstractmethod
    async def add_transaction(self, fields: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    async def add_goal(self, goal: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    async def add_goal_progress(self, goal_id: Union[str, int], amount: float) -> dict[str, Any]:
        pass

    @abstractmethod
    async def create_group(self, name: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def join_group(self, code: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def update_profile(self, fields: dict[str, Any]) -> UserProfile:
        pass

    # --- assistant ---

    @abstractmethod
    async def get_ai_advice(self) -> AdviceResponse:
        pass

    @abstractmethod
    async def parse_text_to_transaction(self, text: str) -> ParsedTransaction:
        pass
