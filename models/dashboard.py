# models/dashboard.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str = Field(default="", description="Display name")
    email: str = Field(default="", description="Login e-mail")
    points: int = Field(default=0, ge=0, description="Gamification points")
    income: Optional[float] = Field(None, description="Monthly income")
    budgetLimit: Optional[float] = Field(None, description="Monthly budget limit")
    moodState: Optional[str] = Field(None, description="Server-side mood indicator")

    @property
    def level(self) -> int:
        return self.points // 100 + 1

    @property
    def xp(self) -> int:
        """XP towards the next level, out of 100."""
        return self.points % 100


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    points: int = 0


class SavingsStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    balance: float = 0
    savings: float = 0
    totalSpent: float = 0


class Transaction(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    merchant: str = Field(default="", description="Where the money went")
    amount: float = Field(..., description="Amount of the transaction")
    category: str = Field(default="Expense")
    date: Optional[str] = None


class Goal(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]
    title: str
    target: float = 0
    current: float = 0


class Group(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]
    name: str
    code: Optional[str] = None


class ParsedTransaction(BaseModel):
    """What the data service extracts from free-form expense text."""

    model_config = ConfigDict(extra="allow")

    amount: float = Field(..., ge=0)
    merchant: str


class ManualExpense(BaseModel):
    """Fields of a hand-entered expense."""

    title: Optional[str] = Field(default="", description="What the money was for")
    amount: float = Field(..., gt=0, description="Amount spent")
    category: Optional[str] = Field(default="", description="Expense category")


class AdviceResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str


class DashboardSnapshot(BaseModel):
    """
    The consistent bundle of all dashboard reads at one point in time.
    Frozen: a refresh replaces the whole snapshot, never single fields.
    """

    model_config = ConfigDict(frozen=True)

    profile: UserProfile
    leaderboard: list[LeaderboardEntry] = Field(default_factory=list)
    savingsStats: SavingsStats = Field(default_factory=SavingsStats)
    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    groups: list[Group] = Field(default_factory=list)

    @property
    def balance(self) -> float:
        return self.savingsStats.balance

    @property
    def daily_challenge(self) -> Optional[Goal]:
        """The goal the daily challenge asks the user to fund."""
        return self.goals[0] if self.goals else None

    def rank_of(self, user_id: Optional[str]) -> Optional[int]:
        for position, entry in enumerate(self.leaderboard, start=1):
            if entry.id == user_id:
                return position
        return None
