# services/chat_controller.py
import logging
from typing import Any, Awaitable, Optional, TypeVar, Union

from pydantic import ValidationError

from core.errors import CapabilityError, ParseFailure, UnauthenticatedError
from core.intent import GoalCreation
from core.state import ChatState
from executors.advice import AdviceExecutor
from executors.base import BaseExecutor, CommandResult
from executors.expense import ExpenseExecutor, format_amount
from executors.goal import GoalExecutor
from models.chat import ChatMessage
from models.dashboard import DashboardSnapshot, ManualExpense, UserProfile
from models.session import GUEST_TOKEN, Session
from models.voice import VoiceState
from services.dashboard_aggregator import DashboardAggregator
from services.data_service import DataService
from services.mood_classifier import classify_mood
from services.router import get_route
from services.speech_engine import EngineFactory
from services.token_store import TokenStore
from services.voice_session import VoiceCaptureSession

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."
BRAIN_ERROR_MESSAGE = "Error connecting to FinCoach brain."
EXPENSE_FAILED_MESSAGE = "I couldn't record that expense. Please try again."
DAILY_CHALLENGE_AMOUNT = 500

T = TypeVar("T")


class ChatController:
    """
    Owns the ChatState and is the only thing the presentation layer talks to.

    Chat commands (submit, add_expense) are single-flight: while one is in
    progress, another is ignored. Any UnauthenticatedError, wherever it
    comes from, ends in logout().
    """

    def __init__(
        self,
        data_service: DataService,
        token_store: Optional[TokenStore] = None,
        engine_factory: EngineFactory = None,
        state: Optional[ChatState] = None,
    ):
        self.data_service = data_service
        self.token_store = token_store
        self.state = state or ChatState()

        self.voice = VoiceCaptureSession(self.state, engine_factory)
        self.aggregator = DashboardAggregator(data_service, self.state, self.logout)

        # Intent type -> executor (single source of truth)
        self.executors: dict[str, BaseExecutor] = {
            "expense": ExpenseExecutor(data_service),
            "goal": GoalExecutor(data_service),
            "advice": AdviceExecutor(data_service),
        }

        self.metrics = {
            "expense": 0,
            "goal": 0,
            "advice": 0,
            "rejected": 0,
            "total": 0,
            "errors": 0,
        }

    # -----------------------------
    # Session lifecycle
    # -----------------------------
    async def startup(self) -> None:
        """Restores the stored token, if any, and loads the dashboard."""
        token = self.token_store.load() if self.token_store else None
        if not token:
            logger.info("No stored session; waiting for login")
            return
        await self._open_session(token)
        await self.refresh_dashboard()

    async def login(self, credential: str) -> Optional[DashboardSnapshot]:
        if not credential:
            raise UnauthenticatedError("Empty login credential")
        await self._open_session(credential)
        if self.token_store:
            self.token_store.save(credential)
        return await self.refresh_dashboard()

    async def login_as_guest(self) -> Optional[DashboardSnapshot]:
        return await self.login(GUEST_TOKEN)

    async def logout(self) -> None:
        await self.voice.shutdown()
        self.state.reset_session()
        self.data_service.set_auth_token(None)
        if self.token_store:
            self.token_store.clear()
        logger.info("[SESSION] logged out")

    async def _open_session(self, token: str) -> None:
        # The previous session's microphone must not feed the new one
        await self.voice.shutdown()
        self.state.reset_session()
        self.state.session = Session(token=token)
        self.data_service.set_auth_token(token)
        logger.info(f"[SESSION] opened (guest={self.state.session.is_guest})")

    def _require_session(self) -> None:
        if not self.state.session.is_authenticated:
            raise UnauthenticatedError("Please sign in first")

    # -----------------------------
    # Chat
    # -----------------------------
    async def submit(self, text: Optional[str] = None) -> Optional[ChatMessage]:
        """
        Sends typed text, or the voice-filled pending input when text is None.
        Returns the assistant reply, or None when the submission was ignored.
        """
        self._require_session()
        message = (self.state.pending_input if text is None else text).strip()
        if not message or self.state.is_processing:
            self.metrics["rejected"] += 1
            return None

        self.state.is_processing = True
        self.metrics["total"] += 1
        try:
            if self.state.voice_state is VoiceState.LISTENING:
                await self.voice.stop()

            mood = classify_mood(message)
            self.state.mood = mood
            self.state.append(ChatMessage.from_user(message, mood))
            self.state.pending_input = ""

            intent = get_route(message)
            logger.info(f"[INTENT] type={intent.type}, text='{message[:100]}'")

            try:
                result = await self.executors[intent.type].execute(intent)
                self.metrics[intent.type] += 1
            except UnauthenticatedError:
                self.metrics["errors"] += 1
                self.state.append(ChatMessage.from_assistant(SESSION_EXPIRED_MESSAGE))
                await self.logout()
                return self.state.transcript[-1]
            except CapabilityError:
                self.metrics["errors"] += 1
                logger.exception(f"[COMMAND ERROR] type={intent.type}")
                result = CommandResult(message=BRAIN_ERROR_MESSAGE)

            reply = ChatMessage.from_assistant(result.message, mood)
            self.state.append(reply)

            if result.refresh and self.state.session.is_authenticated:
                await self.refresh_dashboard()
            return reply
        finally:
            self.state.is_processing = False

    async def toggle_voice(self) -> VoiceState:
        self._require_session()
        return await self.voice.toggle()

    # -----------------------------
    # Direct actions
    # -----------------------------
    async def add_expense(self, fields: dict[str, Any]) -> Optional[ChatMessage]:
        """Manual entry: {title, amount, category}. Shares the single-flight gate with submit()."""
        self._require_session()
        if self.state.is_processing:
            self.metrics["rejected"] += 1
            return None

        try:
            entry = ManualExpense.model_validate(fields)
        except ValidationError as e:
            raise ParseFailure(f"Invalid expense fields: {e.errors()[0]['msg']}") from e

        title = entry.title or ""
        amount = entry.amount
        self.state.is_processing = True
        try:
            try:
                await self.data_service.add_transaction({
                    "merchant": title or "Manual Entry",
                    "amount": amount,
                    "category": entry.category or "Expense",
                })
            except UnauthenticatedError:
                await self.logout()
                raise
            except CapabilityError:
                logger.exception("[EXPENSE ERROR] manual entry failed")
                reply = ChatMessage.from_assistant(EXPENSE_FAILED_MESSAGE)
                self.state.append(reply)
                return reply

            await self.refresh_dashboard()
            reply = ChatMessage.from_assistant(
                f"I've recorded ₹{format_amount(amount)} for {title or 'Expense'}."
            )
            self.state.append(reply)
            return reply
        finally:
            self.state.is_processing = False

    async def create_goal(self, title: str, target: Union[str, float]) -> ChatMessage:
        self._require_session()
        target_amount = target if isinstance(target, str) else format_amount(target)
        intent = GoalCreation(
            raw_input=f"Add goal {title} {target_amount}",
            title=" ".join(title.split()) or None,
            target_amount=target_amount.strip() or None,
        )
        try:
            result = await self.executors["goal"].execute(intent)
        except UnauthenticatedError:
            await self.logout()
            raise
        reply = ChatMessage.from_assistant(result.message)
        self.state.append(reply)
        if result.refresh:
            await self.refresh_dashboard()
        return reply

    async def add_goal_progress(self, goal_id: Union[str, int], amount: float = DAILY_CHALLENGE_AMOUNT) -> None:
        self._require_session()
        await self._then_refresh(self.data_service.add_goal_progress(goal_id, amount))

    async def create_group(self, name: str) -> None:
        self._require_session()
        await self._then_refresh(self.data_service.create_group(name))

    async def join_group(self, code: str) -> None:
        self._require_session()
        await self._then_refresh(self.data_service.join_group(code))

    async def update_profile(self, fields: dict[str, Any]) -> UserProfile:
        self._require_session()
        return await self._then_refresh(self.data_service.update_profile(fields))

    async def refresh_dashboard(self) -> Optional[DashboardSnapshot]:
        self._require_session()
        return await self.aggregator.refresh()

    async def _then_refresh(self, call: Awaitable[T]) -> T:
        """Awaits a remote write, then reloads the dashboard. Failures propagate."""
        try:
            result = await call
        except UnauthenticatedError:
            await self.logout()
            raise
        await self.refresh_dashboard()
        return result
