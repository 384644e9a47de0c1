"""
HTTP client for the FinCoach data service.

Every endpoint is called with a bearer token set through set_auth_token().
Status mapping:
- 401 -> UnauthenticatedError (the caller logs the user out)
- 400 / 422 on the text parser -> ParseFailure
- anything else >= 400, timeouts, connection errors -> CapabilityError
"""
import logging
from typing import Any, Optional, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from configurations.config import DATA_SERVICE_URL, REQUEST_TIMEOUT
from core.errors import CapabilityError, ParseFailure, UnauthenticatedError
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
from services.data_service import DataService

logger = logging.getLogger(__name__)

PARSE_REJECTED_STATUS_CODES = {400, 422}


class HttpDataService(DataService):
    """
    Usage:
        service = HttpDataService()
        service.set_auth_token("guest_mode")
        profile = await service.fetch_profile()
    """

    def __init__(
        self,
        base_url: str = DATA_SERVICE_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self._token: Optional[str] = None

    def set_auth_token(self, token: Optional[str]) -> None:
        self._token = token

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method, path, json=payload, headers=self._headers()
                )
        except (httpx.TimeoutException, httpx.RequestError) as e:
            kind = "timeout" if isinstance(e, httpx.TimeoutException) else "connection error"
            logger.error(f"Data service {kind}: {method} {path}")
            raise CapabilityError(f"Data service {kind} on {path}") from e

        if response.status_code == 401:
            logger.warning(f"Data service rejected token: {method} {path}")
            raise UnauthenticatedError(f"Session rejected on {path}")

        if response.status_code >= 400:
            logger.error(f"Data service error: {response.status_code} - {method} {path}")
            raise CapabilityError(
                f"Data service returned {response.status_code} on {path}",
                upstream_status=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise CapabilityError(f"Invalid JSON from {path}") from e

    @staticmethod
    def _validate(model: Any, data: Any, path: str) -> Any:
        try:
            return TypeAdapter(model).validate_python(data)
        except ValidationError as e:
            raise CapabilityError(f"Unexpected payload shape from {path}") from e

    # -----------------------------
    # Dashboard reads
    # -----------------------------
    async def fetch_profile(self) -> UserProfile:
        return self._validate(UserProfile, await self._request("GET", "/user/profile"), "/user/profile")

    async def fetch_leaderboard(self) -> list[LeaderboardEntry]:
        return self._validate(list[LeaderboardEntry], await self._request("GET", "/leaderboard"), "/leaderboard")

    async def fetch_savings_stats(self) -> SavingsStats:
        return self._validate(SavingsStats, await self._request("GET", "/savings/stats"), "/savings/stats")

    async def fetch_transactions(self) -> list[Transaction]:
        return self._validate(list[Transaction], await self._request("GET", "/transactions"), "/transactions")

    async def fetch_goals(self) -> list[Goal]:
        return self._validate(list[Goal], await self._request("GET", "/goals"), "/goals")

    async def fetch_groups(self) -> list[Group]:
        return self._validate(list[Group], await self._request("GET", "/groups"), "/groups")

    # -----------------------------
    # Writes
    # -----------------------------
    async def add_transaction(self, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/transactions", fields)

    async def add_goal(self, goal: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/goals", goal)

    async def add_goal_progress(self, goal_id: Union[str, int], amount: float) -> dict[str, Any]:
        return await self._request("POST", f"/goals/{goal_id}/progress", {"amount": amount})

    async def create_group(self, name: str) -> dict[str, Any]:
        return await self._request("POST", "/groups", {"name": name})

    async def join_group(self, code: str) -> dict[str, Any]:
        return await self._request("POST", "/groups/join", {"code": code})

    async def update_profile(self, fields: dict[str, Any]) -> UserProfile:
        return self._validate(UserProfile, await self._request("PUT", "/user/profile", fields), "/user/profile")

    # -----------------------------
    # Assistant
    # -----------------------------
    async def get_ai_advice(self) -> AdviceResponse:
        return self._validate(AdviceResponse, await self._request("GET", "/ai/advice"), "/ai/advice")

    async def parse_text_to_transaction(self, text: str) -> ParsedTransaction:
        path = "/transactions/parse-sms"
        try:
            data = await self._request("POST", path, {"text": text})
        except CapabilityError as e:
            if e.upstream_status in PARSE_REJECTED_STATUS_CODES:
                raise ParseFailure(f"Could not parse expense text: {text!r}") from e
            raise

        try:
            return ParsedTransaction.model_validate(data)
        except ValidationError as e:
            raise ParseFailure(f"Parser returned no amount/merchant for {text!r}") from e
