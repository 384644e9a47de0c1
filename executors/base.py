from abc import ABC, abstractmethod
from asyncio import wait_for, TimeoutError
from typing import Awaitable, TypeVar

from pydantic import BaseModel

from configurations.config import EXECUTOR_TIMEOUT
from core.errors import CapabilityError
from services.data_service import DataService

T = TypeVar("T")


class CommandResult(BaseModel):
    """
    The single reply an executor produces for one Intent.
    refresh=True asks the controller to reload the dashboard afterwards.
    """

    message: str
    refresh: bool = False


class BaseExecutor(ABC):
    """
    Base contract for all executors.
    Executors take an Intent and return exactly one CommandResult.
    No routing, no transcript writes here.
    """

    def __init__(self, data_service: DataService, timeout: float = EXECUTOR_TIMEOUT):
        self.data_service = data_service
        self.timeout = timeout

    async def _call(self, awaitable: Awaitable[T], what: str) -> T:
        try:
            return await wait_for(awaitable, timeout=self.timeout)
        except TimeoutError:
            raise CapabilityError(f"{what} timed out")

    @abstractmethod
    async def execute(self, intent) -> CommandResult:
        pass
