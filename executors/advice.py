import logging

from core.errors import CapabilityError
from core.intent import GenericAdvice
from executors.base import BaseExecutor, CommandResult

logger = logging.getLogger(__name__)

ADVICE_FAILED_MESSAGE = "Error connecting to FinCoach brain."


class AdviceExecutor(BaseExecutor):
    """
    Executes everything that is neither an expense nor a goal.
    The advice capability reads the user from the session token.
    """

    async def execute(self, intent: GenericAdvice) -> CommandResult:
        try:
            advice = await self._call(self.data_service.get_ai_advice(), "Advice")
        except CapabilityError:
            logger.exception("[ADVICE ERROR]")
            return CommandResult(message=ADVICE_FAILED_MESSAGE)

        return CommandResult(message=advice.message)
