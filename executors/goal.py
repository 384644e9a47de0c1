import logging

from core.errors import CapabilityError
from core.intent import GoalCreation
from executors.base import BaseExecutor, CommandResult

logger = logging.getLogger(__name__)

GOAL_USAGE_HINT = "To add a goal, say: 'Add goal [Name] [Amount]'"
GOAL_FAILED_MESSAGE = "I couldn't create that goal right now. Please try again."


class GoalExecutor(BaseExecutor):
    """
    Executes "Add goal <title> <amount>".
    Capability failures are answered once; the user resubmits if they want.
    """

    async def execute(self, intent: GoalCreation) -> CommandResult:
        if not intent.is_complete:
            logger.info(f"[GOAL USAGE] text='{intent.raw_input}'")
            return CommandResult(message=GOAL_USAGE_HINT)

        try:
            await self._call(
                self.data_service.add_goal(
                    {"title": intent.title, "target": intent.target_amount}
                ),
                "Goal creation",
            )
        except CapabilityError:
            logger.exception(f"[GOAL ERROR] title='{intent.title}'")
            return CommandResult(message=GOAL_FAILED_MESSAGE)

        logger.info(f"[GOAL CREATED] title='{intent.title}', target={intent.target_amount}")
        return CommandResult(
            message=f"Goal '{intent.title}' added with target ₹{intent.target_amount}!",
            refresh=True,
        )
