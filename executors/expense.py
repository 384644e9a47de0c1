import logging

from core.errors import CapabilityError, ParseFailure
from core.intent import ExpenseFromText
from executors.base import BaseExecutor, CommandResult

logger = logging.getLogger(__name__)

PARSE_HINT = "I couldn't parse that. Try: 'Paid Rs 500 at Starbucks'"


def format_amount(amount: float) -> str:
    """500.0 -> "500", 12.5 -> "12.5"."""
    if float(amount).is_integer():
        return str(int(amount))
    return str(amount)


class ExpenseExecutor(BaseExecutor):
    """
    Executes free-form expense text ("Paid Rs 500 at Starbucks").
    The data service does the actual parsing and records the transaction.
    """

    async def execute(self, intent: ExpenseFromText) -> CommandResult:
        try:
            parsed = await self._call(
                self.data_service.parse_text_to_transaction(intent.raw_input),
                "Expense parsing",
            )
        except (ParseFailure, CapabilityError) as e:
            logger.info(f"[EXPENSE PARSE FAILED] text='{intent.raw_input}', reason={e}")
            return CommandResult(message=PARSE_HINT)

        logger.info(f"[EXPENSE PARSED] amount={parsed.amount}, merchant={parsed.merchant}")
        return CommandResult(
            message=f"Recorded expense: {format_amount(parsed.amount)} at {parsed.merchant}.",
            refresh=True,
        )
