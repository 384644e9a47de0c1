# core/intent.py
from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union


class ExpenseFromText(BaseModel):
    """
    Free-form expense text ("Paid Rs 500 at Starbucks").
    Parsing into amount / merchant is delegated to the data service.
    """

    type: Literal["expense"] = "expense"
    raw_input: str


class GoalCreation(BaseModel):
    """
    "Add goal <title...> <amount>".
    title / target_amount are None when the command had fewer than
    four tokens; the executor answers those with a usage hint.
    """

    type: Literal["goal"] = "goal"
    raw_input: str
    title: Optional[str] = None
    target_amount: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.title) and bool(self.target_amount)


class GenericAdvice(BaseModel):
    """Everything else goes to the advice capability."""

    type: Literal["advice"] = "advice"
    raw_input: str


# A passive container for what the user wants. It does not execute anything.
Intent = Annotated[
    Union[ExpenseFromText, GoalCreation, GenericAdvice],
    Field(discriminator="type"),
]
