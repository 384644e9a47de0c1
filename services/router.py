# services/router.py
import re

from core.intent import ExpenseFromText, GenericAdvice, GoalCreation, Intent

# The standalone word "at" ("Paid Rs 500 at Starbucks")
_at_re = re.compile(r"\bat\b", re.IGNORECASE)

# Currency marker followed by digits: "Rs 500", "Rs.500", "INR 20", "₹75"
_amount_re = re.compile(r"(?:\brs\.?|\binr|₹)\s?\d+", re.IGNORECASE)

GOAL_PREFIX = "add goal"
MIN_GOAL_TOKENS = 4


def is_expense_text(text: str) -> bool:
    return bool(_at_re.search(text)) and bool(_amount_re.search(text))


def parse_goal_command(text: str) -> GoalCreation:
    """
    "Add goal New Laptop 60000" -> title "New Laptop", target "60000".
    Fewer than four tokens gives an incomplete GoalCreation (usage hint).
    """
    tokens = text.split()
    if len(tokens) < MIN_GOAL_TOKENS:
        return GoalCreation(raw_input=text)

    return GoalCreation(
        raw_input=text,
        title=" ".join(tokens[2:-1]),
        target_amount=tokens[-1],
    )


def get_route(user_input: str) -> Intent:
    """
    Classifies user input into exactly one Intent variant.
    Deterministic and side-effect free; first matching rule wins.
    """
    text = (user_input or "").strip()

    if is_expense_text(text):
        return ExpenseFromText(raw_input=text)

    if text.lower().startswith(GOAL_PREFIX):
        return parse_goal_command(text)

    return GenericAdvice(raw_input=text)
