# FILE: services/mood_classifier.py
import re

from core.mood import DEFAULT_MOOD, Mood

# Ordered: the first mood with a matching keyword wins
MOOD_KEYWORDS = (
    (Mood.STRESSED, [
        "stress", "stressed", "worried", "worry", "broke", "debt", "loan",
        "overspent", "overspending", "can't afford", "cannot afford",
        "anxious", "panic", "emi", "bills", "tight",
    ]),
    (Mood.CELEBRATORY, [
        "saved", "bonus", "raise", "hike", "achieved", "reached",
        "completed", "won", "yay", "celebrate", "promotion", "paid off",
    ]),
    (Mood.NEUTRAL, [
        "show", "list", "history", "balance", "report", "summary",
        "how much", "analyze", "analyse", "breakdown", "statement",
    ]),
    (Mood.MOTIVATIONAL, [
        "goal", "save", "saving", "savings", "plan", "invest", "budget", "target",
    ]),
)

_MOOD_PATTERNS = [
    (mood, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b", re.IGNORECASE))
    for mood, keywords in MOOD_KEYWORDS
]


def classify_mood(text: str) -> Mood:
    """
    Tags a user message with a mood by case-insensitive keyword scan.
    Total: every string, including the empty one, maps to exactly one Mood.
    """
    if not text or not text.strip():
        return DEFAULT_MOOD

    for mood, pattern in _MOOD_PATTERNS:
        if pattern.search(text):
            return mood

    return DEFAULT_MOOD
