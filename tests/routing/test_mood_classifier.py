import pytest

from core.mood import DEFAULT_MOOD, Mood
from services.mood_classifier import classify_mood


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input_gets_default_mood(text):
    assert classify_mood(text) is Mood.MOTIVATIONAL


def test_default_mood_is_motivational():
    assert DEFAULT_MOOD is Mood.MOTIVATIONAL


def test_unmatched_text_gets_default_mood():
    assert classify_mood("Paid Rs 500 at Starbucks") is Mood.MOTIVATIONAL


@pytest.mark.parametrize(
    "text, expected",
    [
        ("I'm so stressed about my credit card debt", Mood.STRESSED),
        ("WORRIED about rent", Mood.STRESSED),
        ("Yay I got a bonus!", Mood.CELEBRATORY),
        ("I saved 2000 this month", Mood.CELEBRATORY),
        ("Show my savings", Mood.NEUTRAL),
        ("how much did I spend on food", Mood.NEUTRAL),
        ("Add goal Vacation 20000", Mood.MOTIVATIONAL),
    ],
)
def test_keywords_pick_the_mood(text, expected):
    assert classify_mood(text) is expected


def test_earlier_rule_wins_when_several_match():
    """Stress keywords outrank the neutral 'show'."""
    assert classify_mood("show me how broke I am") is Mood.STRESSED


def test_keywords_match_whole_words_only():
    """'premium' contains 'emi' but is not about loan EMIs."""
    assert classify_mood("premium coffee") is Mood.MOTIVATIONAL


def test_every_result_is_a_mood():
    for text in ["", "hello", "debt", "🎉", "12345", "SHOW LIST"]:
        assert isinstance(classify_mood(text), Mood)


def test_profile_mood_mapping():
    assert Mood.from_profile("STRESSED") is Mood.STRESSED
    assert Mood.from_profile(" Celebratory ") is Mood.CELEBRATORY
    assert Mood.from_profile("ecstatic") is None
    assert Mood.from_profile(None) is None
