import re

# Fixed question list; rating keys are shared by every stored response.
QUESTIONS = [
    ("quality", "How satisfied are you with the overall quality of the work delivered?"),
    ("timeline", "Were the timelines communicated and maintained effectively?"),
    ("brandAlignment", "How well did the creative output align with your brand expectations?"),
    ("communication", "How would you rate the clarity and responsiveness of our communication?"),
    ("feedback", "Did you feel your feedback was understood and acted upon thoughtfully?"),
    ("contribution", "Do you feel the creative work contributed to your marketing or business goals?"),
    ("trust", "I see Madarth as a trusted creative partner."),
]

RATING_KEYS = tuple(key for key, _ in QUESTIONS)
RATING_MIN = 0
RATING_MAX = 5
RATINGS = [str(v) for v in range(RATING_MIN, RATING_MAX + 1)]

_UPPER = re.compile(r"([A-Z])")


def split_camel(key: str) -> str:
    """Insert a space before each uppercase letter: ``brandAlignment`` -> ``brand Alignment``."""
    return _UPPER.sub(r" \1", key)


def humanize_key(key: str) -> str:
    """Display label for a rating key: ``brandAlignment`` -> ``Brand Alignment``."""
    label = split_camel(key)
    return label[:1].upper() + label[1:]
