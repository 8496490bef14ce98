"""
Rating scale conversion for qualitative visit answers.

Maps the two kinds of qualitative token onto a common 0-5 scale:

- Five-level ratings: excellent=5, good=4, neutral=3, poor=2, very_poor=1
- Yes/no answers: yes=5, anything else=0

Zero doubles as "negative answer" and "no answer". Callers that need to tell
the two apart check `is_present` before converting; the aggregator only ever
converts tokens that are present.
"""

from typing import Dict, Optional

from visit_analytics.models.enums import QualitativeField, RatingToken


MAX_SCORE: float = 5.0

RATING_SCORES: Dict[str, float] = {
    RatingToken.EXCELLENT.value: 5.0,
    RatingToken.GOOD.value: 4.0,
    RatingToken.NEUTRAL.value: 3.0,
    RatingToken.POOR.value: 2.0,
    RatingToken.VERY_POOR.value: 1.0,
}

AFFIRMATIVE_TOKEN: str = "yes"


def is_present(token: Optional[str]) -> bool:
    """True when an answer was recorded (not None and not blank)."""
    return token is not None and token.strip() != ""


def to_score(token: Optional[str], is_boolean_field: bool = False) -> float:
    """
    Convert a qualitative token to a score in [0, 5].

    Args:
        token: Raw token as stored, e.g. 'good', 'Very_Poor', 'YES'. May be None.
        is_boolean_field: True for yes/no questions.

    Returns:
        The numeric score. Unrecognized and missing tokens score 0.

    Example:
        >>> to_score("excellent")
        5.0
        >>> to_score("yes", True)
        5.0
        >>> to_score(None)
        0.0
    """
    if not is_present(token):
        return 0.0

    normalized = token.strip().lower()

    if is_boolean_field:
        return MAX_SCORE if normalized == AFFIRMATIVE_TOKEN else 0.0

    return RATING_SCORES.get(normalized, 0.0)


def score_field(field: QualitativeField, token: Optional[str]) -> float:
    """Convert a token using the scale declared for its field."""
    return to_score(token, field.is_boolean)


def normalize_rating(token: Optional[str]) -> Optional[RatingToken]:
    """
    Parse a five-level token into a RatingToken.

    Returns None for missing or unrecognized tokens, which the heatmap
    leaves out of its counts.
    """
    if not is_present(token):
        return None
    try:
        return RatingToken(token.strip().lower())
    except ValueError:
        return None
