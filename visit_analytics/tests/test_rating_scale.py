"""
Tests for qualitative token scoring.

Covers the five-level scale, the yes/no scale, case handling, presence
checks and field-driven scale selection.
"""

import pytest

from visit_analytics.models.enums import QualitativeField, RatingToken
from visit_analytics.services.rating_scale import (
    MAX_SCORE,
    is_present,
    normalize_rating,
    score_field,
    to_score,
)


class TestFiveLevelScale:
    """Five-level rating tokens map onto 1-5."""

    @pytest.mark.parametrize("token,expected", [
        ("excellent", 5.0),
        ("good", 4.0),
        ("neutral", 3.0),
        ("poor", 2.0),
        ("very_poor", 1.0),
    ])
    def test_known_tokens(self, token, expected):
        assert to_score(token) == expected

    @pytest.mark.parity
    def test_boundaries(self):
        assert to_score("excellent", False) == 5.0
        assert to_score("very_poor", False) == 1.0
        assert to_score(None, False) == 0.0

    def test_matching_ignores_case_and_whitespace(self):
        assert to_score("Excellent") == 5.0
        assert to_score("  VERY_POOR ") == 1.0

    def test_unrecognized_token_scores_zero(self):
        assert to_score("outstanding") == 0.0
        assert to_score("yes") == 0.0

    def test_blank_token_scores_zero(self):
        assert to_score("") == 0.0
        assert to_score("   ") == 0.0


class TestBooleanScale:
    """Yes/no answers score 5 or 0."""

    @pytest.mark.parity
    def test_yes_and_no(self):
        assert to_score("yes", True) == MAX_SCORE
        assert to_score("no", True) == 0.0

    def test_yes_is_case_insensitive(self):
        assert to_score("YES", True) == 5.0
        assert to_score("Yes", True) == 5.0

    def test_anything_else_scores_zero(self):
        assert to_score(None, True) == 0.0
        assert to_score("excellent", True) == 0.0
        assert to_score("y", True) == 0.0


class TestPresence:
    def test_is_present(self):
        assert is_present("no")
        assert is_present("neutral")
        assert not is_present(None)
        assert not is_present("")
        assert not is_present("  ")

    def test_negative_answer_and_missing_answer_both_score_zero(self):
        """Only is_present tells them apart."""
        assert to_score("no", True) == to_score(None, True) == 0.0
        assert is_present("no") and not is_present(None)


class TestScoreField:
    """The field's declared kind picks the scale."""

    def test_culture_pulse_fields_use_boolean_scale(self):
        assert score_field(QualitativeField.LEADERS_ALIGNED, "yes") == 5.0
        assert score_field(QualitativeField.INCLUSIVE_CULTURE, "good") == 0.0

    def test_rated_fields_use_five_level_scale(self):
        assert score_field(QualitativeField.BRANCH_HYGIENE, "good") == 4.0
        assert score_field(QualitativeField.BRANCH_CULTURE, "yes") == 0.0

    def test_field_kinds(self):
        boolean_fields = [f for f in QualitativeField if f.is_boolean]
        assert len(boolean_fields) == 6
        assert not QualitativeField.OVERALL_DISCIPLINE.is_boolean


class TestNormalizeRating:
    def test_parses_known_tokens(self):
        assert normalize_rating("Good") is RatingToken.GOOD
        assert normalize_rating("very_poor") is RatingToken.VERY_POOR

    def test_missing_or_unknown_returns_none(self):
        assert normalize_rating(None) is None
        assert normalize_rating("") is None
        assert normalize_rating("great") is None
