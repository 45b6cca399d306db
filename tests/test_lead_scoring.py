import pytest

from app.application.services.lead_scoring import calculate_lead_score, grade_for, parse_budget_range


def test_example_lead_scores_seventy_grade_b_growth():
    result = calculate_lead_score({
        "budget_currency": "USD",
        "monthly_budget_range": "6000",
        "decision_maker": True,
        "response_within_5_min": True,
        "timeline": "immediate",
    })
    assert (result.score, result.grade, result.recommended_package) == (70, "B", "growth")


@pytest.mark.parametrize("value,expected", [
    ("5,000-10,000", 5000),
    ("2000+", 2000),
    ("under 1000", 1000),
    ("", 0),
    ("not sure", 0),
])
def test_parse_budget_range_takes_lower_bound(value, expected):
    assert parse_budget_range(value) == expected


@pytest.mark.parametrize("score,grade", [(100, "A"), (75, "A"), (74, "B"), (55, "B"), (35, "C"), (34, "D"), (0, "D")])
def test_grade_thresholds(score, grade):
    assert grade_for(score) == grade


def test_budget_ignored_for_unknown_currency():
    result = calculate_lead_score({"budget_currency": "EUR", "monthly_budget_range": "9000", "timeline": "2weeks"})
    assert result.score == 5
    assert result.recommended_package == "starter"


def test_best_possible_lead_tops_out_at_grade_b():
    result = calculate_lead_score({
        "budget_currency": "AED",
        "monthly_budget_range": "10,000+",
        "decision_maker": True,
        "response_within_5_min": True,
        "timeline": "immediate",
        "extra": "ignored",
    })
    assert result.score == 70
    assert result.grade == "B"
