import re
from dataclasses import dataclass
from typing import Any, Mapping

BUDGET_POINTS = ((5000, 25), (2000, 15), (1000, 5))
TIMELINE_POINTS = {"immediate": 10, "2weeks": 5}
GRADE_THRESHOLDS = ((75, "A"), (55, "B"), (35, "C"))
PACKAGE_BY_GRADE = {"A": "scale", "B": "growth"}


@dataclass
class LeadScore:
    score: int
    grade: str
    recommended_package: str


def parse_budget_range(value: str) -> int:
    """Lower bound of a budget range such as '5,000-10,000' or '6000+'."""
    match = re.search(r"\d+", (value or "").replace(",", ""))
    return int(match.group(0)) if match else 0


def grade_for(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "D"


def calculate_lead_score(data: Mapping[str, Any]) -> LeadScore:
    score = 0

    if data.get("budget_currency") in ("AED", "USD"):
        budget = parse_budget_range(data.get("monthly_budget_range", ""))
        for floor, points in BUDGET_POINTS:
            if budget >= floor:
                score += points
                break

    if data.get("decision_maker"):
        score += 20
    if data.get("response_within_5_min"):
        score += 15
    score += TIMELINE_POINTS.get(data.get("timeline"), 0)

    grade = grade_for(score)
    return LeadScore(score=score, grade=grade, recommended_package=PACKAGE_BY_GRADE.get(grade, "starter"))
