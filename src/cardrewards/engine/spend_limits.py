"""Minimum and maximum spend checks.

A threshold of None means "not configured", 0 means "no requirement" (or "no
limit") and a positive value is an active threshold.
"""

from typing import Literal


def has_minimum_spend_requirement(minimum_spend: float | None) -> bool:
    return minimum_spend is not None and minimum_spend > 0


def is_minimum_spend_met(total_spend: float, minimum_spend: float | None) -> bool:
    if not has_minimum_spend_requirement(minimum_spend):
        return True
    return total_spend >= minimum_spend


def calculate_minimum_spend_progress(total_spend: float, minimum_spend: float | None) -> float | None:
    if not has_minimum_spend_requirement(minimum_spend):
        return None
    return min(100.0, total_spend / minimum_spend * 100)


def get_minimum_spend_status(
    minimum_spend: float | None,
) -> Literal["not-configured", "no-minimum", "has-minimum"]:
    if minimum_spend is None:
        return "not-configured"
    return "no-minimum" if minimum_spend == 0 else "has-minimum"


def has_maximum_spend_limit(maximum_spend: float | None) -> bool:
    return maximum_spend is not None and maximum_spend > 0


def is_maximum_spend_exceeded(total_spend: float, maximum_spend: float | None) -> bool:
    if not has_maximum_spend_limit(maximum_spend):
        return False
    return total_spend >= maximum_spend


def calculate_maximum_spend_progress(total_spend: float, maximum_spend: float | None) -> float | None:
    if not has_maximum_spend_limit(maximum_spend):
        return None
    return min(100.0, total_spend / maximum_spend * 100)


def get_maximum_spend_status(
    maximum_spend: float | None,
) -> Literal["not-configured", "no-limit", "has-limit"]:
    if maximum_spend is None:
        return "not-configured"
    return "no-limit" if maximum_spend == 0 else "has-limit"


def calculate_eligible_spend(total_spend: float, maximum_spend: float | None) -> float:
    if not has_maximum_spend_limit(maximum_spend):
        return total_spend
    return min(total_spend, maximum_spend)
