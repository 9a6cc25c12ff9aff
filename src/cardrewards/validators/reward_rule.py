"""Validation of user-authored reward rules.

Validation happens in two passes. The structural pass is the pydantic model
below; every field that fails it is reported. The cross-field pass then
checks the relations between fields and collects every issue it finds. It runs
over whatever parsed, so a structural error in one field does not hide a
relation broken between two others. The caller gets at most one message per field, the first one raised.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from dateutil.parser import isoparse
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

FORM_ERROR_KEY = "form"

_REQUIRED_MESSAGES = {
    "id": "Rule id is required",
    "card_id": "Card id is required",
    "name": "Rule name is required",
}


class CategoryCapInput(BaseModel):
    category: str = Field(min_length=1)
    max_spend: float = Field(gt=0)


class RewardRuleInput(BaseModel):
    id: str
    card_id: str
    name: str
    reward_type: Literal["cashback", "miles"]
    reward_value: float = Field(gt=0)
    miles_block_size: int | None = Field(default=None, gt=0)
    categories: list[Annotated[str, Field(min_length=1)]] = Field(default_factory=list)
    minimum_spend: float | None = Field(default=None, ge=0)
    maximum_spend: float | None = Field(default=None, gt=0)
    category_caps: list[CategoryCapInput] | None = None
    start_date: str = Field(min_length=1)
    end_date: str = Field(min_length=1)
    active: bool = True
    priority: int = 0

    @field_validator("id", "card_id", "name")
    @classmethod
    def _not_blank(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("blank", _REQUIRED_MESSAGES[info.field_name])
        return value


class ValidationSuccess(BaseModel):
    ok: Literal[True] = True
    value: RewardRuleInput


class ValidationFailure(BaseModel):
    ok: Literal[False] = False
    errors: dict[str, str]


ValidationResult = ValidationSuccess | ValidationFailure


def _parse_date(value: str) -> datetime | None:
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parsed_fields(data: Mapping[str, Any], failed: frozenset[str]) -> RewardRuleInput:
    """Rebuild the rule from the fields that passed the structural pass."""
    values = {}
    for name, field in RewardRuleInput.model_fields.items():
        if name in failed or name not in data:
            continue
        values[name] = TypeAdapter(field.annotation).validate_python(data[name])
    return RewardRuleInput.model_construct(**values)


def _cross_field_issues(rule: RewardRuleInput, failed: frozenset[str] = frozenset()) -> list[tuple[str, str]]:
    issues: list[tuple[str, str]] = []

    def usable(*names: str) -> bool:
        return not failed.intersection(names)

    if usable("reward_type", "miles_block_size"):
        if rule.reward_type == "cashback" and rule.miles_block_size is not None:
            issues.append(("miles_block_size", "Block size applies to miles only"))

    if usable("start_date", "end_date"):
        # dates that do not parse, including non-ISO ones, skip the ordering check
        start = _parse_date(rule.start_date)
        end = _parse_date(rule.end_date)
        if start is not None and end is not None and start > end:
            issues.append(("end_date", "End date must be on or after start date"))

    if usable("minimum_spend", "maximum_spend"):
        if rule.minimum_spend is not None and rule.maximum_spend is not None:
            if rule.minimum_spend >= rule.maximum_spend:
                issues.append(("maximum_spend", "Maximum spend must be greater than minimum spend"))

    if usable("categories", "category_caps"):
        known = {category.lower() for category in rule.categories}
        for cap in rule.category_caps or []:
            if cap.category.lower() not in known:
                issues.append(("category_caps", f"Cap refers to missing category: {cap.category}"))

    return issues


def _issue_field(loc: tuple) -> str:
    if loc and isinstance(loc[0], str):
        return loc[0]
    return FORM_ERROR_KEY


def validate_reward_rule(data: Mapping[str, Any] | RewardRuleInput) -> ValidationResult:
    issues: list[tuple[str, str]] = []
    rule: RewardRuleInput | None = None

    try:
        rule = RewardRuleInput.model_validate(data)
    except ValidationError as exc:
        issues.extend((_issue_field(error["loc"]), error["msg"]) for error in exc.errors())

    if rule is not None:
        issues.extend(_cross_field_issues(rule))
    elif isinstance(data, Mapping):
        failed = frozenset(field_name for field_name, _ in issues)
        issues.extend(_cross_field_issues(_parsed_fields(data, failed), failed))

    if not issues:
        return ValidationSuccess(value=rule)

    errors: dict[str, str] = {}
    for field_name, message in issues:
        errors.setdefault(field_name, message)
    return ValidationFailure(errors=errors)
