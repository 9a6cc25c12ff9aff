from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from cardrewards.domain.flags import UNFLAGGED, FlagColor, normalise_flag_color

RewardType = Literal["cashback", "miles"]


class CardSubcategory(BaseModel):
    id: str
    name: str
    flag_color: FlagColor = UNFLAGGED
    reward_value: float | None = None
    miles_block_size: int | None = None
    minimum_spend: float | None = None
    maximum_spend: float | None = None
    priority: int = 0
    active: bool | None = True
    exclude_from_rewards: bool = False

    @field_validator("flag_color", mode="before")
    @classmethod
    def _normalise_flag(cls, value):
        return normalise_flag_color(value if isinstance(value, str) else None)


class BillingCycle(BaseModel):
    type: Literal["calendar", "billing"] = "calendar"
    day_of_month: int | None = Field(default=None, ge=1, le=31)


class CreditCard(BaseModel):
    id: str
    name: str
    issuer: str = ""
    type: RewardType = "cashback"
    ynab_account_id: str = ""
    featured: bool = False
    billing_cycle: BillingCycle | None = None
    # cashback: percent of spend, miles: miles per currency unit
    earning_rate: float | None = None
    earning_block_size: int | None = None
    minimum_spend: float | None = None
    maximum_spend: float | None = None
    subcategories_enabled: bool | None = None
    subcategories: list[CardSubcategory | None] = Field(default_factory=list)


class Transaction(BaseModel):
    """A budgeting-app transaction; amount is in signed milliunits, outflows are negative."""

    id: str
    date: date
    amount: int
    account_id: str
    payee_name: str | None = None
    category_name: str | None = None
    flag_color: str | None = None
    flag_name: str | None = None

    @property
    def spend(self) -> float:
        return abs(self.amount) / 1000


class CategoryCap(BaseModel):
    category: str
    max_spend: float = Field(gt=0)


class RewardRule(BaseModel):
    id: str
    card_id: str
    name: str
    reward_type: RewardType
    reward_value: float
    miles_block_size: int | None = None
    categories: list[str] = Field(default_factory=list)
    minimum_spend: float | None = None
    maximum_spend: float | None = None
    category_caps: list[CategoryCap] = Field(default_factory=list)
    start_date: date
    end_date: date
    active: bool = True
    priority: int = 0


class AppSettings(BaseModel):
    # dollar value of a single mile
    miles_valuation: float = 0.01


class CardPeriod(BaseModel):
    start_date: date
    end_date: date
    label: str


class TransactionReward(BaseModel):
    reward: float
    reward_dollars: float
    reward_rate: float
    block_info: str | None = None


class SubcategoryCalculation(BaseModel):
    id: str
    name: str
    flag_color: FlagColor
    total_spend: float
    eligible_spend_before_blocks: float
    eligible_spend: float
    reward_rate: float
    reward_earned: float
    reward_earned_dollars: float
    minimum_spend: float | None = None
    minimum_spend_met: bool
    maximum_spend: float | None = None
    maximum_spend_exceeded: bool
    block_size: int | None = None
    blocks_earned: int | None = None
    active: bool
    excluded: bool


class CardRewardsCalculation(BaseModel):
    card_id: str
    period: str
    reward_type: RewardType
    total_spend: float
    eligible_spend: float
    eligible_spend_before_blocks: float
    reward_earned: float
    reward_earned_dollars: float
    minimum_spend: float | None = None
    minimum_spend_met: bool
    minimum_spend_progress: float | None = None
    maximum_spend: float | None = None
    maximum_spend_exceeded: bool
    maximum_spend_progress: float | None = None
    subcategory_breakdowns: list[SubcategoryCalculation] | None = None


class TagMapping(BaseModel):
    id: str
    card_id: str
    ynab_tag: str
    reward_category: str


class CategoryBreakdown(BaseModel):
    category: str
    spend: float
    reward: float
    reward_dollars: float
    cap_reached: bool


class RuleRewardsCalculation(BaseModel):
    card_id: str
    rule_id: str
    period: str
    reward_type: RewardType
    total_spend: float
    eligible_spend: float
    reward_earned: float
    reward_earned_dollars: float
    minimum_progress: float | None = None
    maximum_progress: float | None = None
    minimum_met: bool
    maximum_exceeded: bool
    should_stop_using: bool
    category_breakdowns: list[CategoryBreakdown] = Field(default_factory=list)
