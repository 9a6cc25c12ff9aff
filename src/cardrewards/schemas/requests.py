from datetime import date

from pydantic import BaseModel, Field


class TransactionRewardRequest(BaseModel):
    amount: float = Field(ge=0)
    flag_color: str | None = None
    card_id: str | None = None


class CardRewardsRequest(BaseModel):
    card_id: str | None = None
    reference_date: date | None = None
