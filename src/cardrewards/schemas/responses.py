from pydantic import BaseModel

from cardrewards.domain.flags import FlagColor
from cardrewards.domain.models import CardPeriod, CardRewardsCalculation, RuleRewardsCalculation, TransactionReward


class CardTransactionReward(BaseModel):
    card_id: str
    card_name: str
    reward: TransactionReward


class TransactionRewardResponse(BaseModel):
    flag_color: FlagColor
    best_card: CardTransactionReward
    ranked_cards: list[CardTransactionReward]


class CardPeriodRewards(BaseModel):
    card_id: str
    card_name: str
    period: CardPeriod
    calculation: CardRewardsCalculation
    effective_rate: float
    rule_calculations: list[RuleRewardsCalculation]


class CardRewardsResponse(BaseModel):
    cards: list[CardPeriodRewards]
