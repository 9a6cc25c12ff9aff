from cardrewards.domain.models import (
    AppSettings,
    CardPeriod,
    CardRewardsCalculation,
    CreditCard,
    Transaction,
    TransactionReward,
)
from cardrewards.engine.calculator import calculate_card_rewards, calculate_transaction_reward


def rank_cards(
    cards: list[CreditCard],
    transactions: list[Transaction],
    period: CardPeriod,
    settings: AppSettings | None = None,
) -> list[tuple[CreditCard, CardRewardsCalculation]]:
    """Period calculations for every card with an earning rate, best value first."""
    ranked = [
        (card, calculate_card_rewards(card, transactions, period, settings))
        for card in cards
        if card.earning_rate
    ]
    ranked.sort(key=lambda item: item[1].reward_earned_dollars, reverse=True)
    return ranked


def find_best_card(
    cards: list[CreditCard],
    transactions: list[Transaction],
    period: CardPeriod,
    settings: AppSettings | None = None,
) -> tuple[CreditCard, CardRewardsCalculation] | None:
    ranked = rank_cards(cards, transactions, period, settings)
    return ranked[0] if ranked else None


def rank_cards_for_purchase(
    cards: list[CreditCard],
    amount: float,
    flag_color: str | None = None,
    settings: AppSettings | None = None,
) -> list[tuple[CreditCard, TransactionReward]]:
    ranked = [
        (card, calculate_transaction_reward(amount, card, settings, flag_color))
        for card in cards
    ]
    ranked.sort(key=lambda item: (item[1].reward_dollars, item[1].reward_rate), reverse=True)
    return ranked
