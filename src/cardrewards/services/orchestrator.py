import logging
from collections.abc import Mapping
from typing import Any

from cardrewards.domain.flags import normalise_flag_color
from cardrewards.domain.models import AppSettings, CreditCard
from cardrewards.engine.calculator import calculate_card_rewards, calculate_effective_rate, calculate_rule_rewards
from cardrewards.engine.matcher import filter_for_card
from cardrewards.engine.periods import calculate_card_period, rule_applies_to_period
from cardrewards.engine.selectors import rank_cards_for_purchase
from cardrewards.repository.card_store import CardStore
from cardrewards.schemas.requests import CardRewardsRequest, TransactionRewardRequest
from cardrewards.schemas.responses import (
    CardPeriodRewards,
    CardRewardsResponse,
    CardTransactionReward,
    TransactionRewardResponse,
)
from cardrewards.validators.reward_rule import ValidationResult, validate_reward_rule

logger = logging.getLogger(__name__)


class CardNotFoundError(LookupError):
    pass


class RewardsOrchestrator:
    def __init__(self, store: CardStore, app_settings: AppSettings | None = None):
        self.store = store
        self.app_settings = app_settings or AppSettings()

    def _select_cards(self, card_id: str | None) -> list[CreditCard]:
        cards = self.store.load_cards()
        if card_id is None:
            if not cards:
                raise ValueError("No cards available.")
            return cards

        selected = [card for card in cards if card.id == card_id]
        if not selected:
            raise CardNotFoundError(f"Unknown card: {card_id}")
        return selected

    def transaction_reward(self, request: TransactionRewardRequest) -> TransactionRewardResponse:
        cards = self._select_cards(request.card_id)
        ranked = rank_cards_for_purchase(cards, request.amount, request.flag_color, self.app_settings)
        rewards = [
            CardTransactionReward(card_id=card.id, card_name=card.name, reward=reward)
            for card, reward in ranked
        ]
        return TransactionRewardResponse(
            flag_color=normalise_flag_color(request.flag_color),
            best_card=rewards[0],
            ranked_cards=rewards,
        )

    def card_rewards(self, request: CardRewardsRequest) -> CardRewardsResponse:
        cards = self._select_cards(request.card_id)
        transactions = self.store.load_transactions()
        rules = self.store.load_rules()
        mappings = self.store.load_tag_mappings()

        results: list[CardPeriodRewards] = []
        for card in cards:
            period = calculate_card_period(card, request.reference_date)
            card_txns = filter_for_card(transactions, card.ynab_account_id) if card.ynab_account_id else []
            calculation = calculate_card_rewards(card, card_txns, period, self.app_settings)

            rule_calculations = []
            # subcategory cards are fully described by their subcategories
            if not card.subcategories_enabled:
                card_mappings = [mapping for mapping in mappings if mapping.card_id == card.id]
                rule_calculations = [
                    calculate_rule_rewards(rule, card_txns, period, card_mappings, self.app_settings)
                    for rule in rules
                    if rule.card_id == card.id and rule_applies_to_period(rule, period)
                ]

            results.append(
                CardPeriodRewards(
                    card_id=card.id,
                    card_name=card.name,
                    period=period,
                    calculation=calculation,
                    effective_rate=calculate_effective_rate(calculation),
                    rule_calculations=rule_calculations,
                )
            )

        logger.info("Calculated rewards for %d card(s)", len(results))
        return CardRewardsResponse(cards=results)

    def validate_rule(self, payload: Mapping[str, Any]) -> ValidationResult:
        result = validate_reward_rule(payload)
        if not result.ok:
            logger.info("Reward rule rejected: %s", ", ".join(sorted(result.errors)))
        return result
