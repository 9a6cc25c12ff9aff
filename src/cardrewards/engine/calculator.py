import logging
import math
from dataclasses import dataclass

from cardrewards.domain.flags import normalise_flag_color
from cardrewards.domain.models import (
    AppSettings,
    CardPeriod,
    CardRewardsCalculation,
    CardSubcategory,
    CategoryBreakdown,
    CreditCard,
    RewardRule,
    RewardType,
    RuleRewardsCalculation,
    SubcategoryCalculation,
    TagMapping,
    Transaction,
    TransactionReward,
)
from cardrewards.engine.matcher import match_reward_category
from cardrewards.engine.reward_math import apply_block, get_block_size, get_reward_rate
from cardrewards.engine.spend_limits import (
    calculate_eligible_spend,
    calculate_maximum_spend_progress,
    calculate_minimum_spend_progress,
    has_maximum_spend_limit,
    is_maximum_spend_exceeded,
    is_minimum_spend_met,
)
from cardrewards.engine.subcategories import SubcategoryContext, create_subcategory_context, resolve_subcategory

logger = logging.getLogger(__name__)

DEFAULT_MILES_VALUATION = 0.01


def _miles_valuation(settings: AppSettings | None) -> float:
    if settings is not None and settings.miles_valuation:
        return settings.miles_valuation
    return DEFAULT_MILES_VALUATION


def _reward_for(reward_type: RewardType, eligible: float, rate: float, valuation: float) -> tuple[float, float]:
    """Return (reward units, reward in dollars). Cashback rates are percentages."""
    if reward_type == "cashback":
        reward = eligible * rate / 100
        return reward, reward
    reward = eligible * rate
    return reward, reward * valuation


def calculate_transaction_reward(
    amount: float,
    card: CreditCard,
    settings: AppSettings | None = None,
    flag_color: str | None = None,
) -> TransactionReward:
    """Reward earned by a single purchase of `amount` dollars on `card`."""
    context = create_subcategory_context(card)
    subcategory = resolve_subcategory(context, normalise_flag_color(flag_color))

    rate = get_reward_rate(card, subcategory)
    if not rate:
        return TransactionReward(reward=0, reward_dollars=0, reward_rate=0)

    block_size = get_block_size(card, subcategory)
    block = apply_block(amount, block_size)
    reward, reward_dollars = _reward_for(card.type, block.amount, rate, _miles_valuation(settings))

    block_info = None
    if block_size and block.blocks > 0:
        plural = "s" if block.blocks != 1 else ""
        block_info = f"{block.blocks} block{plural} × ${block_size}"

    return TransactionReward(
        reward=reward,
        reward_dollars=reward_dollars,
        reward_rate=rate,
        block_info=block_info,
    )


@dataclass
class _Totals:
    eligible_spend: float = 0.0
    eligible_spend_before_blocks: float = 0.0
    reward_earned: float = 0.0
    reward_earned_dollars: float = 0.0
    breakdowns: list[SubcategoryCalculation] | None = None

    def add(self, before_blocks: float, eligible: float, reward: float, reward_dollars: float) -> None:
        self.eligible_spend_before_blocks += before_blocks
        self.eligible_spend += eligible
        self.reward_earned += reward
        self.reward_earned_dollars += reward_dollars


def _excluded_breakdown(subcategory: CardSubcategory, total: float) -> SubcategoryCalculation:
    return SubcategoryCalculation(
        id=subcategory.id,
        name=subcategory.name,
        flag_color=subcategory.flag_color,
        total_spend=total,
        eligible_spend_before_blocks=0,
        eligible_spend=0,
        reward_rate=0,
        reward_earned=0,
        reward_earned_dollars=0,
        minimum_spend=subcategory.minimum_spend,
        minimum_spend_met=False,
        maximum_spend=subcategory.maximum_spend,
        maximum_spend_exceeded=False,
        block_size=None,
        active=subcategory.active is not False,
        excluded=True,
    )


def _subcategory_totals(
    card: CreditCard,
    context: SubcategoryContext,
    spend_by_subcategory: dict[str, float],
    card_minimum_met: bool,
    valuation: float,
) -> _Totals:
    totals = _Totals(breakdowns=[])
    has_card_cap = has_maximum_spend_limit(card.maximum_spend)
    remaining_card_cap = card.maximum_spend if has_card_cap else math.inf

    for subcategory in context.active_subcategories:
        total = spend_by_subcategory.get(subcategory.id, 0.0)
        if subcategory.exclude_from_rewards:
            totals.breakdowns.append(_excluded_breakdown(subcategory, total))
            continue

        rate = get_reward_rate(card, subcategory)
        block_size = get_block_size(card, subcategory)
        maximum_allowed = subcategory.maximum_spend if has_maximum_spend_limit(subcategory.maximum_spend) else None
        minimum_met = card_minimum_met and is_minimum_spend_met(total, subcategory.minimum_spend)

        before_blocks = eligible = reward = reward_dollars = 0.0
        blocks = 0
        if minimum_met and rate > 0 and total > 0:
            before_blocks = min(calculate_eligible_spend(total, maximum_allowed), remaining_card_cap)
            block = apply_block(before_blocks, block_size)
            eligible, blocks = block.amount, block.blocks
            reward, reward_dollars = _reward_for(card.type, eligible, rate, valuation)
            totals.add(before_blocks, eligible, reward, reward_dollars)
            if has_card_cap:
                remaining_card_cap = max(0.0, remaining_card_cap - before_blocks)

        card_cap_hit = has_card_cap and remaining_card_cap <= 0
        totals.breakdowns.append(
            SubcategoryCalculation(
                id=subcategory.id,
                name=subcategory.name,
                flag_color=subcategory.flag_color,
                total_spend=total,
                eligible_spend_before_blocks=before_blocks,
                eligible_spend=eligible,
                reward_rate=rate,
                reward_earned=reward,
                reward_earned_dollars=reward_dollars,
                minimum_spend=subcategory.minimum_spend,
                minimum_spend_met=minimum_met,
                maximum_spend=maximum_allowed,
                maximum_spend_exceeded=is_maximum_spend_exceeded(total, maximum_allowed) or card_cap_hit,
                block_size=block_size,
                blocks_earned=blocks or None,
                active=subcategory.active is not False,
                excluded=False,
            )
        )

    return totals


def _flat_totals(
    card: CreditCard,
    transactions: list[Transaction],
    card_minimum_met: bool,
    valuation: float,
) -> _Totals:
    totals = _Totals()
    if not card_minimum_met or not card.earning_rate:
        return totals

    block_size = get_block_size(card)
    remaining = card.maximum_spend if has_maximum_spend_limit(card.maximum_spend) else math.inf
    for txn in transactions:
        if remaining <= 0:
            break
        contribution = min(txn.spend, remaining)
        if contribution <= 0:
            continue
        totals.eligible_spend_before_blocks += contribution
        # blocks are counted per purchase, not on the period total
        totals.eligible_spend += apply_block(contribution, block_size).amount
        remaining -= contribution

    if totals.eligible_spend > 0:
        totals.reward_earned, totals.reward_earned_dollars = _reward_for(
            card.type, totals.eligible_spend, card.earning_rate, valuation
        )
    return totals


def calculate_card_rewards(
    card: CreditCard,
    transactions: list[Transaction],
    period: CardPeriod,
    settings: AppSettings | None = None,
) -> CardRewardsCalculation:
    """Aggregate the rewards a card earned over one period."""
    valuation = _miles_valuation(settings)
    context = create_subcategory_context(card)
    period_txns = [
        txn for txn in transactions if period.start_date <= txn.date <= period.end_date and txn.amount < 0
    ]

    use_subcategories = context.enabled and bool(context.active_subcategories)
    spend_by_subcategory: dict[str, float] = {}
    if use_subcategories:
        total_spend = 0.0
        for txn in period_txns:
            subcategory = resolve_subcategory(context, normalise_flag_color(txn.flag_color))
            if subcategory is None:
                total_spend += txn.spend
                continue
            if subcategory.exclude_from_rewards:
                continue
            total_spend += txn.spend
            spend_by_subcategory[subcategory.id] = spend_by_subcategory.get(subcategory.id, 0.0) + txn.spend
    else:
        total_spend = abs(sum(txn.amount for txn in period_txns)) / 1000

    minimum_met = is_minimum_spend_met(total_spend, card.minimum_spend)
    if use_subcategories:
        totals = _subcategory_totals(card, context, spend_by_subcategory, minimum_met, valuation)
    else:
        totals = _flat_totals(card, period_txns, minimum_met, valuation)

    maximum_exceeded = is_maximum_spend_exceeded(total_spend, card.maximum_spend) or (
        has_maximum_spend_limit(card.maximum_spend)
        and totals.eligible_spend_before_blocks >= card.maximum_spend
    )

    logger.debug(
        "card %s period %s: %d transactions, spend %.2f, reward %.2f",
        card.id,
        period.label,
        len(period_txns),
        total_spend,
        totals.reward_earned,
    )

    return CardRewardsCalculation(
        card_id=card.id,
        period=period.label,
        reward_type=card.type,
        total_spend=total_spend,
        eligible_spend=totals.eligible_spend,
        eligible_spend_before_blocks=totals.eligible_spend_before_blocks,
        reward_earned=totals.reward_earned,
        reward_earned_dollars=totals.reward_earned_dollars,
        minimum_spend=card.minimum_spend,
        minimum_spend_met=minimum_met,
        minimum_spend_progress=calculate_minimum_spend_progress(total_spend, card.minimum_spend),
        maximum_spend=card.maximum_spend,
        maximum_spend_exceeded=maximum_exceeded,
        maximum_spend_progress=calculate_maximum_spend_progress(
            totals.eligible_spend_before_blocks, card.maximum_spend
        ),
        subcategory_breakdowns=totals.breakdowns,
    )


def calculate_rule_rewards(
    rule: RewardRule,
    transactions: list[Transaction],
    period: CardPeriod,
    mappings: list[TagMapping],
    settings: AppSettings | None = None,
) -> RuleRewardsCalculation:
    """Rewards earned under a category-scoped reward rule.

    Transactions are assigned a reward category through the tag mappings. Each
    category is limited by its own cap; the rule-wide maximum then scales all
    category rewards down proportionally.
    """
    valuation = _miles_valuation(settings)
    rule_categories = {category.lower() for category in rule.categories}
    caps = {cap.category.lower(): cap.max_spend for cap in rule.category_caps}

    spend_by_category: dict[str, float] = {}
    for txn in transactions:
        if not (period.start_date <= txn.date <= period.end_date) or txn.amount >= 0:
            continue
        category = match_reward_category(txn, mappings)
        if category is None or category.lower() not in rule_categories:
            continue
        spend_by_category[category] = spend_by_category.get(category, 0.0) + txn.spend

    total_spend = sum(spend_by_category.values())
    breakdowns: list[CategoryBreakdown] = []
    for category, spend in spend_by_category.items():
        cap = caps.get(category.lower())
        cap_reached = cap is not None and spend > cap
        eligible = cap if cap_reached else spend
        if rule.reward_type == "miles":
            eligible = apply_block(eligible, rule.miles_block_size).amount
        reward, reward_dollars = _reward_for(rule.reward_type, eligible, rule.reward_value, valuation)
        breakdowns.append(
            CategoryBreakdown(
                category=category,
                spend=spend,
                reward=reward,
                reward_dollars=reward_dollars,
                cap_reached=cap_reached,
            )
        )

    eligible_spend = total_spend
    if has_maximum_spend_limit(rule.maximum_spend):
        if total_spend > rule.maximum_spend:
            scale = rule.maximum_spend / total_spend
            for breakdown in breakdowns:
                breakdown.reward *= scale
                breakdown.reward_dollars *= scale
        eligible_spend = min(total_spend, rule.maximum_spend)

    maximum_exceeded = is_maximum_spend_exceeded(eligible_spend, rule.maximum_spend)
    return RuleRewardsCalculation(
        card_id=rule.card_id,
        rule_id=rule.id,
        period=period.label,
        reward_type=rule.reward_type,
        total_spend=total_spend,
        eligible_spend=eligible_spend,
        reward_earned=sum(item.reward for item in breakdowns),
        reward_earned_dollars=sum(item.reward_dollars for item in breakdowns),
        minimum_progress=calculate_minimum_spend_progress(eligible_spend, rule.minimum_spend),
        maximum_progress=calculate_maximum_spend_progress(eligible_spend, rule.maximum_spend),
        minimum_met=is_minimum_spend_met(eligible_spend, rule.minimum_spend),
        maximum_exceeded=maximum_exceeded,
        should_stop_using=maximum_exceeded,
        category_breakdowns=breakdowns,
    )


def calculate_effective_rate(calculation: CardRewardsCalculation) -> float:
    """Reward value as a percentage of total spend."""
    if calculation.total_spend == 0:
        return 0.0
    return calculation.reward_earned_dollars / calculation.total_spend * 100
