from datetime import date

from dateutil.relativedelta import relativedelta

from cardrewards.domain.models import CardPeriod, CreditCard, RewardRule


def _billing_day(card: CreditCard) -> int | None:
    cycle = card.billing_cycle
    if cycle is not None and cycle.type == "billing" and cycle.day_of_month:
        return cycle.day_of_month
    return None


def _cycle_start(month_anchor: date, requested_day: int) -> date:
    # relativedelta(day=N) clamps to the last day of short months
    return month_anchor + relativedelta(day=requested_day)


def calculate_card_period(card: CreditCard, target_date: date | None = None) -> CardPeriod:
    """Return the reward period containing target_date.

    Calendar cards use the calendar month. Cards on a billing cycle start each
    period on the configured day, clamped to the month length; a date before
    this month's cycle start belongs to the previous cycle.
    """
    ref = target_date or date.today()
    month_anchor = ref.replace(day=1)
    billing_day = _billing_day(card)

    if billing_day is not None:
        current_start = _cycle_start(month_anchor, billing_day)
        if ref < current_start:
            start = _cycle_start(month_anchor - relativedelta(months=1), billing_day)
            end = current_start - relativedelta(days=1)
        else:
            start = current_start
            end = _cycle_start(month_anchor + relativedelta(months=1), billing_day) - relativedelta(days=1)
    else:
        start = month_anchor
        end = start + relativedelta(months=1) - relativedelta(days=1)

    return CardPeriod(start_date=start, end_date=end, label=start.strftime("%Y-%m"))


def get_recent_card_periods(card: CreditCard, count: int = 3, today: date | None = None) -> list[CardPeriod]:
    """Current period first, then the previous count - 1 periods."""
    current = calculate_card_period(card, today)
    month_anchor = current.start_date.replace(day=1)
    billing_day = _billing_day(card) or 1

    periods: list[CardPeriod] = []
    for offset in range(count):
        target = _cycle_start(month_anchor - relativedelta(months=offset), billing_day)
        periods.append(calculate_card_period(card, target))
    return periods


def period_overlaps_window(
    period_start: date,
    period_end: date,
    window_start: date,
    window_end: date,
) -> bool:
    return period_start <= window_end and period_end >= window_start


def rule_applies_to_period(rule: RewardRule, period: CardPeriod) -> bool:
    if not rule.active:
        return False
    return period_overlaps_window(period.start_date, period.end_date, rule.start_date, rule.end_date)
