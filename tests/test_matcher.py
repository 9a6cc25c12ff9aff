from datetime import date

from cardrewards.domain.models import TagMapping, Transaction
from cardrewards.engine.matcher import (
    UNCATEGORISED,
    filter_by_date_range,
    filter_for_card,
    find_unmapped_transactions,
    group_by_category,
    match_reward_category,
    total_spend,
)

MAPPINGS = [
    TagMapping(id="m1", card_id="c1", ynab_tag="red", reward_category="Dining"),
    TagMapping(id="m2", card_id="c1", ynab_tag="Groceries run", reward_category="Groceries"),
]


def txn(txn_id: str, amount: int, **extra) -> Transaction:
    data = {"id": txn_id, "date": "2025-03-10", "amount": amount, "account_id": "acct"}
    data.update(extra)
    return Transaction.model_validate(data)


def test_matches_by_flag_colour_or_flag_name() -> None:
    assert match_reward_category(txn("a", -1000, flag_color="red"), MAPPINGS) == "Dining"
    assert match_reward_category(txn("b", -1000, flag_name="Groceries run"), MAPPINGS) == "Groceries"
    assert match_reward_category(txn("c", -1000, flag_color="blue"), MAPPINGS) is None


def test_filter_for_card_keeps_outflows_of_account() -> None:
    transactions = [txn("a", -1000), txn("b", 1000), txn("c", -1000, account_id="other")]

    assert [t.id for t in filter_for_card(transactions, "acct")] == ["a"]


def test_filter_by_date_range_is_inclusive() -> None:
    transactions = [txn("a", -1, date="2025-03-01"), txn("b", -1, date="2025-03-31"), txn("c", -1, date="2025-04-01")]

    kept = filter_by_date_range(transactions, date(2025, 3, 1), date(2025, 3, 31))

    assert [t.id for t in kept] == ["a", "b"]


def test_group_by_category_and_unmapped() -> None:
    transactions = [
        txn("a", -12_000, flag_color="red"),
        txn("b", -3_500),
        txn("c", -8_000, flag_color="green"),
    ]

    groups = group_by_category(transactions, MAPPINGS)

    assert [t.id for t in groups["Dining"]] == ["a"]
    assert [t.id for t in groups[UNCATEGORISED]] == ["b", "c"]
    assert [t.id for t in find_unmapped_transactions(transactions, MAPPINGS)] == ["c"]
    assert total_spend(transactions) == 23.5
