from collections import defaultdict
from datetime import date

from cardrewards.domain.models import TagMapping, Transaction

UNCATEGORISED = "uncategorized"


def is_outflow(txn: Transaction) -> bool:
    return txn.amount < 0


def match_reward_category(txn: Transaction, mappings: list[TagMapping]) -> str | None:
    """First mapping whose tag equals the transaction's flag colour or flag name."""
    for mapping in mappings:
        if txn.flag_color and mapping.ynab_tag == txn.flag_color:
            return mapping.reward_category
        if txn.flag_name and mapping.ynab_tag == txn.flag_name:
            return mapping.reward_category
    return None


def filter_for_card(transactions: list[Transaction], account_id: str) -> list[Transaction]:
    return [txn for txn in transactions if txn.account_id == account_id and is_outflow(txn)]


def filter_by_date_range(transactions: list[Transaction], start: date, end: date) -> list[Transaction]:
    return [txn for txn in transactions if start <= txn.date <= end]


def group_by_category(
    transactions: list[Transaction],
    mappings: list[TagMapping],
) -> dict[str, list[Transaction]]:
    groups: dict[str, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        groups[match_reward_category(txn, mappings) or UNCATEGORISED].append(txn)
    return dict(groups)


def find_unmapped_transactions(transactions: list[Transaction], mappings: list[TagMapping]) -> list[Transaction]:
    return [
        txn
        for txn in transactions
        if is_outflow(txn)
        and (txn.flag_color or txn.flag_name)
        and match_reward_category(txn, mappings) is None
    ]


def total_spend(transactions: list[Transaction]) -> float:
    return sum(txn.spend for txn in transactions)
