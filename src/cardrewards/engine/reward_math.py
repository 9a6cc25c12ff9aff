import math
from dataclasses import dataclass

from cardrewards.domain.models import CardSubcategory, CreditCard


@dataclass(frozen=True)
class BlockResult:
    amount: float
    blocks: int


def get_reward_rate(card: CreditCard, subcategory: CardSubcategory | None = None) -> float:
    if subcategory is not None and subcategory.reward_value is not None:
        return subcategory.reward_value
    return card.earning_rate if card.earning_rate is not None else 0


def get_block_size(card: CreditCard, subcategory: CardSubcategory | None = None) -> int | None:
    """Return the rounding block for a card, preferring the subcategory's.

    The subcategory override is not gated on the card type. Zero and missing
    both mean no rounding.
    """
    if subcategory is not None and subcategory.miles_block_size and subcategory.miles_block_size > 0:
        return subcategory.miles_block_size
    if card.earning_block_size and card.earning_block_size > 0:
        return card.earning_block_size
    return None


def apply_block(amount: float, block_size: float | None) -> BlockResult:
    if not block_size or block_size <= 0:
        return BlockResult(amount=amount, blocks=0)

    blocks = math.floor(amount / block_size)
    return BlockResult(amount=blocks * block_size, blocks=blocks)
