import logging
from dataclasses import dataclass, field

from cardrewards.domain.flags import UNFLAGGED, FlagColor
from cardrewards.domain.models import CardSubcategory, CreditCard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubcategoryContext:
    enabled: bool
    active_subcategories: list[CardSubcategory] = field(default_factory=list)
    map: dict[FlagColor, CardSubcategory] = field(default_factory=dict)
    fallback: CardSubcategory | None = None


def create_subcategory_context(card: CreditCard) -> SubcategoryContext:
    """Build the flag -> subcategory lookup for a card.

    Active subcategories are sorted ascending by priority and then written into
    the map in that order. When two subcategories share a flag the later write
    wins, so the one with the highest priority value owns the slot.
    """
    enabled = bool(card.subcategories_enabled)
    if not enabled:
        return SubcategoryContext(enabled=False)

    active = [sub for sub in card.subcategories or [] if sub is not None and sub.active is not False]
    active.sort(key=lambda sub: sub.priority)

    lookup: dict[FlagColor, CardSubcategory] = {}
    for sub in active:
        lookup[sub.flag_color] = sub

    return SubcategoryContext(
        enabled=True,
        active_subcategories=active,
        map=lookup,
        fallback=lookup.get(UNFLAGGED),
    )


def resolve_subcategory(context: SubcategoryContext, flag_color: FlagColor) -> CardSubcategory | None:
    if not context.enabled:
        return None

    subcategory = context.map.get(flag_color)
    if subcategory is None:
        subcategory = context.fallback
    logger.debug(
        "flag %s resolved to subcategory %s",
        flag_color.value,
        subcategory.id if subcategory else None,
    )
    return subcategory
