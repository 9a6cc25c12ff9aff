import json
import logging
from pathlib import Path

from cardrewards.domain.models import CreditCard, RewardRule, TagMapping, Transaction

logger = logging.getLogger(__name__)


class CardStore:
    """Read-only access to cards, rules and imported transactions kept in a JSON file.

    The file holds an object with "cards", "rules", "tag_mappings" and
    "transactions" lists; a bare list is read as the cards.
    """

    def __init__(self, card_file: str):
        self.card_file = Path(card_file)

    def _load(self) -> dict:
        if not self.card_file.exists():
            raise FileNotFoundError(f"Card file not found: {self.card_file}")

        with self.card_file.open("r", encoding="utf-8") as fh:
            data = json.load(fh)

        if isinstance(data, list):
            return {"cards": data}
        return data

    def load_cards(self) -> list[CreditCard]:
        cards = [CreditCard.model_validate(item) for item in self._load().get("cards", [])]
        logger.info("Loaded %d card(s) from %s", len(cards), self.card_file)
        return cards

    def load_rules(self) -> list[RewardRule]:
        return [RewardRule.model_validate(item) for item in self._load().get("rules", [])]

    def load_tag_mappings(self) -> list[TagMapping]:
        return [TagMapping.model_validate(item) for item in self._load().get("tag_mappings", [])]

    def load_transactions(self) -> list[Transaction]:
        return [Transaction.model_validate(item) for item in self._load().get("transactions", [])]
