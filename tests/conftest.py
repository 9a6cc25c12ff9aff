from pathlib import Path

import pytest

from cardrewards.domain.models import CardSubcategory, CreditCard

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SAMPLE_CARDS_PATH = PROJECT_ROOT / "data" / "cards" / "sample_cards.json"


@pytest.fixture
def sample_cards_path() -> Path:
    return SAMPLE_CARDS_PATH


@pytest.fixture
def make_card():
    def _make(**overrides) -> CreditCard:
        data = {
            "id": "card-1",
            "name": "Card",
            "issuer": "Issuer",
            "type": "cashback",
            "ynab_account_id": "account-1",
            "featured": True,
            "earning_rate": 1.5,
            "subcategories_enabled": True,
            "subcategories": [],
        }
        data.update(overrides)
        return CreditCard.model_validate(data)

    return _make


@pytest.fixture
def make_subcategory():
    def _make(**overrides) -> CardSubcategory:
        data = {
            "id": "sub-1",
            "name": "Subcategory",
            "flag_color": "unflagged",
            "reward_value": 2,
            "priority": 0,
            "active": True,
        }
        data.update(overrides)
        return CardSubcategory.model_validate(data)

    return _make
