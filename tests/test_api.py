import pytest
from fastapi.testclient import TestClient

from cardrewards.api.app import app
from cardrewards.api.dependencies import get_orchestrator
from cardrewards.repository.card_store import CardStore
from cardrewards.services.orchestrator import RewardsOrchestrator


@pytest.fixture
def client(sample_cards_path):
    app.dependency_overrides[get_orchestrator] = lambda: RewardsOrchestrator(CardStore(str(sample_cards_path)))
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_transaction_reward(client) -> None:
    response = client.post("/rewards/transaction", json={"amount": 200, "flag_color": "red"})

    assert response.status_code == 200
    data = response.json()
    assert data["flag_color"] == "red"
    assert data["best_card"]["card_id"] == "flex_miles"
    assert len(data["ranked_cards"]) == 3


def test_transaction_reward_rejects_negative_amount(client) -> None:
    response = client.post("/rewards/transaction", json={"amount": -5})

    assert response.status_code == 422


def test_unknown_card_is_404(client) -> None:
    response = client.post("/rewards/cards", json={"card_id": "missing"})

    assert response.status_code == 404


def test_card_rewards(client) -> None:
    response = client.post("/rewards/cards", json={"card_id": "flex_miles", "reference_date": "2025-03-20"})

    assert response.status_code == 200
    cards = response.json()["cards"]
    assert len(cards) == 1
    assert cards[0]["period"]["label"] == "2025-03"
    assert cards[0]["calculation"]["reward_earned"] == pytest.approx(1080)


def test_validate_rule_reports_field_errors(client) -> None:
    response = client.post(
        "/rules/validate",
        json={
            "id": "r1",
            "card_id": "c1",
            "name": "Bad",
            "reward_type": "cashback",
            "reward_value": 2,
            "miles_block_size": 5,
            "start_date": "2025-02-01",
            "end_date": "2025-01-01",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is False
    assert set(data["errors"]) == {"miles_block_size", "end_date"}


def test_validate_rule_returns_defaulted_value(client) -> None:
    response = client.post(
        "/rules/validate",
        json={
            "id": "r1",
            "card_id": "c1",
            "name": "Good",
            "reward_type": "miles",
            "reward_value": 2,
            "miles_block_size": 5,
            "start_date": "2025-01-01",
            "end_date": "2025-01-01",
        },
    )

    data = response.json()
    assert data["ok"] is True
    assert data["value"]["categories"] == []
    assert data["value"]["priority"] == 0
