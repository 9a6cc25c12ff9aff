from functools import lru_cache

from cardrewards.config import settings
from cardrewards.domain.models import AppSettings
from cardrewards.repository.card_store import CardStore
from cardrewards.services.orchestrator import RewardsOrchestrator


@lru_cache
def get_orchestrator() -> RewardsOrchestrator:
    return RewardsOrchestrator(
        CardStore(settings.card_data_file),
        AppSettings(miles_valuation=settings.miles_valuation),
    )
