from typing import Any

from fastapi import APIRouter, Body, Depends

from cardrewards.api.dependencies import get_orchestrator
from cardrewards.services.orchestrator import RewardsOrchestrator
from cardrewards.validators.reward_rule import ValidationFailure, ValidationSuccess

router = APIRouter(prefix="/rules", tags=["rules"])


@router.post("/validate", response_model=ValidationSuccess | ValidationFailure)
def validate_rule(
    payload: Any = Body(...),
    orchestrator: RewardsOrchestrator = Depends(get_orchestrator),
) -> ValidationSuccess | ValidationFailure:
    # malformed rules are reported in the body, never as a 422
    return orchestrator.validate_rule(payload)
