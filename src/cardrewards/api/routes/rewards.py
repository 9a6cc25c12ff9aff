from fastapi import APIRouter, Depends, HTTPException

from cardrewards.api.dependencies import get_orchestrator
from cardrewards.schemas.requests import CardRewardsRequest, TransactionRewardRequest
from cardrewards.schemas.responses import CardRewardsResponse, TransactionRewardResponse
from cardrewards.services.orchestrator import CardNotFoundError, RewardsOrchestrator

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.post("/transaction", response_model=TransactionRewardResponse)
def transaction_reward(
    request: TransactionRewardRequest,
    orchestrator: RewardsOrchestrator = Depends(get_orchestrator),
) -> TransactionRewardResponse:
    try:
        return orchestrator.transaction_reward(request)
    except CardNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/cards", response_model=CardRewardsResponse)
def card_rewards(
    request: CardRewardsRequest,
    orchestrator: RewardsOrchestrator = Depends(get_orchestrator),
) -> CardRewardsResponse:
    try:
        return orchestrator.card_rewards(request)
    except CardNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
