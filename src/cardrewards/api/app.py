import uvicorn
from fastapi import FastAPI

from cardrewards.api.routes.health import router as health_router
from cardrewards.api.routes.rewards import router as rewards_router
from cardrewards.api.routes.rules import router as rules_router
from cardrewards.config import settings

app = FastAPI(title="Card Rewards API", version="0.1.0")
app.include_router(health_router)
app.include_router(rewards_router)
app.include_router(rules_router)


def run() -> None:
    uvicorn.run("cardrewards.api.app:app", host=settings.app_host, port=settings.app_port, reload=False)
