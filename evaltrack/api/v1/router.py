from fastapi import APIRouter

from evaltrack.api.v1.endpoints import attempts, events, health, rewards


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(attempts.router)
api_router.include_router(events.router)
api_router.include_router(rewards.router)
