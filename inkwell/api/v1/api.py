"""V1 API router aggregation."""
from fastapi import APIRouter

from inkwell.api.v1.endpoints import auth, poems, users

api_router = APIRouter(prefix="/v1")
api_router.include_router(auth.router)
api_router.include_router(poems.router)
api_router.include_router(users.router)
