from fastapi import APIRouter, Security

from airdrophubapi.utils.security import get_api_key

from .endpoints import admin, airdrop, auth, installation


api_router = APIRouter()

api_router.include_router(
    airdrop.router,
    prefix="/airdrop",
    tags=["Airdrop"],
)
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Security(get_api_key)],
)
api_router.include_router(
    installation.router,
    prefix="/installation",
    tags=["Installation"],
)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Auth"],
)
