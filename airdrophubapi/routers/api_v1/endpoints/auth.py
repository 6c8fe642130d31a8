import logging

from fastapi import APIRouter, HTTPException

from airdrophubapi.core.config import settings
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.security import verify_admin_credentials

router = APIRouter()


@router.post(
    "/login/",
    status_code=200,
    summary="Sign in to the admin console",
    response_description="API key to send as x-api-key on admin endpoints",
)
async def login(credentials: pydantic_schemas.Login) -> dict:
    if not verify_admin_credentials(credentials.username, credentials.password):
        logging.warning(f"Failed admin sign in for user: {credentials.username}")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    return {"username": credentials.username, "role": "admin", "api_key": settings.ADMIN_API_KEY}
