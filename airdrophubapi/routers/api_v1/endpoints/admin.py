from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from airdrophubapi.core.config import settings
from airdrophubapi.core.deps import get_database
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.database import Database
from airdrophubapi.utils.ethplorer import EthplorerApi, EthplorerConfig
from airdrophubapi.utils.exception import (
    DuplicateWhitelistToken,
    InvalidWhitelistToken,
    PersistenceError,
)

router = APIRouter()


############################
# Whitelist
############################


@router.get(
    "/whitelist/",
    status_code=200,
    summary="Get all the whitelisted tokens, active and inactive",
    response_description="Whitelist, newest first",
    response_model=List[pydantic_schemas.WhitelistEntry],
)
async def getWhitelist(database: Database = Depends(get_database)):
    return database.getWhitelist()


@router.post(
    "/whitelist/",
    status_code=201,
    summary="Add a token to the whitelist",
    response_description="Whitelisted token",
    response_model=pydantic_schemas.WhitelistEntry,
)
async def addToWhitelist(
    token: pydantic_schemas.WhitelistTokenCreate, database: Database = Depends(get_database)
):
    try:
        return database.addToWhitelist(token)
    except DuplicateWhitelistToken as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.patch(
    "/whitelist/{token_id}",
    status_code=200,
    summary="Update amount, active flag or details of a whitelisted token",
    response_description="Updated token",
    response_model=pydantic_schemas.WhitelistEntry,
)
async def updateWhitelistToken(
    token_id: int,
    updates: pydantic_schemas.WhitelistTokenUpdate,
    database: Database = Depends(get_database),
):
    try:
        token = database.updateWhitelistToken(token_id, updates)
    except InvalidWhitelistToken as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except DuplicateWhitelistToken as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    if token is None:
        raise HTTPException(status_code=404, detail=f"Token with id: {token_id} does not exist")
    return token


@router.delete(
    "/whitelist/{token_id}",
    status_code=200,
    summary="Remove a token from the whitelist",
    response_description="Removal confirmation",
)
async def removeFromWhitelist(token_id: int, database: Database = Depends(get_database)) -> dict:
    try:
        removed = database.removeFromWhitelist(token_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    if not removed:
        raise HTTPException(status_code=404, detail=f"Token with id: {token_id} does not exist")
    return {"success": True, "msg": f"Token {token_id} removed from whitelist"}


############################
# Claims and statistics
############################


@router.get(
    "/claims/",
    status_code=200,
    summary="Get the airdrop claims",
    response_description="Claims, newest first",
    response_model=List[pydantic_schemas.ClaimRecord],
)
async def getClaims(skip: int = 0, limit: int = 100, database: Database = Depends(get_database)):
    return database.getAirdropClaims(skip=skip, limit=limit)


@router.get(
    "/statistics/",
    status_code=200,
    summary="Get claim and whitelist statistics",
    response_description="Statistics",
    response_model=pydantic_schemas.Statistics,
)
async def getStatistics(database: Database = Depends(get_database)):
    return database.getStatistics()


############################
# Settings
############################


@router.get(
    "/settings/",
    status_code=200,
    summary="Get all the admin settings",
    response_description="Settings as key-value pairs",
)
async def getSettings(database: Database = Depends(get_database)) -> dict:
    return database.getSettings()


@router.put(
    "/settings/{key}",
    status_code=200,
    summary="Create or update a setting",
    response_description="Stored setting",
)
async def setSetting(
    key: str, body: pydantic_schemas.SettingValue, database: Database = Depends(get_database)
) -> dict:
    try:
        database.setSetting(key, body.value)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return {"key": key, "value": body.value}


@router.put(
    "/ethplorer-api-key/",
    status_code=200,
    summary="Store the Ethplorer API key and rebuild the balance oracle with it",
    response_description="Confirmation",
)
async def setEthplorerApiKey(
    body: pydantic_schemas.ApiKeyUpdate,
    request: Request,
    database: Database = Depends(get_database),
) -> dict:
    try:
        database.setSetting("ethplorer_api_key", body.api_key)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    request.app.state.oracle = EthplorerApi(
        EthplorerConfig.from_settings(settings, api_key=body.api_key)
    )
    return {"success": True, "msg": "API key saved successfully"}
