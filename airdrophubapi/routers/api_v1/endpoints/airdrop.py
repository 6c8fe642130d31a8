import logging

from fastapi import APIRouter, Depends, HTTPException

from airdrophubapi.core.deps import get_claim_workflow, get_database, get_oracle
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.claims import ClaimWorkflow
from airdrophubapi.utils.database import Database
from airdrophubapi.utils.eligibility import compute_eligibility
from airdrophubapi.utils.ethplorer import EthplorerApi
from airdrophubapi.utils.exception import (
    AlreadyClaimed,
    NotEligible,
    OracleError,
    PersistenceError,
    SettlementError,
)

router = APIRouter()


@router.get(
    "/address/{address}",
    status_code=200,
    summary="Get the balances of an address and its airdrop eligibility",
    response_description="Native balance, held tokens and airdrop status",
    response_model=pydantic_schemas.AddressInfo,
)
async def getAddressInfo(
    address: str,
    database: Database = Depends(get_database),
    oracle: EthplorerApi = Depends(get_oracle),
):
    """Fetch the holdings of the address and match them against the active whitelist"""
    try:
        holdings = oracle.getAddressInfo(address)

        airdrop = compute_eligibility(holdings.tokens, database.getWhitelist())
        airdrop.claimed = database.hasClaimedAirdrop(address)

        return pydantic_schemas.AddressInfo(
            address=holdings.address,
            native_balance=holdings.native_balance,
            native_price=holdings.native_price,
            tokens=holdings.tokens,
            airdrop=airdrop,
        )

    except OracleError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except Exception as e:
        msg = "Error with the endpoint"
        raise HTTPException(status_code=500, detail=msg) from e


@router.post(
    "/claim/",
    status_code=201,
    summary="Claim the airdrop for an address",
    response_description="Claim confirmation with transaction hash",
    response_model=pydantic_schemas.ClaimOutcome,
)
async def claimAirdrop(
    body: pydantic_schemas.ClaimRequest,
    database: Database = Depends(get_database),
    oracle: EthplorerApi = Depends(get_oracle),
    workflow: ClaimWorkflow = Depends(get_claim_workflow),
):
    """Eligibility is recomputed from fresh holdings, the client does not pick the tokens\n"""
    if database.getSetting("airdrop_enabled") == "false":
        raise HTTPException(status_code=403, detail="Airdrop is currently disabled")

    try:
        holdings = oracle.getAddressInfo(body.address)
        airdrop = compute_eligibility(holdings.tokens, database.getWhitelist())
        if not airdrop.is_eligible:
            raise NotEligible(f"Address {body.address} holds no whitelisted token")

        outcome = await workflow.submit_claim(body.address, airdrop.eligible_tokens)
        return outcome

    except NotEligible as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except AlreadyClaimed as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except (OracleError, SettlementError) as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except Exception as e:
        logging.error(f"Unexpected error claiming airdrop for {body.address}: {e}")
        msg = "Error with the endpoint"
        raise HTTPException(status_code=500, detail=msg) from e


@router.get(
    "/claimed/{address}",
    status_code=200,
    summary="Check if an address already claimed its airdrop",
    response_description="Claimed flag",
    response_model=pydantic_schemas.ClaimedStatus,
)
async def getClaimed(address: str, database: Database = Depends(get_database)):
    try:
        return pydantic_schemas.ClaimedStatus(
            address=address.lower(), claimed=database.hasClaimedAirdrop(address)
        )
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.get(
    "/whitelist/",
    status_code=200,
    summary="Get the active whitelisted tokens",
    response_description="Active whitelist",
    response_model=list[pydantic_schemas.WhitelistEntry],
)
async def getActiveWhitelist(database: Database = Depends(get_database)):
    return database.listActiveWhitelist()
