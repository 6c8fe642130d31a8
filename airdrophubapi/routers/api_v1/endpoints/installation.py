from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.orm import Session

from airdrophubapi.db.dblib import get_db
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.exception import PersistenceError
from airdrophubapi.utils.installation import InstallationService
from airdrophubapi.utils.security import get_api_key

router = APIRouter()


def get_installation(db: Session = Depends(get_db)) -> InstallationService:
    return InstallationService(db.get_bind(), db)


@router.get(
    "/status/",
    status_code=200,
    summary="Get the installation status",
    response_description="Installed flag and version",
    response_model=pydantic_schemas.InstallationInfo,
)
async def getInstallationStatus(installation: InstallationService = Depends(get_installation)):
    return installation.check_installation_status()


@router.post(
    "/install/",
    status_code=201,
    summary="Create the missing tables and seed the default data",
    response_description="Installation result",
    dependencies=[Security(get_api_key)],
)
async def install(installation: InstallationService = Depends(get_installation)) -> dict:
    try:
        if not installation.perform_installation():
            raise HTTPException(
                status_code=500,
                detail=f"Missing tables: {', '.join(installation.missing_tables())}",
            )
        installation.complete_installation()
        return {"success": True, **installation.check_installation_status()}
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.post(
    "/complete/",
    status_code=200,
    summary="Mark the installation as completed",
    response_description="Installation status",
    response_model=pydantic_schemas.InstallationInfo,
    dependencies=[Security(get_api_key)],
)
async def completeInstallation(installation: InstallationService = Depends(get_installation)):
    try:
        installation.complete_installation()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return installation.check_installation_status()


@router.post(
    "/reset/",
    status_code=200,
    summary="Reset the installation flag",
    response_description="Installation status",
    response_model=pydantic_schemas.InstallationInfo,
    dependencies=[Security(get_api_key)],
)
async def resetInstallation(installation: InstallationService = Depends(get_installation)):
    try:
        installation.reset_installation()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return installation.check_installation_status()
