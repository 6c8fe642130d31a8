import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError

from airdrophubapi import __version__
from airdrophubapi.core.config import settings
from airdrophubapi.db.dblib import SessionLocal, engine
from airdrophubapi.routers.api_v1.api import api_router
from airdrophubapi.utils.database import Database
from airdrophubapi.utils.ethplorer import EthplorerApi, EthplorerConfig
from airdrophubapi.utils.installation import InstallationService
from airdrophubapi.utils.security import generate_api_key
from airdrophubapi.utils.settlement import SimulatedSettlement

description = "API to check airdrop eligibility of an Ethereum address against a curated token whitelist and claim it once"
title = "AirdropHub API"
version = __version__
contact = {"name": "AirdropHub"}


def load_ethplorer_api_key() -> str:
    """The key stored by the admin console wins over the configured one"""
    session = SessionLocal()
    try:
        return Database(session).getSetting("ethplorer_api_key") or settings.ETHPLORER_API_KEY
    except SQLAlchemyError as e:
        logging.warning(f"Could not read the stored Ethplorer API key, using the configured one: {e}")
        return settings.ETHPLORER_API_KEY
    finally:
        session.close()


def check_installation() -> None:
    session = SessionLocal()
    try:
        missing = InstallationService(engine, session).missing_tables()
    except SQLAlchemyError as e:
        logging.warning(f"Could not probe the AirdropHub tables: {e}")
        return
    finally:
        session.close()

    if missing:
        logging.warning(f"Database not installed, missing tables: {', '.join(missing)}")


#########################
# lifespan function that starts and ends when the fastapi application is started or ended
#########################
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tables are created by POST /installation/install, never at startup
    check_installation()

    api_key = load_ethplorer_api_key()
    app.state.oracle = EthplorerApi(EthplorerConfig.from_settings(settings, api_key=api_key))
    app.state.settlement = SimulatedSettlement(delay=settings.SETTLEMENT_DELAY_SECONDS)
    logging.info(f"Balance oracle ready on {settings.ETHPLORER_BASE_URL}")

    try:
        yield
    finally:
        engine.dispose()


#########################
# FastAPI declaration
#########################

airdrophub = FastAPI(
    title=title,
    description=description,
    contact=contact,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    version=version,
    lifespan=lifespan,
)

root_router = APIRouter()

airdrophub.add_middleware(
    CORSMiddleware,
    allow_origins=settings.assemble_cors_origins(settings.BACKEND_CORS_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

airdrophub.add_middleware(GZipMiddleware, minimum_size=1000)


##################################################################
# Start of the endpoints
##################################################################


@airdrophub.get("/")
async def root():
    """Basic HTML response."""
    body = (
        "<html>"
        "<body style='padding: 10px;'>"
        "<h1>Welcome to the AirdropHub API</h1>"
        "<div>"
        "Check the docs: <a href='/docs'>here</a>"
        "</div>"
        "</body>"
        "</html>"
    )

    return HTMLResponse(content=body)


@airdrophub.get("/generate-api-key")
async def get_new_api_key():
    api_key = generate_api_key()
    return {"api_key": api_key}


airdrophub.include_router(root_router)
airdrophub.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    # Use this for debugging purposes only
    import uvicorn

    logging.warning("Running in development mode. Do not run like this in production.")
    uvicorn.run(
        airdrophub, host="0.0.0.0", port=8001, reload=False, log_level="debug"
    )
