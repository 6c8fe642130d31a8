"""
Shared dependencies for routes: data access, oracle adapter, claim workflow.
The oracle and the settlement step are built once at startup and live on app.state.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from airdrophubapi.db.dblib import get_db
from airdrophubapi.utils.claims import ClaimWorkflow
from airdrophubapi.utils.database import Database
from airdrophubapi.utils.ethplorer import EthplorerApi
from airdrophubapi.utils.settlement import Settlement


def get_database(db: Session = Depends(get_db)) -> Database:
    return Database(db)


def get_oracle(request: Request) -> EthplorerApi:
    return request.app.state.oracle


def get_settlement(request: Request) -> Settlement:
    return request.app.state.settlement


def get_claim_workflow(
    database: Database = Depends(get_database),
    settlement: Settlement = Depends(get_settlement),
) -> ClaimWorkflow:
    return ClaimWorkflow(database, settlement)
