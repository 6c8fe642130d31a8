import logging
from dataclasses import dataclass

from sqlalchemy import inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from airdrophubapi.core.config import settings
from airdrophubapi.db.dblib import Base
from airdrophubapi.db.models import dbmodels
from airdrophubapi.db.models.mixins import utcnow
from airdrophubapi.utils.exception import PersistenceError


REQUIRED_TABLES = [
    "whitelist_tokens",
    "admin_settings",
    "airdrop_claims",
    "installation_status",
]

DEFAULT_WHITELIST = [
    {"address": "0x95ad61b0a150d79219dcf64e1e6cc01f0b64c4ce", "name": "Shiba Inu", "symbol": "SHIB", "airdrop_amount": 1000000},
    {"address": "0x514910771af9ca656af840dff83e8264ecf986ca", "name": "Chainlink", "symbol": "LINK", "airdrop_amount": 50},
    {"address": "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984", "name": "Uniswap", "symbol": "UNI", "airdrop_amount": 100},
    {"address": "0x6b175474e89094c44da98b954eedeac495271d0f", "name": "Dai Stablecoin", "symbol": "DAI", "airdrop_amount": 500},
    {"address": "0x7d1afa7b718fb893db30a3abc0cfc608aacfebb0", "name": "Polygon", "symbol": "MATIC", "airdrop_amount": 200},
    {"address": "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599", "name": "Wrapped Bitcoin", "symbol": "WBTC", "airdrop_amount": 1},
]

DEFAULT_SETTINGS = {
    "ethplorer_api_key": "freekey",
    "platform_name": "AirdropHub",
    "max_claims_per_address": "1",
    "airdrop_enabled": "true",
}


@dataclass()
class InstallationService:
    """Best-effort installation: table probe, default data and install flag.

    This is not a migration engine, tables are created with ``create_all``
    and never altered.
    """

    engine: Engine
    session: Session

    def missing_tables(self) -> list[str]:
        inspector = inspect(self.engine)
        return [table for table in REQUIRED_TABLES if not inspector.has_table(table)]

    def check_installation_status(self) -> dict:
        if "installation_status" in self.missing_tables():
            return {"is_installed": False, "version": None}

        status = self.session.scalars(select(dbmodels.InstallationStatus).limit(1)).first()
        if status is None:
            return {"is_installed": False, "version": None}

        return {"is_installed": bool(status.is_installed), "version": status.version}

    def perform_installation(self) -> bool:
        Base.metadata.create_all(bind=self.engine)

        missing = self.missing_tables()
        if missing:
            logging.error(f"Missing tables after installation: {', '.join(missing)}")
            return False

        self.insert_default_data()
        return True

    def insert_default_data(self) -> list[str]:
        """Seed whitelist and settings, only into tables that are still empty."""
        msgs = []

        has_whitelist = self.session.scalars(select(dbmodels.WhitelistToken.id).limit(1)).first()
        if has_whitelist is None:
            self.session.add_all(
                [dbmodels.WhitelistToken(is_active=True, **token) for token in DEFAULT_WHITELIST]
            )
            msgs.append(f"Added {len(DEFAULT_WHITELIST)} default tokens to whitelist_tokens")

        has_settings = self.session.scalars(select(dbmodels.AdminSetting.id).limit(1)).first()
        if has_settings is None:
            self.session.add_all(
                [dbmodels.AdminSetting(key=k, value=v) for k, v in DEFAULT_SETTINGS.items()]
            )
            msgs.append(f"Added {len(DEFAULT_SETTINGS)} default settings to admin_settings")

        self._commit("inserting default data")
        for msg in msgs:
            logging.info(msg)
        return msgs

    def complete_installation(self) -> None:
        status = self.session.scalars(select(dbmodels.InstallationStatus).limit(1)).first()
        if status is None:
            status = dbmodels.InstallationStatus()
            self.session.add(status)

        status.is_installed = True
        status.installed_at = utcnow()
        status.version = settings.APP_VERSION
        self._commit("completing installation")
        logging.info(f"AirdropHub {settings.APP_VERSION} installed")

    def reset_installation(self) -> None:
        status = self.session.scalars(select(dbmodels.InstallationStatus).limit(1)).first()
        if status is None:
            return
        status.is_installed = False
        self._commit("resetting installation")
        logging.warning("Installation flag reset")

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logging.error(f"Error {action}: {e}")
            raise PersistenceError(f"Error {action}") from e
