from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from airdrophubapi.db.dblib import Base
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.exception import OracleError
from airdrophubapi.utils.settlement import Settlement


def build_engine(create_tables: bool = True) -> Engine:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    if create_tables:
        Base.metadata.create_all(bind=engine)
    return engine


def build_session(engine: Engine) -> Session:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)()


def held_token(address: str, symbol: str = "TKN", decimals: int = 18) -> pydantic_schemas.HeldToken:
    return pydantic_schemas.HeldToken(
        address=address, name=symbol, symbol=symbol, decimals=decimals, raw_balance="1000", balance=1000
    )


def whitelist_entry(
    address: str, airdrop_amount: int, is_active: bool = True, id: Optional[int] = None, symbol: str = "TKN"
) -> pydantic_schemas.WhitelistEntry:
    return pydantic_schemas.WhitelistEntry(
        id=id, address=address, name=symbol, symbol=symbol, airdrop_amount=airdrop_amount, is_active=is_active
    )


def whitelist_create(address: str, airdrop_amount: int, symbol: str = "TKN", is_active: bool = True):
    return pydantic_schemas.WhitelistTokenCreate(
        address=address, name=symbol, symbol=symbol, airdrop_amount=airdrop_amount, is_active=is_active
    )


@dataclass()
class FakeOracle:
    """Stands in for EthplorerApi, holdings keyed by lower-cased address"""

    holdings: dict = field(default_factory=dict)
    fail: bool = False
    calls: list = field(default_factory=list)

    def getAddressInfo(self, address: str) -> pydantic_schemas.Holdings:
        self.calls.append(address)
        if self.fail:
            raise OracleError("Ethplorer API error: 429 Too Many Requests")
        tokens = self.holdings.get(address.lower(), [])
        return pydantic_schemas.Holdings(address=address, native_balance=1.5, tokens=tokens)


class FailingSettlement(Settlement):
    async def settle(self, claim: pydantic_schemas.ClaimRecord) -> str:
        raise RuntimeError("node unreachable")


@dataclass()
class FixedSettlement(Settlement):
    tx_hash: str = "0x" + "ab" * 32
    settled: list = field(default_factory=list)

    async def settle(self, claim: pydantic_schemas.ClaimRecord) -> str:
        self.settled.append(claim.id)
        return self.tx_hash
