from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from airdrophubapi.db.models.dbmodels import ClaimStatus

############################
# Oracle section definition
############################


class TokenPrice(BaseModel):
    rate: float
    currency: str = "USD"


class HeldToken(BaseModel):
    address: str
    name: str = ""
    symbol: str = ""
    decimals: int = 0
    raw_balance: str = "0"
    balance: float = 0
    price: Optional[TokenPrice] = None


class Holdings(BaseModel):
    address: str
    native_balance: float = 0
    native_price: Optional[TokenPrice] = None
    tokens: List[HeldToken] = []


############################
# Whitelist section definition
############################


class WhitelistTokenBase(BaseModel):
    address: str = Field(min_length=1)
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    airdrop_amount: int = Field(ge=0)
    is_active: bool = True

    @field_validator("address")
    @classmethod
    def strip_address(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("address must not be blank")
        return value.strip()


class WhitelistTokenCreate(WhitelistTokenBase):
    pass


class WhitelistTokenUpdate(BaseModel):
    """Partial update, a field left out keeps its value but none may be sent as null"""

    address: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    symbol: Optional[str] = Field(default=None, min_length=1)
    airdrop_amount: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("address", "name", "symbol", "airdrop_amount", "is_active")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("field may be omitted but not set to null")
        return value

    @field_validator("address")
    @classmethod
    def strip_address(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("address must not be blank")
        return value.strip()


class WhitelistEntry(WhitelistTokenBase):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


############################
# Eligibility and claims section definition
############################


class EligibilityResult(BaseModel):
    is_eligible: bool
    eligible_tokens: List[WhitelistEntry]
    total_airdrop_amount: int
    claimed: bool = False


class AddressInfo(BaseModel):
    address: str
    native_balance: float
    native_price: Optional[TokenPrice] = None
    tokens: List[HeldToken]
    airdrop: EligibilityResult


class ClaimRequest(BaseModel):
    address: str = Field(min_length=1)

    @field_validator("address")
    @classmethod
    def strip_address(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("address must not be blank")
        return value.strip()


class ClaimOutcome(BaseModel):
    claim_id: int
    wallet_address: str
    total_amount: int
    transaction_hash: str
    status: ClaimStatus


class ClaimRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    wallet_address: str
    tokens_claimed: List[Dict[str, Any]]
    total_amount: int
    transaction_hash: Optional[str] = None
    status: ClaimStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClaimedStatus(BaseModel):
    address: str
    claimed: bool


############################
# Admin section definition
############################


class Statistics(BaseModel):
    totalClaims: int = 0
    completedClaims: int = 0
    totalDistributed: int = 0
    activeTokens: int = 0
    totalAirdropPool: int = 0
    totalWhitelistTokens: int = 0


class SettingValue(BaseModel):
    value: str


class ApiKeyUpdate(BaseModel):
    api_key: str = Field(min_length=1)


class Login(BaseModel):
    username: str
    password: str


class InstallationInfo(BaseModel):
    is_installed: bool
    version: Optional[str] = None
