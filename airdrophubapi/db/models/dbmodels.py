from enum import Enum

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, BigInteger, Text, func, text
from sqlalchemy import Enum as SqlEnum

from airdrophubapi.utils.exception import InvalidClaimTransition

from ..dblib import Base
from .mixins import Timestamp, utcnow


class ClaimStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"

    def can_transition(self, target: "ClaimStatus") -> bool:
        return target in CLAIM_TRANSITIONS[self]

    def transition(self, target: "ClaimStatus") -> "ClaimStatus":
        """Return ``target`` if moving there from this status is allowed.

        Raises:
            InvalidClaimTransition: for any move outside the transition table,
                e.g. completed -> pending.
        """
        if not self.can_transition(target):
            raise InvalidClaimTransition(
                f"Claim cannot move from {self.value} to {target.value}"
            )
        return target


CLAIM_TRANSITIONS = {
    ClaimStatus.pending: frozenset({ClaimStatus.completed, ClaimStatus.failed}),
    ClaimStatus.completed: frozenset(),
    ClaimStatus.failed: frozenset(),
}


class WhitelistToken(Timestamp, Base):
    __tablename__ = "whitelist_tokens"

    id = Column(Integer, primary_key=True, index=True)
    address = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    symbol = Column(Text, nullable=False)
    airdrop_amount = Column(BigInteger, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


# Address is unique regardless of letter case
Index("uq_whitelist_tokens_address_lower", func.lower(WhitelistToken.address), unique=True)


class AirdropClaim(Timestamp, Base):
    __tablename__ = "airdrop_claims"

    id = Column(Integer, primary_key=True, index=True)
    wallet_address = Column(Text, nullable=False, index=True)
    tokens_claimed = Column(JSON, nullable=False, default=list)
    total_amount = Column(BigInteger, nullable=False)
    transaction_hash = Column(Text, nullable=True)
    status = Column(
        SqlEnum(
            ClaimStatus,
            native_enum=False,
            values_callable=lambda statuses: [s.value for s in statuses],
            name="claim_status",
        ),
        nullable=False,
        default=ClaimStatus.pending,
    )

    __table_args__ = (
        # At most one completed claim per normalized address
        Index(
            "uq_airdrop_claims_completed_address",
            "wallet_address",
            unique=True,
            sqlite_where=text("status = 'completed'"),
            postgresql_where=text("status = 'completed'"),
        ),
    )


class AdminSetting(Timestamp, Base):
    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(Text, nullable=False, unique=True)
    value = Column(Text, nullable=False)


class InstallationStatus(Base):
    __tablename__ = "installation_status"

    id = Column(Integer, primary_key=True, index=True)
    is_installed = Column(Boolean, nullable=False, default=False)
    installed_at = Column(DateTime(timezone=True), nullable=True, default=utcnow)
    version = Column(Text, nullable=True)
