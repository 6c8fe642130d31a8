import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from airdrophubapi.db.models import dbmodels
from airdrophubapi.db.models.dbmodels import ClaimStatus
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.eligibility import normalize_address
from airdrophubapi.utils.exception import (
    AlreadyClaimed,
    DuplicateWhitelistToken,
    InvalidWhitelistToken,
    PersistenceError,
)


@dataclass()
class Database:
    """Class representing all the reads and writes against the AirdropHub tables"""

    session: Session

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logging.error(f"Error {action}: {e}")
            raise PersistenceError(f"Error {action}") from e

    ########################
    # Whitelist management
    ########################
    def getWhitelist(self) -> list[pydantic_schemas.WhitelistEntry]:
        rows = self.session.scalars(
            select(dbmodels.WhitelistToken).order_by(
                dbmodels.WhitelistToken.created_at.desc(), dbmodels.WhitelistToken.id.desc()
            )
        ).all()
        return [pydantic_schemas.WhitelistEntry.model_validate(row) for row in rows]

    def listActiveWhitelist(self) -> list[pydantic_schemas.WhitelistEntry]:
        return [entry for entry in self.getWhitelist() if entry.is_active]

    def _getWhitelistRow(self, token_id: int) -> Optional[dbmodels.WhitelistToken]:
        return self.session.get(dbmodels.WhitelistToken, token_id)

    def getWhitelistToken(self, token_id: int) -> Optional[pydantic_schemas.WhitelistEntry]:
        row = self._getWhitelistRow(token_id)
        if row is None:
            return None
        return pydantic_schemas.WhitelistEntry.model_validate(row)

    def _addressTaken(self, address: str, exclude_id: Union[int, None] = None) -> bool:
        query = select(dbmodels.WhitelistToken.id).where(
            func.lower(dbmodels.WhitelistToken.address) == normalize_address(address)
        )
        if exclude_id is not None:
            query = query.where(dbmodels.WhitelistToken.id != exclude_id)
        return self.session.scalars(query.limit(1)).first() is not None

    def addToWhitelist(self, token: pydantic_schemas.WhitelistTokenCreate) -> pydantic_schemas.WhitelistEntry:
        if self._addressTaken(token.address):
            raise DuplicateWhitelistToken(f"Token {token.address} is already whitelisted")

        row = dbmodels.WhitelistToken(**token.model_dump())
        self.session.add(row)
        self._commit("adding to whitelist")
        self.session.refresh(row)
        logging.info(f"Token {row.symbol} ({row.address}) added to whitelist")
        return pydantic_schemas.WhitelistEntry.model_validate(row)

    def updateWhitelistToken(
        self, token_id: int, updates: pydantic_schemas.WhitelistTokenUpdate
    ) -> Optional[pydantic_schemas.WhitelistEntry]:
        row = self._getWhitelistRow(token_id)
        if row is None:
            return None

        changes = updates.model_dump(exclude_unset=True)
        fields = pydantic_schemas.WhitelistTokenBase.model_fields.keys()
        try:
            # The updated row must still read back as a valid whitelist entry
            merged = pydantic_schemas.WhitelistTokenBase.model_validate(
                {**{k: getattr(row, k) for k in fields}, **changes}
            )
        except ValidationError as e:
            raise InvalidWhitelistToken(f"Invalid update for token {token_id}: {e}") from e

        changes = {k: getattr(merged, k) for k in changes}
        if "address" in changes and self._addressTaken(changes["address"], exclude_id=token_id):
            raise DuplicateWhitelistToken(f"Token {changes['address']} is already whitelisted")

        for k, v in changes.items():
            setattr(row, k, v)
        self._commit("updating whitelist token")
        self.session.refresh(row)
        return pydantic_schemas.WhitelistEntry.model_validate(row)

    def removeFromWhitelist(self, token_id: int) -> bool:
        row = self._getWhitelistRow(token_id)
        if row is None:
            return False
        self.session.delete(row)
        self._commit("removing from whitelist")
        logging.info(f"Token {row.address} removed from whitelist")
        return True

    ########################
    # Airdrop claims management
    ########################
    def createClaim(self, record: dict[str, Any]) -> int:
        row = dbmodels.AirdropClaim(
            wallet_address=record["wallet_address"],
            tokens_claimed=record["tokens_claimed"],
            total_amount=record["total_amount"],
            transaction_hash=record.get("transaction_hash"),
            status=record.get("status", ClaimStatus.pending),
        )
        self.session.add(row)
        self._commit("creating airdrop claim")
        return row.id

    def updateClaim(self, claim_id: int, patch: dict[str, Any]) -> None:
        """Apply ``patch`` to a claim, checking the status transition first.

        Raises:
            AlreadyClaimed: completing would give the address a second completed claim.
            PersistenceError: the claim is missing or the store rejected the write.
            InvalidClaimTransition: the status change is not allowed.
        """
        row = self.session.get(dbmodels.AirdropClaim, claim_id)
        if row is None:
            raise PersistenceError(f"Airdrop claim {claim_id} does not exist")

        patch = dict(patch)
        if "status" in patch:
            patch["status"] = ClaimStatus(row.status).transition(ClaimStatus(patch["status"]))

        for k, v in patch.items():
            setattr(row, k, v)

        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logging.error(f"Conflict updating airdrop claim {claim_id}: {e}")
            raise AlreadyClaimed(
                f"Airdrop already claimed for this address: {row.wallet_address}"
            ) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logging.error(f"Error updating airdrop claim {claim_id}: {e}")
            raise PersistenceError(f"Error updating airdrop claim {claim_id}") from e

    def getClaim(self, claim_id: int) -> Optional[pydantic_schemas.ClaimRecord]:
        row = self.session.get(dbmodels.AirdropClaim, claim_id)
        if row is None:
            return None
        return pydantic_schemas.ClaimRecord.model_validate(row)

    def findCompletedClaim(self, wallet_address: str) -> Optional[pydantic_schemas.ClaimRecord]:
        try:
            row = self.session.scalars(
                select(dbmodels.AirdropClaim)
                .where(dbmodels.AirdropClaim.wallet_address == normalize_address(wallet_address))
                .where(dbmodels.AirdropClaim.status == ClaimStatus.completed)
                .limit(1)
            ).first()
        except SQLAlchemyError as e:
            logging.error(f"Error checking airdrop claim: {e}")
            raise PersistenceError("Error checking airdrop claim") from e

        if row is None:
            return None
        return pydantic_schemas.ClaimRecord.model_validate(row)

    def hasClaimedAirdrop(self, wallet_address: str) -> bool:
        return self.findCompletedClaim(wallet_address) is not None

    def getAirdropClaims(self, skip: int = 0, limit: int = 100) -> list[pydantic_schemas.ClaimRecord]:
        rows = self.session.scalars(
            select(dbmodels.AirdropClaim)
            .order_by(dbmodels.AirdropClaim.created_at.desc(), dbmodels.AirdropClaim.id.desc())
            .offset(skip)
            .limit(limit)
        ).all()
        return [pydantic_schemas.ClaimRecord.model_validate(row) for row in rows]

    ########################
    # Settings management
    ########################
    def getSetting(self, key: str) -> Optional[str]:
        row = self.session.scalars(
            select(dbmodels.AdminSetting).where(dbmodels.AdminSetting.key == key)
        ).first()
        return row.value if row is not None else None

    def getSettings(self) -> dict[str, str]:
        rows = self.session.scalars(select(dbmodels.AdminSetting)).all()
        return {row.key: row.value for row in rows}

    def setSetting(self, key: str, value: str) -> None:
        row = self.session.scalars(
            select(dbmodels.AdminSetting).where(dbmodels.AdminSetting.key == key)
        ).first()
        if row is None:
            self.session.add(dbmodels.AdminSetting(key=key, value=value))
        else:
            row.value = value
        self._commit(f"setting value for {key}")

    ########################
    # Statistics
    ########################
    def getStatistics(self) -> pydantic_schemas.Statistics:
        claims = self.session.execute(
            select(dbmodels.AirdropClaim.total_amount, dbmodels.AirdropClaim.status)
        ).all()
        whitelist = self.session.execute(
            select(dbmodels.WhitelistToken.is_active, dbmodels.WhitelistToken.airdrop_amount)
        ).all()

        completed = [c for c in claims if c.status == ClaimStatus.completed]
        active = [t for t in whitelist if t.is_active]

        return pydantic_schemas.Statistics(
            totalClaims=len(claims),
            completedClaims=len(completed),
            totalDistributed=sum(c.total_amount for c in completed),
            activeTokens=len(active),
            totalAirdropPool=sum(t.airdrop_amount for t in active),
            totalWhitelistTokens=len(whitelist),
        )
