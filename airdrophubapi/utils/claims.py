import logging
from dataclasses import dataclass
from typing import Sequence

from airdrophubapi.db.models.dbmodels import ClaimStatus
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.database import Database
from airdrophubapi.utils.eligibility import normalize_address
from airdrophubapi.utils.exception import (
    AlreadyClaimed,
    PersistenceError,
    SettlementError,
)
from airdrophubapi.utils.settlement import Settlement


@dataclass()
class ClaimWorkflow:
    """Records a one-time airdrop claim per address.

    A claim is written as ``pending``, settled, then moved to ``completed``.
    There are no internal retries: the caller re-invokes ``submit_claim`` if it
    wants one.
    """

    db: Database
    settlement: Settlement

    async def submit_claim(
        self, address: str, eligible_tokens: Sequence[pydantic_schemas.WhitelistEntry]
    ) -> pydantic_schemas.ClaimOutcome:
        """Claim the award of ``eligible_tokens`` for ``address``.

        Raises:
            AlreadyClaimed: the address already has a completed claim; nothing is written.
            PersistenceError: the pending record could not be created, or the
                completion could not be written (claim stays pending).
            SettlementError: settlement failed; the claim stays pending.
        """
        wallet_address = normalize_address(address)

        if self.db.findCompletedClaim(wallet_address) is not None:
            raise AlreadyClaimed(f"Airdrop already claimed for this address: {wallet_address}")

        total_amount = sum(token.airdrop_amount for token in eligible_tokens)
        tokens_claimed = [token.model_dump(mode="json") for token in eligible_tokens]

        claim_id = self.db.createClaim(
            {
                "wallet_address": wallet_address,
                "tokens_claimed": tokens_claimed,
                "total_amount": total_amount,
                "status": ClaimStatus.pending,
            }
        )
        if not claim_id:
            raise PersistenceError("Failed to create airdrop claim")
        logging.info(f"Pending claim {claim_id} created for {wallet_address} with total {total_amount}")

        claim = pydantic_schemas.ClaimRecord(
            id=claim_id,
            wallet_address=wallet_address,
            tokens_claimed=tokens_claimed,
            total_amount=total_amount,
            status=ClaimStatus.pending,
        )

        try:
            transaction_hash = await self.settlement.settle(claim)
        except Exception as e:
            logging.error(f"Settlement failed for claim {claim_id}: {e}")
            raise SettlementError(f"Settlement failed for claim {claim_id}: {e}") from e

        try:
            self.db.updateClaim(
                claim_id,
                {"status": ClaimStatus.completed, "transaction_hash": transaction_hash},
            )
        except AlreadyClaimed:
            # Another claim for this address completed first
            try:
                self.db.updateClaim(claim_id, {"status": ClaimStatus.failed})
            except PersistenceError as e:
                logging.error(f"Could not mark claim {claim_id} as failed, it stays pending: {e}")
            raise

        logging.info(f"Claim {claim_id} completed for {wallet_address}: {transaction_hash}")
        return pydantic_schemas.ClaimOutcome(
            claim_id=claim_id,
            wallet_address=wallet_address,
            total_amount=total_amount,
            transaction_hash=transaction_hash,
            status=ClaimStatus.completed,
        )
