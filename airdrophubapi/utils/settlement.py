import asyncio
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass

from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas


class Settlement(ABC):
    """Step that distributes the award of a pending claim"""

    @abstractmethod
    async def settle(self, claim: pydantic_schemas.ClaimRecord) -> str:
        """Distribute the claim and return its reference id (transaction hash)."""


@dataclass()
class SimulatedSettlement(Settlement):
    """No on-chain transfer; waits ``delay`` seconds and fabricates a transaction hash"""

    delay: float = 0

    async def settle(self, claim: pydantic_schemas.ClaimRecord) -> str:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        tx_hash = f"0x{secrets.token_hex(32)}"
        logging.info(f"Simulated settlement of claim {claim.id} with transaction hash {tx_hash}")
        return tx_hash
