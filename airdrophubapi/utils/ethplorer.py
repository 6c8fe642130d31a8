import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from airdrophubapi.core.config import Settings
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.exception import OracleError


@dataclass(frozen=True)
class EthplorerConfig:
    base_url: str = "https://api.ethplorer.io"
    api_key: str = "freekey"
    timeout: int = 10

    @classmethod
    def from_settings(cls, settings: Settings, api_key: Optional[str] = None) -> "EthplorerConfig":
        return cls(
            base_url=settings.ETHPLORER_BASE_URL.rstrip("/"),
            api_key=api_key or settings.ETHPLORER_API_KEY,
            timeout=settings.ETHPLORER_TIMEOUT,
        )


@dataclass()
class EthplorerApi:
    """Class with endpoints to read balances from the Ethplorer API"""

    config: EthplorerConfig = field(default_factory=EthplorerConfig)

    def __post_init__(self):
        self.HEADERS = {"Accept": "application/json"}

    def _get(self, method: str, address: str) -> dict:
        url = f"{self.config.base_url}/{method}/{address}"
        try:
            rawResult = requests.get(
                url,
                params={"apiKey": self.config.api_key},
                headers=self.HEADERS,
                timeout=self.config.timeout,
            )
            rawResult.raise_for_status()
            data = rawResult.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Ethplorer {method} failed for {address}: {e}")
            raise OracleError(f"Ethplorer API error: {e}") from e
        except ValueError as e:
            raise OracleError(f"Ethplorer API returned an invalid body for {address}") from e

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise OracleError(f"Ethplorer API error: {message}")

        return data

    def _price(self, price: Any) -> Optional[pydantic_schemas.TokenPrice]:
        # Ethplorer sends ``false`` when it has no price for the token
        if not isinstance(price, dict) or price.get("rate") is None:
            return None
        return pydantic_schemas.TokenPrice(
            rate=price["rate"], currency=price.get("currency") or "USD"
        )

    def _heldToken(self, token: dict) -> pydantic_schemas.HeldToken:
        tokenInfo = token.get("tokenInfo", {})
        return pydantic_schemas.HeldToken(
            address=tokenInfo.get("address", ""),
            name=tokenInfo.get("name") or "",
            symbol=tokenInfo.get("symbol") or "",
            decimals=int(tokenInfo.get("decimals") or 0),
            raw_balance=str(token.get("rawBalance", token.get("balance", 0))),
            balance=token.get("balance", 0),
            price=self._price(tokenInfo.get("price")),
        )

    def getAddressInfo(self, address: str) -> pydantic_schemas.Holdings:
        logging.info(f"Fetching holdings for {address}")
        data = self._get("getAddressInfo", address)

        eth = data.get("ETH", {})
        tokens = [self._heldToken(token) for token in data.get("tokens", []) or []]

        return pydantic_schemas.Holdings(
            address=data.get("address", address),
            native_balance=eth.get("balance", 0),
            native_price=self._price(eth.get("price")),
            tokens=tokens,
        )

    def getTokenInfo(self, address: str) -> dict:
        return self._get("getTokenInfo", address)
