from typing import List, Union

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Class representing the settings of the AirdropHub API"""
    API_V1_STR: str = "/api/v1"
    APP_VERSION: str = "1.0.0"
    BACKEND_CORS_ORIGINS: str = "*"

    DATABASE_URL: str = "sqlite:///./airdrophub.db"

    # Ethplorer oracle
    ETHPLORER_BASE_URL: str = "https://api.ethplorer.io"
    ETHPLORER_API_KEY: str = "freekey"
    ETHPLORER_TIMEOUT: int = 10

    # Admin console
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin"
    ADMIN_API_KEY: str = "change-me"

    SETTLEMENT_DELAY_SECONDS: float = 0

    def assemble_cors_origins(self, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    class Config:
        """Class to define case_sensitive variable"""
        case_sensitive = True


settings = Settings()
