import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from airdrophubapi.core.config import settings

api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


def get_api_key(api_key_header: str = Security(api_key_header)) -> str:
    """Retrieve and validate the admin API key from the HTTP header.

    Args:
        api_key_header: The API key passed in the ``x-api-key`` header.

    Returns:
        The validated API key.

    Raises:
        HTTPException: If the API key is invalid or missing.
    """
    if api_key_header and secrets.compare_digest(api_key_header.encode(), settings.ADMIN_API_KEY.encode()):
        return api_key_header
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API Key",
    )


def verify_admin_credentials(username: str, password: str) -> bool:
    username_ok = secrets.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
    password_ok = secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    return username_ok and password_ok


def generate_api_key():
    # Generate a random 32-character string using secrets.token_urlsafe()
    return secrets.token_urlsafe(32)
