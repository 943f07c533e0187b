"""Admin capability check."""
from typing import Optional
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
from exam_prep.core.config import settings
from exam_prep.core.logging import get_logger

logger = get_logger(__name__)

# API key header
api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


async def require_admin(api_key: Optional[str] = Security(api_key_header)) -> str:
    """Verify the admin API key from the request header.

    Args:
        api_key: API key from x-api-key header

    Returns:
        Validated API key

    Raises:
        HTTPException: If the key is missing or not an admin key
    """
    if not api_key:
        logger.warning("admin_key_missing")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
        )

    if api_key not in settings.get_admin_api_keys_list():
        logger.warning("admin_key_invalid")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized as an admin",
        )

    return api_key
