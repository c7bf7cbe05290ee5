"""Shared API dependencies - operator authorization."""

from typing import List, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import settings
from ..utils.logger import get_app_logger


_bearer = HTTPBearer(auto_error=False)

# Operator keys; replaced by main.py / tests, defaults to configured keys
operator_api_keys: Optional[List[str]] = None


def get_operator_api_keys() -> List[str]:
    if operator_api_keys is not None:
        return operator_api_keys
    return settings.get_operator_api_keys()


async def require_operator(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)
) -> str:
    """
    Allow only callers presenting an operator API key.

    Returns:
        The accepted key

    Raises:
        HTTPException: 401 without credentials, 403 for a non-operator key
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"}
        )
    if credentials.credentials not in get_operator_api_keys():
        get_app_logger().warning("Rejected request with a non-operator API key")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return credentials.credentials
