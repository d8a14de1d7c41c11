"""Authentication dependencies for FastAPI routes.

Operators are identified by the ``sub`` claim of a signed bearer token.
Tokens are issued elsewhere; this module only verifies them.
"""

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from provider_validation.core.config import AuthSettings, settings
from provider_validation.utils.logging import get_logger

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_operator_id(token: str, auth: AuthSettings) -> int:
    """Verify a token and return its subject as an operator id.

    Raises:
        jwt.InvalidTokenError: Signature, expiry or audience check failed
        ValueError: The subject is missing or not an integer
    """
    claims = jwt.decode(
        token,
        auth.jwt_secret,
        algorithms=[auth.jwt_algorithm],
        audience=auth.jwt_audience,
        options={"verify_aud": auth.jwt_audience is not None},
    )
    subject = claims.get("sub")
    if subject is None or isinstance(subject, bool):
        raise ValueError("Token has no subject")
    return int(subject)


async def get_current_operator(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> int:
    """Get the operator id from the request's bearer token.

    Raises:
        HTTPException: If the token is missing, invalid, or expired
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise _unauthorized("Authorization header missing")

    if not settings.auth.jwt_secret:
        LOGGER.error("AUTH_JWT_SECRET is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication service error",
        )

    try:
        operator_id = decode_operator_id(credentials.credentials, settings.auth)
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise _unauthorized("Invalid authentication token") from e
    except (TypeError, ValueError) as e:
        LOGGER.warning(f"Token subject is not an operator id: {e}")
        raise _unauthorized("Invalid authentication token") from e

    LOGGER.debug(f"Authenticated operator: {operator_id}")
    return operator_id
