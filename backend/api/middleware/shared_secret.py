"""
Shared-secret check for the /functions/v1 endpoints.

Callers send the process-wide secret in X-Auth in addition to the public
anon key. The check runs as a route dependency, before the request body
reaches any service.
"""

import hmac
import logging
from typing import Optional

from fastapi import Header

from shared.config import get_settings
from shared.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

SHARED_SECRET_HEADER = "X-Auth"


class InvalidSharedSecretError(AuthenticationError):
    def __init__(self):
        super().__init__(
            "Unauthorized - Invalid authentication header",
            code="INVALID_SHARED_SECRET",
        )


def verify_shared_secret(provided: Optional[str]) -> None:
    """
    Compare the provided header with the configured secret in constant time.

    An unset secret rejects every request.

    Raises:
        InvalidSharedSecretError: If the header is missing or wrong
    """
    expected = get_settings().webhook_secret
    if not expected:
        logger.error("WEBHOOK_SECRET is not configured; rejecting function call")
        raise InvalidSharedSecretError()
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning("Rejected function call with missing or invalid X-Auth header")
        raise InvalidSharedSecretError()


async def require_shared_secret(
    x_auth: Optional[str] = Header(default=None, alias=SHARED_SECRET_HEADER),
) -> None:
    """
    Dependency for routes callable only by holders of the shared secret.

    Usage:
        @router.post("/reset-password", dependencies=[Depends(require_shared_secret)])
    """
    verify_shared_secret(x_auth)
