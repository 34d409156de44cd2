"""
Catalog API — Auth Gate
=======================

What:  Pass/fail gate in front of every catalog route.
Why:   The catalog has no users or roles; a request is either allowed or rejected.
How:   FastAPI dependency reading `Authorization: Bearer <token>` and comparing
       it to API_TOKEN in constant time. Routers attach it with
       `dependencies=[Depends(require_auth)]`.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from catalog.config import settings
from catalog.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header reaches require_auth, which raises our
# AuthenticationError (401 in the standard error envelope) instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    if not settings.api_token:
        logger.error("API_TOKEN is not configured; rejecting request")
        raise AuthenticationError(message="Authentication is not configured on this server")

    if credentials is None:
        raise AuthenticationError(message="Missing bearer token")

    if not secrets.compare_digest(
        credentials.credentials.encode("utf-8"), settings.api_token.encode("utf-8")
    ):
        raise AuthenticationError(message="Invalid bearer token")
