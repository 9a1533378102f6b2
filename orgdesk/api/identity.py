"""Caller identity resolution.

Tokens are minted by the surrounding auth service; this module only reads the
``sub`` claim of an optional bearer token so mutations can record who made
them. Missing tokens are allowed and leave ``created_by`` to the request body.
Role checks are not performed here.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from orgdesk.config import settings

logger = logging.getLogger("orgdesk.identity")

security = HTTPBearer(auto_error=False)


def caller_id_from_token(token: str) -> int:
    """Decode a bearer token and return its integer subject."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=401, detail=f"Invalid token: {exc}")

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token payload")


async def get_caller_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[int]:
    """Optional identity dependency; None when no bearer token is sent."""
    if credentials is None:
        return None
    return caller_id_from_token(credentials.credentials)
