"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status

MAX_OWNER_ID_LENGTH = 64


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> str:
    """
    Resolve the caller's opaque owner identity from the `X-Owner-Id` header.
    """

    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Owner-Id header is required.",
        )
    if len(owner_id) > MAX_OWNER_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"X-Owner-Id must be at most {MAX_OWNER_ID_LENGTH} characters.",
        )
    return owner_id
