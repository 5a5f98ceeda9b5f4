from typing import Optional

from fastapi import Header, HTTPException


def current_user_id(
    x_user_id: Optional[int] = Header(None, alias="X-User-ID")
) -> int:
    """Caller identity, set by the auth layer in front of this service."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id
