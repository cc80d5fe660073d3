from typing import Optional
from fastapi import Header

from utils.errors import UnauthorizedError

def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Read the authenticated user id injected by the auth provider."""
    if x_user_id is None or not x_user_id.strip():
        raise UnauthorizedError()
    return x_user_id.strip()
