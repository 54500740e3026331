import secrets

from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

api_key_header = APIKeyHeader(name="X-Api-Key", auto_error=False)
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)


async def verify_api_key(request: Request, provided_key: str | None = Depends(api_key_header)) -> None:
    """
    Raises:
        HTTPException: 401 if the X-Api-Key header does not match API_SERVER_API_KEY.
    """
    expected_key = request.app.state.config.get_string_val("API_SERVER_API_KEY")
    if not provided_key or not secrets.compare_digest(provided_key, expected_key):
        raise HTTPException(status_code=401, detail="Invalid or missing API key.")


async def get_user_id(user_id: str | None = Depends(user_id_header)) -> str:
    """Opaque user id set by the identity layer in front of the bridge. Used unchanged as the tenancy filter.

    Raises:
        HTTPException: 401 if the X-User-Id header is missing or blank.
    """
    user_id = (user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing user id.")
    return user_id
