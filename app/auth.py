from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from app.config import get_settings, Settings

security = HTTPBearer()

ADMIN_ROLES = ("admin", "super_admin")


def _decode_supabase_token(token: str, settings: Settings) -> dict:
    """Decode and validate a Supabase JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience="authenticated",
        )
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """Extract and validate the current user from the Bearer token."""
    settings = get_settings()
    payload = _decode_supabase_token(credentials.credentials, settings)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: no user ID")

    app_metadata = payload.get("app_metadata") or {}
    return {
        "user_id": user_id,
        "email": payload.get("email", ""),
        "role": app_metadata.get("role", "client"),
    }


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Access denied. Admin role required.")
    return user


async def require_client(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != "client":
        raise HTTPException(status_code=403, detail="Access denied. Client role required.")
    return user
