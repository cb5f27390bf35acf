# moneytor/api/deps.py
from fastapi import HTTPException, Header
from jose import jwt, JWTError
from pydantic import BaseModel
from supabase import Client
from typing import Optional
import logging

from moneytor.config import settings
from moneytor.core.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None


def get_db() -> Client:
    return get_supabase_client()


async def get_current_user(authorization: str = Header(None)) -> CurrentUser:
    """
    Verifies a Supabase-issued JWT locally using SUPABASE_JWT_SECRET.
    The token subject scopes every query to the caller's rows.
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")

    if not settings.SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Authentication is not configured")

    token = authorization.replace("Bearer ", "").strip()

    try:
        # Supabase signs access tokens with HS256
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        logger.warning("❌ Token has expired")
        raise HTTPException(status_code=401, detail="Token expired")
    except JWTError as e:
        logger.warning("❌ JWT decode error: %s", str(e))
        raise HTTPException(status_code=401, detail="Invalid token")

    sub = payload.get("sub")
    if not sub:
        logger.error("❌ Token payload missing 'sub' field")
        raise HTTPException(status_code=401, detail="Invalid token payload: missing user ID")

    return CurrentUser(id=sub, email=payload.get("email"))
