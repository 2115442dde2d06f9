import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db, is_unique_violation
from .models import Profile, UserRole

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)

JWT_ALGORITHM = "HS256"


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase access token (HS256, signed with the project's JWT secret).

    Returns the decoded claims. Raises 401 for bad, expired or mis-addressed tokens.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        claims = jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        logger.info("🔒 Expired access token presented")
        raise HTTPException(status_code=401, detail="Token expired") from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    if not claims.get("sub"):
        logger.error(f"❌ Token missing subject claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token")

    return claims


def get_or_create_profile(db: Session, user_id: str, email: Optional[str], full_name: Optional[str]) -> Profile:
    """Find the profile for an identity, creating it (unapproved, role 'user') on first sight"""
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if profile:
        return profile

    logger.info(f"🆕 Creating profile for new identity: {email}")
    profile = Profile(user_id=user_id, email=email, full_name=full_name, is_approved=False)
    db.add(profile)
    db.add(UserRole(user_id=user_id, role="user"))
    try:
        db.commit()
        db.refresh(profile)
        logger.info(f"✅ Profile created: {user_id}")
    except IntegrityError as e:
        db.rollback()
        # Two first requests from the same identity raced; the other one won
        if is_unique_violation(e):
            profile = db.query(Profile).filter(Profile.user_id == user_id).first()
            if profile:
                return profile
        raise
    return profile


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Get the caller's profile from the bearer token"""
    if not credentials:
        raise HTTPException(status_code=401, detail="No authorization header")

    claims = verify_supabase_token(credentials.credentials)
    metadata = claims.get("user_metadata") or {}

    try:
        return get_or_create_profile(
            db,
            user_id=claims["sub"],
            email=claims.get("email"),
            full_name=metadata.get("full_name") or metadata.get("name"),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Authentication failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Authentication failed") from e


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[Profile]:
    """Like get_current_user, but anonymous callers get None instead of a 401"""
    if not credentials:
        return None
    return await get_current_user(credentials, db)


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
