"""
Supabase Auth admin client
Removes identities from the auth provider when an administrator deletes a user
"""

import logging

import httpx

from ..config import SUPABASE_SERVICE_ROLE_KEY, SUPABASE_URL

logger = logging.getLogger(__name__)


class IdentityAdminError(Exception):
    pass


async def delete_identity(user_id: str) -> None:
    """
    Delete an identity through the Supabase Auth admin API.
    An identity that is already gone counts as deleted.

    Raises:
        IdentityAdminError: not configured, rejected, or unreachable
    """
    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        logger.error("❌ SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
        raise IdentityAdminError("Identity admin API not configured")

    url = f"{SUPABASE_URL.rstrip('/')}/auth/v1/admin/users/{user_id}"
    headers = {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
    }

    try:
        async with httpx.AsyncClient() as client:
            response = await client.delete(url, headers=headers, timeout=10.0)
    except httpx.HTTPError as e:
        logger.error(f"❌ Auth admin API unreachable: {e}")
        raise IdentityAdminError(str(e)) from e

    if response.status_code == 404:
        logger.warning(f"⚠️ Identity {user_id} not found at auth provider, treating as deleted")
        return

    if response.status_code >= 400:
        logger.error(f"❌ Auth admin API rejected delete for {user_id}: {response.status_code} {response.text[:200]}")
        raise IdentityAdminError(f"Auth provider returned {response.status_code}")

    logger.info(f"✅ Identity {user_id} removed from auth provider")
