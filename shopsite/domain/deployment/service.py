"""
Client deployment helper
Stores a client's hosted Supabase credentials, probes the project and pushes the base schema
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...audit import record_audit
from ...models import ClientSupabaseCredentials, Profile
from ...secret_box import SecretDecryptionError, decrypt_secret, encrypt_secret
from ...services.remote_project import RemoteProjectClient
from ...services.schema_script import build_schema_statements
from .repository import CredentialsRepository
from .schemas import CredentialsView, DeploymentRequest

logger = logging.getLogger(__name__)


def credentials_view(credentials: Optional[ClientSupabaseCredentials]) -> Optional[dict]:
    """Public shape of the stored row; the encrypted key is never included"""
    if credentials is None:
        return None
    return CredentialsView.model_validate(credentials).model_dump(mode="json")


class ClientDeploymentService:
    def __init__(self, db: Session, actor: Profile, ip_address: Optional[str] = None):
        self.db = db
        self.actor = actor
        self.ip_address = ip_address
        self.repo = CredentialsRepository()

    def _audit(self, action: str, details: Optional[dict] = None) -> None:
        record_audit(self.db, self.actor.user_id, action, details, self.ip_address)

    def _require_credentials(self, message: str) -> ClientSupabaseCredentials:
        credentials = self.repo.get(self.db)
        if not credentials:
            raise HTTPException(status_code=400, detail=message)
        return credentials

    def _client_for(self, credentials: ClientSupabaseCredentials) -> RemoteProjectClient:
        try:
            service_role_key = decrypt_secret(credentials.supabase_service_role_key_encrypted)
        except SecretDecryptionError as e:
            raise HTTPException(
                status_code=500, detail="Stored credentials could not be decrypted. Please save them again."
            ) from e
        return RemoteProjectClient(credentials.supabase_url, credentials.supabase_anon_key, service_role_key)

    async def handle(self, request: DeploymentRequest) -> dict:
        handlers = {
            "save_credentials": self.save_credentials,
            "get_credentials": self.get_credentials,
            "test_connection": self.test_connection,
            "initialize_database": self.initialize_database,
            "delete_credentials": self.delete_credentials,
        }
        handler = handlers.get(request.action or "")
        if handler is None:
            raise HTTPException(status_code=400, detail="Invalid action")
        logger.info(f"🚀 Client deployment action: {request.action} by {self.actor.user_id}")
        return await handler(request)

    async def save_credentials(self, request: DeploymentRequest) -> dict:
        url = (request.supabase_url or "").strip()
        anon_key = (request.supabase_anon_key or "").strip()
        service_role_key = (request.supabase_service_role_key or "").strip()
        if not url or not anon_key or not service_role_key:
            raise HTTPException(status_code=400, detail="All credentials are required")
        if not url.startswith(("https://", "http://")):
            raise HTTPException(status_code=400, detail="Supabase URL must start with https://")

        self.repo.replace(
            self.db,
            supabase_url=url.rstrip("/"),
            supabase_anon_key=anon_key,
            supabase_service_role_key_encrypted=encrypt_secret(service_role_key),
            connection_status="not_tested",
            db_initialized=False,
            created_by=self.actor.user_id,
        )
        self._audit("SAVE_CLIENT_CREDENTIALS", {"supabase_url": url})
        return {"success": True, "message": "Credentials saved successfully"}

    async def get_credentials(self, request: DeploymentRequest) -> dict:
        credentials = self.repo.get(self.db)
        self._audit("VIEW_CLIENT_CREDENTIALS", {"found": credentials is not None})
        return {"success": True, "credentials": credentials_view(credentials)}

    async def test_connection(self, request: DeploymentRequest) -> dict:
        credentials = self._require_credentials("No credentials found. Please save credentials first.")
        client = self._client_for(credentials)
        now = datetime.now(timezone.utc)

        try:
            result = await client.probe()
        except httpx.HTTPError as e:
            logger.error(f"❌ Connection test error for {credentials.supabase_url}: {e}")
            self.repo.update(self.db, credentials, connection_status="failed", last_connection_test=now)
            self._audit(
                "TEST_CLIENT_CONNECTION",
                {"supabase_url": credentials.supabase_url, "success": False, "error": str(e)},
            )
            raise HTTPException(status_code=500, detail=f"Connection test failed: {e}") from e

        self.repo.update(
            self.db,
            credentials,
            connection_status="connected" if result.reachable else "failed",
            last_connection_test=now,
        )
        self._audit(
            "TEST_CLIENT_CONNECTION",
            {
                "supabase_url": credentials.supabase_url,
                "success": result.reachable,
                "error": None if result.reachable else result.message,
            },
        )

        if not result.reachable:
            raise HTTPException(status_code=400, detail=f"Connection failed: {result.message}")
        return {"success": True, "message": "Connection successful!"}

    async def initialize_database(self, request: DeploymentRequest) -> dict:
        credentials = self._require_credentials("No credentials found")
        if credentials.connection_status != "connected":
            raise HTTPException(status_code=400, detail="Please test connection first")

        client = self._client_for(credentials)
        statements = build_schema_statements()
        executed, failed = await client.exec_statements(statements)

        self.repo.update(
            self.db,
            credentials,
            db_initialized=True,
            last_initialized_at=datetime.now(timezone.utc),
        )
        self._audit(
            "INITIALIZE_CLIENT_DATABASE",
            {
                "supabase_url": credentials.supabase_url,
                "success": not failed,
                "executed": executed,
                "failed": len(failed),
            },
        )

        message = "Database structure initialized."
        if failed:
            message += f" {len(failed)} of {len(statements)} statements failed; check the server logs."
        return {
            "success": True,
            "message": message,
            "executed": executed,
            "failed": len(failed),
            "total": len(statements),
        }

    async def delete_credentials(self, request: DeploymentRequest) -> dict:
        deleted = self.repo.delete_all(self.db)
        self._audit("DELETE_CLIENT_CREDENTIALS", {"deleted": deleted})
        return {"success": True, "message": "Credentials deleted"}
