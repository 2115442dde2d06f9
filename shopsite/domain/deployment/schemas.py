"""Client deployment schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class DeploymentRequest(BaseModel):
    """{action, ...params}; parameters ride alongside the action name"""

    action: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: Optional[str] = None


class CredentialsView(BaseModel):
    """Stored credentials minus the encrypted service-role key"""

    id: str
    supabase_url: str
    supabase_anon_key: str
    connection_status: str
    db_initialized: bool
    last_connection_test: Optional[datetime] = None
    last_initialized_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuditLogResponse(BaseModel):
    id: int
    user_id: Optional[str] = None
    action: str
    details: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
