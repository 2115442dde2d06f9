"""
Client deployment tests: super-admin gating, credential secrecy, connection probing and schema push.
"""

from unittest.mock import AsyncMock, patch

import pytest

from shopsite.models import AdminAuditLog, ClientSupabaseCredentials
from shopsite.secret_box import decrypt_secret
from shopsite.services.remote_project import ProbeResult, RemoteProjectClient, classify_probe_response
from shopsite.services.schema_script import build_schema_statements

from .conftest import auth_headers

CREDENTIALS = {
    "action": "save_credentials",
    "supabase_url": "https://client-project.supabase.co/",
    "supabase_anon_key": "anon-key",
    "supabase_service_role_key": "service-role-secret",
}


def deploy(client, user_id, **body):
    return client.post("/functions/client-deployment", json=body, headers=auth_headers(user_id))


class TestProbeClassification:
    @pytest.mark.parametrize(
        "status_code,body,reachable",
        [
            (200, [], True),
            (404, {"code": "42P01", "message": 'relation "public._test_connection" does not exist'}, True),
            (404, {"code": "PGRST205", "message": "Could not find the table in the schema cache"}, True),
            (401, {"message": "Invalid API key"}, False),
            (403, {"message": "permission denied"}, False),
            (500, {"message": "internal error"}, False),
        ],
    )
    def test_classification(self, status_code, body, reachable):
        result = classify_probe_response(status_code, body if isinstance(body, dict) else None)
        assert result.reachable is reachable

    def test_auth_failure_message_kept(self):
        assert classify_probe_response(401, {"message": "Invalid API key"}).message == "Invalid API key"

    def test_structured_error_field(self):
        result = classify_probe_response(502, {"error": {"status": 502, "reason": "bad gateway"}})

        assert result.reachable is False
        assert "bad gateway" in result.message


class TestSchemaScript:
    def test_statements_are_rerunnable(self):
        statements = build_schema_statements()
        creates = [s for s in statements if s.lstrip().upper().startswith("CREATE TABLE")]
        assert creates
        assert all("IF NOT EXISTS" in s.upper() for s in creates)


class TestClientDeploymentFunction:
    def test_anonymous_malformed_body_is_unauthorized(self, client):
        response = client.post("/functions/client-deployment", json={"action": 5})
        assert response.status_code == 401

    def test_malformed_body_from_super_admin(self, client, super_admin):
        response = deploy(client, super_admin.user_id, action=5)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    def test_admin_is_not_enough(self, client, admin):
        response = deploy(client, admin.user_id, **CREDENTIALS)
        assert response.status_code == 403
        assert response.json() == {"error": "Super admin access required"}

    def test_unknown_action(self, client, super_admin):
        response = deploy(client, super_admin.user_id, action="drop_everything")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}

    def test_save_requires_all_fields(self, client, super_admin):
        response = deploy(client, super_admin.user_id, action="save_credentials", supabase_url="https://x.supabase.co")
        assert response.status_code == 400
        assert response.json() == {"error": "All credentials are required"}

    def test_saved_key_is_encrypted_and_never_returned(self, client, db, super_admin):
        assert deploy(client, super_admin.user_id, **CREDENTIALS).status_code == 200

        stored = db.query(ClientSupabaseCredentials).one()
        assert stored.supabase_url == "https://client-project.supabase.co"
        assert stored.connection_status == "not_tested"
        assert stored.supabase_service_role_key_encrypted != "service-role-secret"
        assert decrypt_secret(stored.supabase_service_role_key_encrypted) == "service-role-secret"

        response = deploy(client, super_admin.user_id, action="get_credentials")

        assert response.status_code == 200
        credentials = response.json()["credentials"]
        assert credentials["supabase_anon_key"] == "anon-key"
        assert "service-role-secret" not in response.text
        assert not any("service_role" in key for key in credentials)

    def test_saving_again_replaces_the_row(self, client, db, super_admin):
        deploy(client, super_admin.user_id, **CREDENTIALS)
        deploy(client, super_admin.user_id, **{**CREDENTIALS, "supabase_url": "https://other.supabase.co"})
        assert db.query(ClientSupabaseCredentials).count() == 1

    def test_get_without_credentials(self, client, super_admin):
        response = deploy(client, super_admin.user_id, action="get_credentials")
        assert response.json() == {"success": True, "credentials": None}

    def test_connection_success_marks_connected(self, client, db, super_admin):
        deploy(client, super_admin.user_id, **CREDENTIALS)

        with patch.object(
            RemoteProjectClient, "probe", new_callable=AsyncMock, return_value=ProbeResult(True, 404, "missing")
        ):
            response = deploy(client, super_admin.user_id, action="test_connection")

        assert response.status_code == 200
        assert response.json()["message"] == "Connection successful!"
        db.expire_all()
        assert db.query(ClientSupabaseCredentials).one().connection_status == "connected"

    def test_connection_rejected_marks_failed(self, client, db, super_admin):
        deploy(client, super_admin.user_id, **CREDENTIALS)

        with patch.object(
            RemoteProjectClient,
            "probe",
            new_callable=AsyncMock,
            return_value=ProbeResult(False, 401, "Invalid API key"),
        ):
            response = deploy(client, super_admin.user_id, action="test_connection")

        assert response.status_code == 400
        assert response.json() == {"error": "Connection failed: Invalid API key"}
        db.expire_all()
        assert db.query(ClientSupabaseCredentials).one().connection_status == "failed"

    def test_initialize_requires_successful_test(self, client, super_admin):
        deploy(client, super_admin.user_id, **CREDENTIALS)
        response = deploy(client, super_admin.user_id, action="initialize_database")
        assert response.status_code == 400
        assert response.json() == {"error": "Please test connection first"}

    def test_initialize_pushes_schema(self, client, db, super_admin):
        deploy(client, super_admin.user_id, **CREDENTIALS)
        total = len(build_schema_statements())

        with patch.object(
            RemoteProjectClient, "probe", new_callable=AsyncMock, return_value=ProbeResult(True, 200)
        ), patch.object(
            RemoteProjectClient, "exec_statements", new_callable=AsyncMock, return_value=(total, [])
        ) as mock_exec:
            deploy(client, super_admin.user_id, action="test_connection")
            response = deploy(client, super_admin.user_id, action="initialize_database")

        assert response.status_code == 200
        assert response.json()["executed"] == total
        assert response.json()["failed"] == 0
        mock_exec.assert_awaited_once()
        db.expire_all()
        assert db.query(ClientSupabaseCredentials).one().db_initialized is True

    def test_every_action_is_audited(self, client, db, super_admin):
        deploy(client, super_admin.user_id, **CREDENTIALS)
        deploy(client, super_admin.user_id, action="get_credentials")
        deploy(client, super_admin.user_id, action="delete_credentials")

        actions = [log.action for log in db.query(AdminAuditLog).order_by(AdminAuditLog.id).all()]
        assert actions == ["SAVE_CLIENT_CREDENTIALS", "VIEW_CLIENT_CREDENTIALS", "DELETE_CLIENT_CREDENTIALS"]
        assert "service-role-secret" not in str([log.details for log in db.query(AdminAuditLog).all()])

        logs = client.get("/admin/audit-logs", headers=auth_headers(super_admin.user_id))
        assert logs.status_code == 200
        assert logs.json()[0]["action"] == "DELETE_CLIENT_CREDENTIALS"
