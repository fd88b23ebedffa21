"""Integration tests for admin-only resources and the audit log."""

import pytest

from api.services.roles_permissions import _NamedService


class TestRolesAndPermissions:
    def test_create_role_with_permissions(self, client, world):
        permission = client.post(
            "/api/v1/roles-permissions/permissions",
            json={"name": "MANAGE_CLIENTS", "description": "Manage clients"},
            headers=world.admin.headers,
        ).json()

        response = client.post(
            "/api/v1/roles-permissions/roles",
            json={"name": "Manager", "permissionIds": [permission["id"]]},
            headers=world.admin.headers,
        )

        assert response.status_code == 201
        assert [p["name"] for p in response.json()["permissions"]] == ["MANAGE_CLIENTS"]

    def test_duplicate_role_name_conflicts(self, client, world):
        response = client.post(
            "/api/v1/roles-permissions/roles",
            json={"name": "Employee"},
            headers=world.admin.headers,
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    def test_duplicate_slipping_past_name_check_conflicts(self, client, world, monkeypatch):
        # Simulate a concurrent create that inserted the name after the check ran
        monkeypatch.setattr(_NamedService, "_check_name", lambda self, *args, **kwargs: None)

        response = client.post(
            "/api/v1/roles-permissions/roles",
            json={"name": "Employee"},
            headers=world.admin.headers,
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"
        roles = client.get("/api/v1/roles-permissions/roles", headers=world.admin.headers).json()["data"]
        assert [r["name"] for r in roles].count("Employee") == 1

    def test_deleted_names_stay_reserved(self, client, world):
        created = client.post(
            "/api/v1/roles-permissions/permissions",
            json={"name": "TEMP"},
            headers=world.admin.headers,
        ).json()
        client.delete(f"/api/v1/roles-permissions/permissions/{created['id']}", headers=world.admin.headers)

        response = client.post(
            "/api/v1/roles-permissions/permissions",
            json={"name": "TEMP"},
            headers=world.admin.headers,
        )

        assert response.status_code == 409

    def test_same_name_in_another_tenant_is_fine(self, client, world):
        response = client.post(
            "/api/v1/roles-permissions/roles",
            json={"name": "Employee"},
            headers=world.foreign_admin.headers,
        )
        assert response.status_code == 201

    def test_rename_to_taken_name_conflicts(self, client, world):
        roles = client.get("/api/v1/roles-permissions/roles", headers=world.admin.headers).json()["data"]
        agency_role = next(r for r in roles if r["name"] == "Agency")

        response = client.patch(
            f"/api/v1/roles-permissions/roles/{agency_role['id']}",
            json={"name": "Admin"},
            headers=world.admin.headers,
        )

        assert response.status_code == 409

    def test_unknown_permission_ids(self, client, world):
        response = client.post(
            "/api/v1/roles-permissions/roles",
            json={"name": "Ghost", "permissionIds": [9999]},
            headers=world.admin.headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"] == {"field": "permissionIds", "ids": [9999]}

    @pytest.mark.parametrize("path", ["/api/v1/roles-permissions/roles", "/api/v1/roles-permissions/permissions"])
    def test_non_admins_are_forbidden(self, client, world, path):
        assert client.get(path, headers=world.employee.headers).status_code == 403
        assert client.get(path, headers=world.agency_user.headers).status_code == 403


class TestRoleChangesTakeEffect:
    def test_deactivated_role_drops_its_grants(self, client, world):
        roles = client.get("/api/v1/roles-permissions/roles", headers=world.admin.headers).json()["data"]
        employee_role = next(r for r in roles if r["name"] == "Employee")

        client.delete(f"/api/v1/roles-permissions/roles/{employee_role['id']}", headers=world.admin.headers)

        profile = client.get("/api/v1/auth/me", headers=world.employee.headers).json()
        assert profile["roles"] == []
        assert profile["permissions"] == []


class TestAgencies:
    def test_create_agency_with_members(self, client, world):
        response = client.post(
            "/api/v1/agencies",
            json={"name": "Talent Partners", "userIds": [world.other_agency_user.id]},
            headers=world.admin.headers,
        )

        assert response.status_code == 201
        assert [u["id"] for u in response.json()["users"]] == [world.other_agency_user.id]

    def test_members_must_be_in_tenant(self, client, world):
        response = client.post(
            "/api/v1/agencies",
            json={"name": "Cross Tenant", "userIds": [world.foreign_admin.id]},
            headers=world.admin.headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "userIds"

    def test_update_replaces_members(self, client, world):
        response = client.patch(
            f"/api/v1/agencies/{world.agency_id}",
            json={"userIds": [world.other_agency_user.id]},
            headers=world.admin.headers,
        )

        assert response.status_code == 200
        assert [u["id"] for u in response.json()["users"]] == [world.other_agency_user.id]

    def test_membership_drives_candidate_access(self, client, world, pipeline):
        client.patch(
            f"/api/v1/agencies/{world.agency_id}",
            json={"userIds": [world.other_agency_user.id]},
            headers=world.admin.headers,
        )

        response = client.post(
            "/api/v1/candidates",
            json={"jobVacancyId": pipeline["vacancy"]["id"], "data": {"fullName": "Jo", "experience": 1}},
            headers=world.agency_user.headers,
        )

        assert response.status_code == 403


class TestUsers:
    def test_create_user(self, client, world):
        roles = client.get("/api/v1/roles-permissions/roles", headers=world.admin.headers).json()["data"]
        employee_role = next(r for r in roles if r["name"] == "Employee")

        response = client.post(
            "/api/v1/users",
            json={
                "email": "New.Hire@Acme.test",
                "fullName": "New Hire",
                "password": "s3cret-pass",
                "roleIds": [employee_role["id"]],
            },
            headers=world.admin.headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new.hire@acme.test"
        assert body["tenantId"] == world.tenant_id
        assert [r["name"] for r in body["roles"]] == ["Employee"]
        assert "passwordHash" not in body and "password" not in body

        login = client.post("/api/v1/auth/login", json={"email": "new.hire@acme.test", "password": "s3cret-pass"})
        assert login.status_code == 200

    def test_duplicate_email_conflicts(self, client, world):
        response = client.post(
            "/api/v1/users",
            json={"email": "employee@acme.test", "fullName": "Dup", "password": "password123"},
            headers=world.admin.headers,
        )
        assert response.status_code == 409

    def test_short_password_rejected(self, client, world):
        response = client.post(
            "/api/v1/users",
            json={"email": "short@acme.test", "fullName": "Short", "password": "abc"},
            headers=world.admin.headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "password"

    def test_users_list_is_tenant_scoped(self, client, world):
        emails = [
            u["email"]
            for u in client.get("/api/v1/users", params={"perPage": 50}, headers=world.admin.headers).json()["data"]
        ]
        assert "admin@globex.test" not in emails
        assert "employee@acme.test" in emails


class TestAuditLog:
    def test_successful_changes_are_recorded(self, client, world, factory):
        record = factory.client_record()
        client.patch(f"/api/v1/clients/{record['id']}", json={"name": "Renamed"}, headers=world.admin.headers)
        client.delete(f"/api/v1/clients/{record['id']}", headers=world.admin.headers)

        entries = client.get(
            "/api/v1/audit-logs",
            params={"resource": "CLIENT", "resourceId": record["id"]},
            headers=world.admin.headers,
        ).json()["data"]

        assert [(e["action"], e["status"]) for e in entries] == [
            ("DELETE", "SUCCESS"),
            ("UPDATE", "SUCCESS"),
            ("CREATE", "SUCCESS"),
        ]
        update = entries[1]
        assert update["oldValues"]["name"] == "Initech"
        assert update["newValues"]["name"] == "Renamed"
        assert update["userId"] == world.admin.id
        assert entries[0]["newValues"]["is_active"] is False

    def test_denied_operations_are_recorded_as_errors(self, client, world, factory):
        record = factory.client_record()
        client.delete(f"/api/v1/clients/{record['id']}", headers=world.employee.headers)

        entries = client.get(
            "/api/v1/audit-logs",
            params={"userId": world.employee.id},
            headers=world.admin.headers,
        ).json()["data"]

        assert len(entries) == 1
        assert entries[0]["action"] == "DELETE"
        assert entries[0]["status"] == "ERROR"
        assert entries[0]["errorMessage"] == "Only admins can delete clients"

    def test_user_creation_never_logs_password(self, client, world):
        client.post(
            "/api/v1/users",
            json={"email": "audit@acme.test", "fullName": "Audit", "password": "password123"},
            headers=world.admin.headers,
        )

        entry = client.get(
            "/api/v1/audit-logs",
            params={"resource": "USER"},
            headers=world.admin.headers,
        ).json()["data"][0]

        assert entry["action"] == "CREATE"
        assert "password_hash" not in entry["newValues"]
        assert entry["newValues"]["email"] == "audit@acme.test"

    def test_audit_log_is_admin_only_and_tenant_scoped(self, client, world, factory):
        factory.client_record()

        assert client.get("/api/v1/audit-logs", headers=world.employee.headers).status_code == 403
        foreign = client.get("/api/v1/audit-logs", headers=world.foreign_admin.headers).json()
        assert foreign["data"] == []
