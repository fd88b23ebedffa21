"""Integration tests for client management and soft delete."""


class TestClientCrud:
    def test_admin_creates_client(self, client, world):
        response = client.post(
            "/api/v1/clients",
            json={
                "name": "Initech",
                "contactEmail": "ops@initech.test",
                "assignedEmployeeId": world.employee.id,
            },
            headers=world.admin.headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Initech"
        assert body["tenantId"] == world.tenant_id
        assert body["assignedEmployeeId"] == world.employee.id
        assert body["isActive"] is True

    def test_employee_cannot_create_client(self, client, world):
        response = client.post(
            "/api/v1/clients",
            json={"name": "Initech", "assignedEmployeeId": world.employee.id},
            headers=world.employee.headers,
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Only admins can create clients"

    def test_assigned_employee_must_exist(self, client, world):
        response = client.post(
            "/api/v1/clients",
            json={"name": "Initech", "assignedEmployeeId": 9999},
            headers=world.admin.headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "assignedEmployeeId"

    def test_update_keeps_unsent_fields(self, client, world, factory):
        record = factory.client_record(description="Original")

        response = client.patch(
            f"/api/v1/clients/{record['id']}",
            json={"name": "Initech Global"},
            headers=world.admin.headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Initech Global"
        assert response.json()["description"] == "Original"

    def test_employee_cannot_update_client(self, client, world, factory):
        record = factory.client_record()
        response = client.patch(
            f"/api/v1/clients/{record['id']}",
            json={"name": "Mine now"},
            headers=world.employee.headers,
        )
        assert response.status_code == 403


class TestClientVisibility:
    def test_employee_lists_only_assigned_clients(self, client, world, factory):
        factory.client_record(name="Mine")
        factory.client_record(name="Theirs", assignedEmployeeId=world.other_employee.id)

        response = client.get("/api/v1/clients", headers=world.employee.headers)

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["data"]] == ["Mine"]
        assert response.json()["meta"]["total"] == 1

    def test_employee_gets_forbidden_for_unassigned_client(self, client, world, factory):
        record = factory.client_record(assignedEmployeeId=world.other_employee.id)

        response = client.get(f"/api/v1/clients/{record['id']}", headers=world.employee.headers)

        assert response.status_code == 403

    def test_agency_user_sees_no_clients(self, client, world, factory):
        factory.client_record()
        response = client.get("/api/v1/clients", headers=world.agency_user.headers)
        assert response.json()["data"] == []

    def test_other_tenant_sees_not_found(self, client, world, factory):
        record = factory.client_record()

        response = client.get(f"/api/v1/clients/{record['id']}", headers=world.foreign_admin.headers)

        assert response.status_code == 404
        assert client.get("/api/v1/clients", headers=world.foreign_admin.headers).json()["data"] == []

    def test_pagination_and_search(self, client, world, factory):
        for name in ("Alpha", "Beta", "Alphabet", "Gamma"):
            factory.client_record(name=name)

        page = client.get("/api/v1/clients", params={"perPage": 2, "page": 2}, headers=world.admin.headers).json()
        assert [c["name"] for c in page["data"]] == ["Alphabet", "Gamma"]
        assert page["meta"] == {"page": 2, "perPage": 2, "total": 4, "totalPages": 2}

        found = client.get("/api/v1/clients", params={"search": "alpha"}, headers=world.admin.headers).json()
        assert [c["name"] for c in found["data"]] == ["Alpha", "Alphabet"]

    def test_page_size_is_capped(self, client, world):
        response = client.get("/api/v1/clients", params={"perPage": 1000}, headers=world.admin.headers)
        assert response.status_code == 422


class TestSoftDelete:
    def test_deleted_client_disappears_from_reads(self, client, world, factory):
        record = factory.client_record()
        url = f"/api/v1/clients/{record['id']}"

        assert client.delete(url, headers=world.admin.headers).status_code == 204

        for account in (world.admin, world.employee):
            listing = client.get("/api/v1/clients", headers=account.headers).json()
            assert listing["data"] == []
        assert client.get(url, headers=world.employee.headers).status_code == 404
        assert client.get(url, headers=world.admin.headers).status_code == 404

    def test_admin_can_read_deleted_client_explicitly(self, client, world, factory):
        record = factory.client_record()
        url = f"/api/v1/clients/{record['id']}"
        client.delete(url, headers=world.admin.headers)

        response = client.get(url, params={"includeInactive": "true"}, headers=world.admin.headers)

        assert response.status_code == 200
        assert response.json()["isActive"] is False

    def test_include_inactive_is_ignored_for_non_admins(self, client, world, factory):
        record = factory.client_record()
        url = f"/api/v1/clients/{record['id']}"
        client.delete(url, headers=world.admin.headers)

        response = client.get(url, params={"includeInactive": "true"}, headers=world.employee.headers)

        assert response.status_code == 404

    def test_delete_is_idempotent(self, client, world, factory):
        record = factory.client_record()
        url = f"/api/v1/clients/{record['id']}"

        assert client.delete(url, headers=world.admin.headers).status_code == 204
        assert client.delete(url, headers=world.admin.headers).status_code == 204

    def test_deleted_client_cannot_be_updated(self, client, world, factory):
        record = factory.client_record()
        url = f"/api/v1/clients/{record['id']}"
        client.delete(url, headers=world.admin.headers)

        response = client.patch(url, json={"name": "Back"}, headers=world.admin.headers)

        assert response.status_code == 404

    def test_delete_unknown_client(self, client, world):
        response = client.delete("/api/v1/clients/9999", headers=world.admin.headers)

        assert response.status_code == 404
        assert response.json()["error"]["details"] == {"resource": "Client", "id": 9999}
