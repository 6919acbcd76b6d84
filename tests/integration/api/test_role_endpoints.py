import pytest
from uuid import uuid4
from fastapi.testclient import TestClient

from faker import Faker

fake = Faker()


@pytest.mark.integration
class TestRoleEndpoints:

    def _create_role(self, client: TestClient) -> dict:
        response = client.post("/api/v1/roles/", json={
            "name": fake.unique.job(),
            "description": fake.sentence(),
        })
        assert response.status_code == 201
        return response.json()

    def test_create_role(self, client: TestClient):
        response = client.post("/api/v1/roles/", json={"name": "Editor", "description": "Edits content"})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Editor"
        assert data["policies"] == []

    def test_create_duplicate_role(self, client: TestClient):
        client.post("/api/v1/roles/", json={"name": "Editor"})

        response = client.post("/api/v1/roles/", json={"name": "Editor"})

        assert response.status_code == 409
        assert response.json()["detail"] == "Role with name 'Editor' already exists"

    def test_get_role(self, client: TestClient):
        role = self._create_role(client)

        response = client.get(f"/api/v1/roles/{role['id']}/")

        assert response.status_code == 200
        assert response.json()["name"] == role["name"]

    def test_get_unknown_role(self, client: TestClient):
        response = client.get(f"/api/v1/roles/{uuid4()}/")

        assert response.status_code == 404
        assert response.json()["detail"] == "Role not found"

    def test_create_policy(self, client: TestClient):
        role = self._create_role(client)

        response = client.post(f"/api/v1/roles/{role['id']}/policies/", json={
            "module": "content",
            "function": "read",
            "limitations": {"Class": ["article", "image"]},
        })

        assert response.status_code == 201
        policy = response.json()
        assert policy["role_id"] == role["id"]
        assert policy["limitations"] == {"Class": ["article", "image"]}
        assert response.headers["Location"].endswith(
            f"/api/v1/roles/{role['id']}/policies/{policy['id']}/"
        )

    def test_location_loads_policy(self, client: TestClient):
        role = self._create_role(client)
        created = client.post(f"/api/v1/roles/{role['id']}/policies/", json={
            "module": "content",
            "function": "edit",
        })

        response = client.get(created.headers["Location"])

        assert response.status_code == 200
        assert response.json()["function"] == "edit"
        assert response.json()["limitations"] == {}

    def test_role_lists_policies(self, client: TestClient):
        role = self._create_role(client)
        client.post(f"/api/v1/roles/{role['id']}/policies/", json={"module": "content", "function": "read"})
        client.post(f"/api/v1/roles/{role['id']}/policies/", json={"module": "content", "function": "edit"})

        response = client.get(f"/api/v1/roles/{role['id']}/")

        assert [policy["function"] for policy in response.json()["policies"]] == ["read", "edit"]

    def test_create_policy_for_unknown_role(self, client: TestClient):
        response = client.post(f"/api/v1/roles/{uuid4()}/policies/", json={
            "module": "content",
            "function": "read",
        })

        assert response.status_code == 404

    def test_unknown_policy(self, client: TestClient):
        role = self._create_role(client)

        response = client.get(f"/api/v1/roles/{role['id']}/policies/{uuid4()}/")

        assert response.status_code == 404
        assert response.json()["detail"] == "Policy not found"

    def test_invalid_policy(self, client: TestClient):
        role = self._create_role(client)

        response = client.post(f"/api/v1/roles/{role['id']}/policies/", json={"module": "", "function": "read"})

        assert response.status_code == 422
