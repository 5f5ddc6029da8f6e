"""Tests for the invite endpoints."""

URL = "/functions/v1/validate-invite"


class TestValidateInvite:
    def test_valid_code_without_secret(self, client):
        response = client.get(URL, params={"code": "PARTNER2025"})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["role"] == "partner"
        assert "inviteId" in data
        assert "expiresAt" in data

    def test_missing_code(self, client):
        response = client.get(URL)
        assert response.status_code == 400
        assert response.json()["error"] == "INVITE_CODE_REQUIRED"

    def test_unknown_code(self, client):
        response = client.get(URL, params={"code": "NOPE"})
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INVITE"


class TestRedeemInvite:
    def test_requires_secret(self, client):
        response = client.post(URL, json={"code": "PARTNER2025", "userId": "test-user-123"})
        assert response.status_code == 401

    def test_redeem(self, client, secret_headers, users, test_user_id):
        response = client.post(URL, json={"code": "PARTNER2025", "userId": test_user_id}, headers=secret_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "role": "partner"}
        assert users.get_by_id(test_user_id).role == "partner"

    def test_second_redeem_fails(self, client, secret_headers, test_user_id):
        client.post(URL, json={"code": "PARTNER2025", "userId": test_user_id}, headers=secret_headers)
        response = client.post(URL, json={"code": "PARTNER2025", "userId": "other"}, headers=secret_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INVITE"

    def test_missing_fields(self, client, secret_headers):
        response = client.post(URL, json={"code": "PARTNER2025"}, headers=secret_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "MISSING_FIELDS"
