"""
Admin user management tests.

Verifies:
- List/get/update/delete users
- Password changes are rehashed, never stored raw
- Self-deletion and deletion of ticket holders are refused
"""

from ticketing.extensions import db
from ticketing.models import User
from ticketing.services import purchase_service
from ticketing.services.credential_service import get_credential_service


class TestAdminUsers:

    def test_list_users(self, client, admin_headers, user):
        resp = client.get("/api/admin/users", headers=admin_headers)
        body = resp.get_json()
        assert body["count"] == 2
        assert {u["email"] for u in body["users"]} == {"admin@example.com", "user@example.com"}
        assert all("password_hash" not in u for u in body["users"])

    def test_get_user(self, client, admin_headers, user):
        resp = client.get(f"/api/admin/users/{user.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["user"]["name"] == "Regular User"

    def test_get_missing_user(self, client, admin_headers):
        resp = client.get("/api/admin/users/999", headers=admin_headers)
        assert resp.status_code == 404

    def test_update_profile_and_role(self, client, admin_headers, user):
        resp = client.put(
            f"/api/admin/users/{user.id}",
            json={"name": "Renamed", "role": "admin"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        body = resp.get_json()["user"]
        assert body["name"] == "Renamed"
        assert body["role"] == "admin"

    def test_password_change_is_rehashed(self, client, admin_headers, user):
        old_hash = user.password_hash

        resp = client.put(
            f"/api/admin/users/{user.id}", json={"password": "brand-new"}, headers=admin_headers
        )
        assert resp.status_code == 200

        db.session.expire_all()
        stored = db.session.get(User, user.id).password_hash
        credentials = get_credential_service()
        assert stored != "brand-new"
        assert stored != old_hash
        assert credentials.verify_password("brand-new", stored)
        assert not credentials.verify_password("secret1", stored)

        login = client.post("/api/login", json={"email": "user@example.com", "password": "brand-new"})
        assert login.status_code == 200

    def test_short_password_rejected(self, client, admin_headers, user):
        resp = client.put(
            f"/api/admin/users/{user.id}", json={"password": "123"}, headers=admin_headers
        )
        assert resp.status_code == 400

    def test_invalid_role_rejected(self, client, admin_headers, user):
        resp = client.put(
            f"/api/admin/users/{user.id}", json={"role": "superuser"}, headers=admin_headers
        )
        assert resp.status_code == 400

    def test_email_conflict(self, client, admin_headers, user):
        resp = client.put(
            f"/api/admin/users/{user.id}", json={"email": "admin@example.com"}, headers=admin_headers
        )
        assert resp.status_code == 409

    def test_delete_user(self, client, admin_headers, user):
        resp = client.delete(f"/api/admin/users/{user.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db.session.get(User, user.id) is None

    def test_cannot_delete_self(self, client, admin_headers, admin):
        resp = client.delete(f"/api/admin/users/{admin.id}", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Cannot delete your own account"

    def test_cannot_delete_ticket_holder(self, client, admin_headers, user, event):
        purchase_service.purchase_tickets(event.id, user.id, 1)

        resp = client.delete(f"/api/admin/users/{user.id}", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Cannot delete user with existing tickets"
