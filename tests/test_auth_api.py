"""Login, logout, session and user administration over HTTP."""

from datetime import timedelta

from koperasi.constants import ActivityAction, Role
from koperasi.extensions import db
from koperasi.models import ActivityLog, User
from koperasi.time_utils import utcnow

from .conftest import PASSWORD


class TestLogin:
    def test_login_sets_session(self, client, users):
        resp = client.post("/api/auth/login", json={"username": "kasir", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user"]["username"] == "kasir"
        assert "password_hash" not in body["user"]
        assert body["session"]["role"] == Role.KASIR
        assert body["redirect"] == "/dashboard"
        assert body["allowed_routes"] == ["/dashboard", "/inventory", "/pos"]

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.get_json()["session"]["userId"] == users[Role.KASIR].id

    def test_wrong_password_and_unknown_user_look_the_same(self, client, users):
        wrong = client.post("/api/auth/login", json={"username": "kasir", "password": "nope-nope"})
        unknown = client.post("/api/auth/login", json={"username": "ghost", "password": "nope-nope"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json() == unknown.get_json() == {"error": "Invalid username or password"}

    def test_deactivated_account(self, client, users, db_session):
        users[Role.KASIR].is_active = False
        db_session.commit()
        resp = client.post("/api/auth/login", json={"username": "kasir", "password": PASSWORD})
        assert resp.status_code == 403
        assert "deactivated" in resp.get_json()["error"]

    def test_deactivated_account_wrong_password_is_generic(self, client, users, db_session):
        users[Role.KASIR].is_active = False
        db_session.commit()
        resp = client.post("/api/auth/login", json={"username": "kasir", "password": "wrong-one"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, users):
        resp = client.post("/api/auth/login", json={"username": "kasir"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Validation failed"
        assert body["errors"][0]["field"] == "password"

    def test_callback_url_is_followed_for_local_paths(self, client, users):
        resp = client.post("/api/auth/login?callbackUrl=/pos", json={"username": "kasir", "password": PASSWORD})
        assert resp.get_json()["redirect"] == "/pos"
        resp = client.post(
            "/api/auth/login?callbackUrl=https://evil.example", json={"username": "kasir", "password": PASSWORD}
        )
        assert resp.get_json()["redirect"] == "/dashboard"

    def test_login_and_logout_are_logged(self, client, login, users):
        login(Role.ADMIN)
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200

        actions = [a for (a,) in db.session.query(ActivityLog.action).filter_by(user_id=users[Role.ADMIN].id)]
        assert ActivityAction.LOGIN in actions
        assert ActivityAction.LOGOUT in actions

        assert client.get("/api/auth/me").status_code == 401

    def test_last_login_recorded(self, login, users):
        login(Role.ADMIN)
        user = db.session.get(User, users[Role.ADMIN].id)
        assert user.last_login_at is not None


class TestSession:
    def test_me_without_session(self, client, users):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.get_json()["redirect"] == "/login?callbackUrl=/api/auth/me"

    def test_deactivation_ends_existing_session(self, client, login, users, db_session):
        login(Role.KASIR)
        users[Role.KASIR].is_active = False
        db_session.commit()
        assert client.get("/api/auth/me").status_code == 401

    def test_expired_session(self, client, login, users):
        login(Role.KASIR)
        with client.session_transaction() as sess:
            sess["expiresAt"] = (utcnow() - timedelta(minutes=1)).isoformat() + "Z"
        assert client.get("/api/auth/me").status_code == 401


class TestUserAdministration:
    def test_admin_cannot_open_users(self, client, login):
        login(Role.ADMIN)
        assert client.get("/api/users").status_code == 403

    def test_super_admin_creates_user(self, client, login):
        login(Role.SUPER_ADMIN)
        resp = client.post("/api/users", json={
            "username": "kasir2",
            "password": "rahasia1",
            "full_name": "Kasir Dua",
            "role": "KASIR",
        })
        assert resp.status_code == 201
        assert resp.get_json()["role"] == "KASIR"

        duplicate = client.post("/api/users", json={
            "username": "kasir2",
            "password": "rahasia1",
            "full_name": "Kasir Tiga",
        })
        assert duplicate.status_code == 409

    def test_short_password_rejected(self, client, login):
        login(Role.SUPER_ADMIN)
        resp = client.post("/api/users", json={"username": "x_user", "password": "123", "full_name": "X"})
        assert resp.status_code == 400

    def test_only_developer_changes_roles(self, client, login, users):
        login(Role.SUPER_ADMIN)
        target = users[Role.STAFF].id
        assert client.put(f"/api/users/{target}/role", json={"role": "ADMIN"}).status_code == 403

        login(Role.DEVELOPER)
        resp = client.put(f"/api/users/{target}/role", json={"role": "ADMIN"})
        assert resp.status_code == 200
        assert resp.get_json()["role"] == "ADMIN"

    def test_cannot_deactivate_self(self, client, login, users):
        login(Role.SUPER_ADMIN)
        resp = client.put(f"/api/users/{users[Role.SUPER_ADMIN].id}/status", json={"is_active": False})
        assert resp.status_code == 400

    def test_deactivate_other(self, client, login, users):
        login(Role.SUPER_ADMIN)
        resp = client.put(f"/api/users/{users[Role.KASIR].id}/status", json={"is_active": False})
        assert resp.status_code == 200
        assert resp.get_json()["is_active"] is False

    def test_update_rejects_null_full_name(self, client, login, users):
        login(Role.SUPER_ADMIN)
        resp = client.patch(f"/api/users/{users[Role.KASIR].id}", json={"full_name": None})
        assert resp.status_code == 400
        assert resp.get_json()["errors"][0]["field"] == "full_name"
