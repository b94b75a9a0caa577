from datetime import timedelta

from app.models.password_reset import PasswordReset
from app.models.session import UserSession
from app.utils.timeutils import utcnow
from tests.conftest import create_user, login


def test_admin_routes_require_admin_role(user_client):
    for path in ("/api/admin/stats", "/api/admin/users", "/api/admin/sessions", "/api/admin/jobs/status"):
        response = user_client.get(path)
        assert response.status_code == 403
        assert response.json()["detail"] == "Administrator privileges required"


def test_admin_routes_require_login(client):
    assert client.get("/api/admin/stats").status_code == 401


def test_stats_counts_catalog_and_accounts(admin_client, user, catalog, db_session):
    db_session.add(PasswordReset(email=user.email, token="p" * 64))
    db_session.commit()

    stats = admin_client.get("/api/admin/stats").json()

    assert stats["total_users"] == 2
    assert stats["active_users"] == 2
    assert stats["total_movies"] == 4
    assert stats["total_series"] == 1
    assert stats["total_seasons"] == 2
    assert stats["total_episodes"] == 3
    assert stats["total_videos"] == 2
    assert stats["total_genres"] == 3
    assert stats["active_sessions"] == 1
    assert stats["pending_password_resets"] == 1


def test_list_users_with_filters(admin_client, db_session, user):
    create_user(db_session, email="zoe@example.com", username="zoe", name="Zoe", is_active=False)

    everyone = admin_client.get("/api/admin/users").json()
    admins = admin_client.get("/api/admin/users", params={"role": "ADMIN"}).json()
    inactive = admin_client.get("/api/admin/users", params={"is_active": False}).json()
    searched = admin_client.get("/api/admin/users", params={"search": "zo"}).json()

    assert everyone["pagination"]["total"] == 3
    assert [u["username"] for u in admins["users"]] == ["admin"]
    assert [u["username"] for u in inactive["users"]] == ["zoe"]
    assert [u["username"] for u in searched["users"]] == ["zoe"]


def test_deactivating_user_ends_their_sessions(admin_client, make_client, db_session, user):
    member = make_client()
    login(member)
    assert member.get("/api/auth/me").status_code == 200

    response = admin_client.patch(f"/api/admin/users/{user.id}", json={"is_active": False})

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    db_session.expire_all()
    assert db_session.query(UserSession).filter(UserSession.user_id == user.id).count() == 0
    assert member.get("/api/auth/me").status_code == 401


def test_promote_user_to_admin(admin_client, user):
    response = admin_client.patch(f"/api/admin/users/{user.id}", json={"role": "ADMIN"})

    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"


def test_admin_cannot_demote_themselves(admin_client, admin):
    response = admin_client.patch(f"/api/admin/users/{admin.id}", json={"role": "USER"})

    assert response.status_code == 400


def test_update_missing_user(admin_client):
    assert admin_client.patch("/api/admin/users/9999", json={"is_active": True}).status_code == 404


def test_list_and_revoke_sessions(admin_client, make_client, user):
    member = make_client()
    session_id = login(member).json()["session_id"]

    listing = admin_client.get("/api/admin/sessions", params={"user_id": user.id}).json()

    assert [s["id"] for s in listing["sessions"]] == [session_id]
    assert listing["sessions"][0]["user"]["username"] == "user"

    assert admin_client.delete(f"/api/admin/sessions/{session_id}").status_code == 200
    assert member.get("/api/auth/me").status_code == 401
    assert admin_client.delete(f"/api/admin/sessions/{session_id}").status_code == 404


def test_trigger_session_purge_job(admin_client, db_session, user):
    now = utcnow()
    db_session.add(UserSession(user_id=user.id, token="old", expires_at=now - timedelta(hours=1)))
    db_session.commit()

    response = admin_client.post("/api/admin/jobs/trigger/purge_expired_sessions")

    assert response.status_code == 200
    assert response.json()["job"]["status"] == "success"
    assert response.json()["job"]["deleted"] == 1
    db_session.expire_all()
    assert db_session.query(UserSession).filter(UserSession.token == "old").count() == 0


def test_trigger_reset_cleanup_job(admin_client, db_session, user):
    db_session.add(PasswordReset(email=user.email, token="used", used=True))
    db_session.add(PasswordReset(email=user.email, token="pending"))
    db_session.commit()

    response = admin_client.post("/api/admin/jobs/trigger/cleanup_password_resets")

    assert response.json()["job"]["deleted"] == 1
    db_session.expire_all()
    assert [r.token for r in db_session.query(PasswordReset).all()] == ["pending"]


def test_trigger_unknown_job(admin_client):
    assert admin_client.post("/api/admin/jobs/trigger/update_trending").status_code == 400


def test_jobs_status_reports_every_job(admin_client):
    admin_client.post("/api/admin/jobs/trigger/purge_expired_sessions")

    body = admin_client.get("/api/admin/jobs/status").json()

    assert body["scheduler_running"] is False
    jobs = {job["id"]: job for job in body["jobs"]}
    assert set(jobs) == {"purge_expired_sessions", "cleanup_password_resets"}
    assert jobs["purge_expired_sessions"]["status"] == "success"
    assert jobs["cleanup_password_resets"]["status"] == "idle"
