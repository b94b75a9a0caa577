from datetime import timedelta
import logging

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app import config
from app.models.session import UserSession
from app.services.auth_service import INVALID_CREDENTIALS
from app.utils.security import create_identity_token
from app.utils.timeutils import ensure_aware, utcnow
from tests.conftest import create_user, login, replace_cookie

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


def session_rows(db_session, user_id):
    db_session.expire_all()
    return db_session.query(UserSession).filter(UserSession.user_id == user_id).all()


def test_login_sets_http_only_cookies_and_persists_session(client, db_session, user):
    response = login(client, user_agent=CHROME_WINDOWS)

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == user.email
    assert body["token"]

    cookies = [c.lower() for c in response.headers.get_list("set-cookie")]
    assert any(c.startswith(f"{config.AUTH_COOKIE_NAME}=") for c in cookies)
    assert any(c.startswith(f"{config.SESSION_COOKIE_NAME}=") for c in cookies)
    for cookie in cookies:
        assert "httponly" in cookie
        assert "samesite=strict" in cookie
        assert f"max-age={7 * 24 * 60 * 60}" in cookie

    rows = session_rows(db_session, user.id)
    assert len(rows) == 1
    session = rows[0]
    assert session.id == body["session_id"]
    assert len(session.token) == 64
    assert session.device == "desktop"
    assert session.browser == "Chrome"
    assert session.os == "Windows"
    lifetime = ensure_aware(session.expires_at) - ensure_aware(session.created_at)
    assert abs(lifetime - timedelta(days=7)) < timedelta(seconds=5)


def test_login_with_username(client, user):
    response = login(client, identifier="user")
    assert response.status_code == 200


def test_unknown_account_and_wrong_password_look_the_same(client, user):
    unknown = login(client, identifier="nobody@example.com")
    wrong = login(client, password="WrongPass999")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json()["detail"] == wrong.json()["detail"] == INVALID_CREDENTIALS


def test_deactivated_account_cannot_log_in(client, db_session):
    create_user(db_session, email="gone@example.com", username="gone", is_active=False)

    response = login(client, identifier="gone@example.com")

    assert response.status_code == 403


def test_fifth_login_is_rejected_without_creating_a_session(make_client, db_session, user):
    for _ in range(config.MAX_ACTIVE_SESSIONS):
        assert login(make_client()).status_code == 200

    response = login(make_client())

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["session_limit"] is True
    assert "set-cookie" not in response.headers
    assert len(session_rows(db_session, user.id)) == config.MAX_ACTIVE_SESSIONS


def test_expired_sessions_do_not_count_towards_the_limit(make_client, db_session, user):
    for _ in range(config.MAX_ACTIVE_SESSIONS):
        assert login(make_client()).status_code == 200

    stale = session_rows(db_session, user.id)[0]
    stale.expires_at = utcnow() - timedelta(minutes=1)
    db_session.commit()

    assert login(make_client()).status_code == 200


def test_me_returns_user_and_current_session(user_client, user):
    response = user_client.get("/api/auth/me")

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == user.id
    assert body["user"]["role"] == "USER"
    assert body["session"]["id"]


def test_me_requires_both_cookies(client, user):
    assert client.get("/api/auth/me").json()["detail"] == "Not authenticated"

    login(client)
    client.cookies.delete(config.SESSION_COOKIE_NAME)
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_tampered_identity_token_is_invalid(user_client):
    token = user_client.cookies.get(config.AUTH_COOKIE_NAME)
    replace_cookie(user_client, config.AUTH_COOKIE_NAME, token[:-2] + "xx")

    response = user_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid session"


def test_session_token_of_another_user_is_rejected(make_client, db_session, user):
    create_user(db_session, email="other@example.com", username="other")
    mine = make_client()
    theirs = make_client()
    login(mine)
    login(theirs, identifier="other@example.com")

    replace_cookie(mine, config.SESSION_COOKIE_NAME, theirs.cookies.get(config.SESSION_COOKIE_NAME))
    response = mine.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid session"


def test_expired_session_row_is_rejected(user_client, db_session, user):
    session = session_rows(db_session, user.id)[0]
    session.expires_at = utcnow() - timedelta(seconds=1)
    db_session.commit()

    response = user_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Session expired"


def test_expired_identity_token_is_rejected(user_client, user):
    expired = create_identity_token(user.id, user.email, user.role, expires_delta=timedelta(minutes=-1))
    replace_cookie(user_client, config.AUTH_COOKIE_NAME, expired)

    response = user_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Session expired"


def test_deactivated_user_with_live_session_gets_403(user_client, db_session, user):
    user.is_active = False
    db_session.commit()

    response = user_client.get("/api/auth/me")

    assert response.status_code == 403


def test_authenticated_request_bumps_last_activity(user_client, db_session, user):
    session = session_rows(db_session, user.id)[0]
    before = ensure_aware(session.updated_at)

    user_client.get("/api/auth/me")

    after = ensure_aware(session_rows(db_session, user.id)[0].updated_at)
    assert after > before


def test_failed_activity_update_does_not_fail_request(user_client, monkeypatch, caplog):
    original_commit = Session.commit
    calls = []

    def flaky_commit(self):
        calls.append(self)
        if len(calls) == 1:
            raise OperationalError("UPDATE user_sessions", {}, Exception("database is locked"))
        return original_commit(self)

    monkeypatch.setattr(Session, "commit", flaky_commit)

    with caplog.at_level(logging.WARNING, logger="app.services.session_service"):
        response = user_client.get("/api/auth/me")

    assert response.status_code == 200
    assert "Could not update activity" in caplog.text


def test_list_sessions_flags_current(user_client, make_client, user):
    other_device = make_client()
    login(other_device, user_agent=SAFARI_IPHONE)

    response = user_client.get("/api/auth/sessions")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["active"] == 2
    assert body["sessions"][0]["is_current"] is True
    assert [s["is_current"] for s in body["sessions"]].count(True) == 1
    mobile = [s for s in body["sessions"] if not s["is_current"]][0]
    assert mobile["device"] == "mobile"
    assert mobile["os"] == "iOS"


def test_revoke_all_other_sessions(user_client, make_client, db_session, user):
    others = [make_client(), make_client()]
    for other in others:
        login(other)

    response = user_client.delete("/api/auth/sessions")

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 2
    assert len(session_rows(db_session, user.id)) == 1
    assert user_client.get("/api/auth/me").status_code == 200
    for other in others:
        assert other.get("/api/auth/me").status_code == 401


def test_revoke_single_session(user_client, make_client, db_session, user):
    other = make_client()
    other_id = login(other).json()["session_id"]

    response = user_client.delete(f"/api/auth/sessions/{other_id}")

    assert response.status_code == 200
    assert other.get("/api/auth/me").status_code == 401
    assert len(session_rows(db_session, user.id)) == 1


def test_cannot_revoke_current_session(user_client):
    current_id = user_client.get("/api/auth/me").json()["session"]["id"]

    response = user_client.delete(f"/api/auth/sessions/{current_id}")

    assert response.status_code == 400


def test_cannot_revoke_someone_elses_session(user_client, make_client, db_session):
    create_user(db_session, email="other@example.com", username="other")
    other = make_client()
    foreign_id = login(other, identifier="other@example.com").json()["session_id"]

    response = user_client.delete(f"/api/auth/sessions/{foreign_id}")

    assert response.status_code == 404
    assert other.get("/api/auth/me").status_code == 200


def test_logout_deletes_session_and_clears_cookies(user_client, db_session, user):
    response = user_client.post("/api/auth/logout")

    assert response.status_code == 200
    cookies = [c.lower() for c in response.headers.get_list("set-cookie")]
    assert len(cookies) == 2
    assert all("max-age=0" in c for c in cookies)
    assert session_rows(db_session, user.id) == []


def test_logout_without_session_still_succeeds(client):
    assert client.post("/api/auth/logout").status_code == 200
    assert client.post("/api/auth/logout").status_code == 200


def test_logout_twice_clears_cookies_both_times(user_client, db_session, user):
    first = user_client.post("/api/auth/logout")
    second = user_client.post("/api/auth/logout")

    assert first.status_code == second.status_code == 200
    cookies = [c.lower() for c in second.headers.get_list("set-cookie")]
    assert len(cookies) == 2
    assert any(c.startswith(f"{config.AUTH_COOKIE_NAME}=") for c in cookies)
    assert any(c.startswith(f"{config.SESSION_COOKIE_NAME}=") for c in cookies)
    assert all("max-age=0" in c for c in cookies)
    assert session_rows(db_session, user.id) == []
