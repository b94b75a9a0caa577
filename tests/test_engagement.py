from datetime import datetime

from app.models.history import History
from tests.conftest import create_user, login


def movie_ref(catalog, name="inception"):
    return {"content_id": catalog[name].id, "content_type": "MOVIE"}


def series_ref(catalog):
    return {"content_id": catalog["breaking_bad"].id, "content_type": "SERIES"}


# ==================== WATCHLIST ====================

def test_watchlist_add_list_and_check(user_client, catalog):
    first = user_client.post("/api/watchlist", json=movie_ref(catalog))
    second = user_client.post("/api/watchlist", json=series_ref(catalog))

    assert first.status_code == second.status_code == 201
    items = user_client.get("/api/watchlist").json()
    assert [i["content_type"] for i in items] == ["SERIES", "MOVIE"]

    check = user_client.get("/api/watchlist/check", params=movie_ref(catalog)).json()
    assert check["in_watchlist"] is True


def test_watchlist_duplicate_is_conflict(user_client, catalog):
    user_client.post("/api/watchlist", json=movie_ref(catalog))

    response = user_client.post("/api/watchlist", json=movie_ref(catalog))

    assert response.status_code == 409


def test_watchlist_unknown_title_is_404(user_client, catalog):
    response = user_client.post("/api/watchlist", json={"content_id": 9999, "content_type": "SERIES"})

    assert response.status_code == 404


def test_watchlist_remove(user_client, catalog):
    ref = movie_ref(catalog)
    user_client.post("/api/watchlist", json=ref)

    removed = user_client.delete(f"/api/watchlist/MOVIE/{ref['content_id']}")
    again = user_client.delete(f"/api/watchlist/MOVIE/{ref['content_id']}")

    assert removed.status_code == 200
    assert again.status_code == 404
    assert user_client.get("/api/watchlist/check", params=ref).json()["in_watchlist"] is False


def test_watchlist_requires_login(client, catalog):
    assert client.get("/api/watchlist").status_code == 401


# ==================== LIKES ====================

def test_like_and_unlike_report_counts(user_client, make_client, db_session, catalog):
    create_user(db_session, email="fan@example.com", username="fan")
    fan = make_client()
    login(fan, "fan@example.com")

    assert fan.post("/api/likes", json=movie_ref(catalog)).json()["like_count"] == 1
    response = user_client.post("/api/likes", json=movie_ref(catalog))
    assert response.status_code == 201
    assert response.json()["like_count"] == 2

    removed = user_client.delete(f"/api/likes/MOVIE/{catalog['inception'].id}")
    assert removed.json()["like_count"] == 1

    # Unliking something not liked is a no-op
    again = user_client.delete(f"/api/likes/MOVIE/{catalog['inception'].id}")
    assert again.status_code == 200
    assert again.json()["like_count"] == 1


def test_duplicate_like_is_conflict(user_client, catalog):
    user_client.post("/api/likes", json=series_ref(catalog))

    assert user_client.post("/api/likes", json=series_ref(catalog)).status_code == 409
    assert len(user_client.get("/api/likes").json()) == 1


def test_like_check_works_anonymously(client, make_client, user, catalog):
    liker = make_client()
    login(liker)
    liker.post("/api/likes", json=movie_ref(catalog))

    anonymous = client.get("/api/likes/check", params=movie_ref(catalog)).json()
    signed_in = liker.get("/api/likes/check", params=movie_ref(catalog)).json()

    assert anonymous == {"is_liked": False, "like_count": 1, "user_id": None}
    assert signed_in["is_liked"] is True
    assert signed_in["user_id"] == user.id


# ==================== HISTORY ====================

def test_history_upsert_bumps_existing_entry(user_client, db_session, catalog):
    video_id = catalog["pilot_video"].id
    entry = dict(series_ref(catalog), video_id=video_id)

    first = user_client.post("/api/history", json=entry).json()
    user_client.post("/api/history", json=movie_ref(catalog))
    second = user_client.post("/api/history", json=entry).json()

    assert first["id"] == second["id"]
    assert datetime.fromisoformat(second["watched_at"]) > datetime.fromisoformat(first["watched_at"])
    db_session.expire_all()
    assert db_session.query(History).count() == 2

    history = user_client.get("/api/history").json()
    assert [h["content_type"] for h in history["data"]] == ["SERIES", "MOVIE"]


def test_history_navigation_urls(user_client, catalog):
    series_id = catalog["breaking_bad"].id
    video_id = catalog["pilot_video"].id
    user_client.post("/api/history", json=dict(series_ref(catalog), video_id=video_id))

    entry = user_client.get("/api/history").json()["data"][0]

    assert entry["navigation_url"] == f"/watch/series/{series_id}/1/1/{video_id}"
    assert entry["video"]["title"] == "Pilot HD"


def test_history_movie_navigation_url(user_client, db_session, catalog):
    movie_id = catalog["inception"].id
    video_id = catalog["inception"].videos[0].id
    user_client.post("/api/history", json=dict(movie_ref(catalog), video_id=video_id))

    entry = user_client.get("/api/history").json()["data"][0]

    assert entry["navigation_url"] == f"/watch/movie/{movie_id}/{video_id}"


def test_history_without_video_links_to_title(user_client, catalog):
    user_client.post("/api/history", json=movie_ref(catalog))

    entry = user_client.get("/api/history").json()["data"][0]

    assert entry["navigation_url"] == f"/watch/movie/{catalog['inception'].id}"


def test_history_pagination(user_client, catalog):
    for name in ("inception", "interstellar", "dark_knight"):
        user_client.post("/api/history", json=movie_ref(catalog, name))

    page = user_client.get("/api/history", params={"limit": 2, "offset": 0}).json()
    rest = user_client.get("/api/history", params={"limit": 2, "offset": 2}).json()

    assert len(page["data"]) == 2
    assert page["pagination"]["total"] == 3
    assert page["pagination"]["has_more"] is True
    assert len(rest["data"]) == 1
    assert rest["pagination"]["has_more"] is False


def test_history_unknown_video_is_404(user_client, catalog):
    response = user_client.post("/api/history", json=dict(movie_ref(catalog), video_id=9999))

    assert response.status_code == 404
