import os

# Settings are read at import time
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["ENABLE_BACKGROUND_JOBS"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from app.database import Database
from app.main import create_app
from app.models.genre import Genre
from app.models.movie import Movie
from app.models.series import Series, Season, Episode
from app.models.user import User, UserRole
from app.models.video import Video, VideoType
from app.utils.security import hash_password

DEFAULT_PASSWORD = "Password123"


@pytest.fixture
def database():
    """In-memory SQLite shared by the app and the test session."""
    db = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db.connect()
    db.create_all()
    yield db
    db.disconnect()


@pytest.fixture
def db_session(database):
    """Provide a clean database session for each test."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
def client(app, db_session):
    """
    FastAPI test client bound to the test database.

    Used without a context manager so the lifespan (which disposes the
    engine on exit) stays out of the per-test database lifecycle.
    """
    test_client = TestClient(app)
    yield test_client
    test_client.close()


@pytest.fixture
def make_client(app, db_session):
    """Factory for extra clients, each with its own cookie jar (another device)."""
    clients = []

    def factory(**kwargs):
        test_client = TestClient(app, **kwargs)
        clients.append(test_client)
        return test_client

    yield factory
    for test_client in clients:
        test_client.close()


def create_user(
    session,
    email="user@example.com",
    username="user",
    password=DEFAULT_PASSWORD,
    name="Test User",
    role=UserRole.USER,
    is_active=True,
):
    user = User(
        email=email,
        username=username,
        name=name,
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def replace_cookie(client, name, value):
    client.cookies.delete(name)
    client.cookies.set(name, value)


def login(client, identifier="user@example.com", password=DEFAULT_PASSWORD, user_agent=None):
    headers = {"user-agent": user_agent} if user_agent else None
    return client.post(
        "/api/auth/login",
        json={"email_or_username": identifier, "password": password},
        headers=headers,
    )


@pytest.fixture
def user(db_session):
    return create_user(db_session)


@pytest.fixture
def admin(db_session):
    return create_user(
        db_session,
        email="admin@example.com",
        username="admin",
        name="Admin",
        role=UserRole.ADMIN,
    )


@pytest.fixture
def user_client(client, user):
    response = login(client)
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(make_client, admin):
    admin_http = make_client()
    response = login(admin_http, "admin@example.com")
    assert response.status_code == 200
    return admin_http


@pytest.fixture
def catalog(db_session):
    """
    Small catalog:
    - Inception (Action, Sci-Fi), 2010, rating 8.8, featured, one video
    - Interstellar (Sci-Fi, Drama), 2014, rating 8.6
    - The Dark Knight (Action, Drama), 2008, rating 9.0
    - Old Draft (inactive)
    - Breaking Bad with two seasons; season 2 inactive
    """
    action = Genre(name="Action")
    scifi = Genre(name="Sci-Fi")
    drama = Genre(name="Drama")
    db_session.add_all([action, scifi, drama])

    inception = Movie(
        title="Inception", original_title="Inception", year=2010, rating=8.8, popularity=90.0,
        release_date=date(2010, 7, 16), is_featured=True, genres=[action, scifi],
    )
    interstellar = Movie(
        title="Interstellar", year=2014, rating=8.6, popularity=80.0,
        release_date=date(2014, 11, 7), genres=[scifi, drama],
    )
    dark_knight = Movie(
        title="The Dark Knight", year=2008, rating=9.0, popularity=95.0,
        release_date=date(2008, 7, 18), genres=[action, drama],
    )
    draft = Movie(title="Old Draft", year=2001, rating=5.0, is_active=False, genres=[action])
    db_session.add_all([inception, interstellar, dark_knight, draft])
    db_session.flush()

    db_session.add(Video(title="Inception 1080p", embed_url="https://player.example/inception",
                         quality="1080p", type=VideoType.MOVIE, movie_id=inception.id))

    breaking_bad = Series(
        title="Breaking Bad", year=2008, rating=9.5, popularity=99.0,
        first_air_date=date(2008, 1, 20), number_of_seasons=2, is_featured=True, genres=[drama],
    )
    db_session.add(breaking_bad)
    db_session.flush()

    season1 = Season(series_id=breaking_bad.id, number=1, title="Season 1")
    season2 = Season(series_id=breaking_bad.id, number=2, title="Season 2", is_active=False)
    db_session.add_all([season1, season2])
    db_session.flush()

    pilot = Episode(season_id=season1.id, number=1, title="Pilot")
    second = Episode(season_id=season1.id, number=2, title="Cat's in the Bag...")
    hidden = Episode(season_id=season2.id, number=1, title="Seven Thirty-Seven")
    db_session.add_all([pilot, second, hidden])
    db_session.flush()

    pilot_video = Video(title="Pilot HD", embed_url="https://player.example/bb-1-1",
                        type=VideoType.EPISODE, episode_id=pilot.id)
    db_session.add(pilot_video)
    db_session.commit()

    return {
        "inception": inception,
        "interstellar": interstellar,
        "dark_knight": dark_knight,
        "draft": draft,
        "breaking_bad": breaking_bad,
        "season1": season1,
        "pilot": pilot,
        "second": second,
        "pilot_video": pilot_video,
    }
