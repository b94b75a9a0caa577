"""
Import all models to ensure they are registered with SQLAlchemy
"""
from app.models.user import User, UserRole
from app.models.session import UserSession
from app.models.password_reset import PasswordReset
from app.models.genre import Genre, Category
from app.models.movie import Movie
from app.models.series import Series, Season, Episode
from app.models.video import Video, VideoType
from app.models.watchlist import Watchlist, ContentType
from app.models.like import Like
from app.models.history import History

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "PasswordReset",
    "Genre",
    "Category",
    "Movie",
    "Series",
    "Season",
    "Episode",
    "Video",
    "VideoType",
    "Watchlist",
    "ContentType",
    "Like",
    "History",
]
