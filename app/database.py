from sqlalchemy import create_engine, pool, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from fastapi import Request
from typing import Optional
import logging

from app import config

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Owns the SQLAlchemy engine and session factory.

    Built once at process start and handed to the application, which calls
    connect() on startup and disconnect() on shutdown.

    Usage:
        database = Database(config.DATABASE_URL)
        app = create_app(database)
    """

    def __init__(self, url: str, **engine_options):
        self.url = url
        self.engine_options = engine_options
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @classmethod
    def from_config(cls) -> "Database":
        """Connection pooling configured from environment"""
        if config.DATABASE_URL.startswith("sqlite"):
            return cls(
                config.DATABASE_URL,
                connect_args={"check_same_thread": False},
                echo=config.DB_ECHO,
            )
        return cls(
            config.DATABASE_URL,
            poolclass=pool.QueuePool,
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_timeout=config.DB_POOL_TIMEOUT,
            pool_recycle=config.DB_POOL_RECYCLE,
            pool_pre_ping=True,  # Test connections before using them
            echo=config.DB_ECHO,
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> None:
        if self._engine is not None:
            return
        engine = create_engine(self.url, **self.engine_options)

        @event.listens_for(engine, "connect")
        def receive_connect(dbapi_conn, connection_record):
            """Log when a new connection is created"""
            logger.debug("Database connection established")

        self._engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info(f"Database engine created ({engine.url.get_backend_name()})")

    def disconnect(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")

    def create_all(self) -> None:
        # Import models so they register with Base.metadata
        import app.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import app.models  # noqa: F401
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        """
        Get a database session for manual management.
        Remember to close the session after use!
        """
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory()


# Dependency for FastAPI routes
def get_db(request: Request):
    """
    Database session dependency for FastAPI.
    Sessions come from the Database attached to the running app.

    Usage:
        @router.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db here
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
