from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Index,
)
from app.database import Base
from app.utils.timeutils import utcnow


class PasswordReset(Base):
    """
    Password reset request.

    Lifecycle: created (active=False, no expiry) -> activated by an admin
    (active=True, expires_at set) -> used, or deleted once expired.
    """
    __tablename__ = "password_resets"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    token = Column(String(128), unique=True, nullable=False)
    active = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_password_resets_email_used", "email", "used"),
    )

    def __repr__(self):
        return f"<PasswordReset(id={self.id}, email={self.email}, active={self.active}, used={self.used})>"
