import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Index
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.timeutils import utcnow


def _new_session_id() -> str:
    return uuid.uuid4().hex


class UserSession(Base):
    """
    One logged-in device/browser.

    `token` is the capability carried in the session cookie; the client
    metadata columns are captured at login for display only.
    """
    __tablename__ = "sessions"

    id = Column(String(32), primary_key=True, default=_new_session_id)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token = Column(String(128), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    device = Column(String(20), nullable=True)
    browser = Column(String(50), nullable=True)
    os = Column(String(50), nullable=True)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("ix_sessions_user_id_expires", "user_id", "expires_at"),
    )

    def __repr__(self):
        return f"<UserSession(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"
