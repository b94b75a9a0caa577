from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.watchlist import ContentType
from app.utils.timeutils import utcnow


class Like(Base):
    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    content_id = Column(Integer, nullable=False, index=True)
    content_type = Column(Enum(ContentType, name="content_type"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="likes")

    __table_args__ = (
        UniqueConstraint('user_id', 'content_id', 'content_type', name='unique_user_content_like'),
    )

    def __repr__(self):
        return f"<Like(user_id={self.user_id}, content_id={self.content_id}, content_type={self.content_type})>"
