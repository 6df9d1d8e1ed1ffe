from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from moodflix.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False, index=True)  # TMDB movie ID
    movie_title = Column(String(300), nullable=False)
    movie_poster = Column(String(300), nullable=True)
    rating = Column(Integer, nullable=False)  # 1-10
    review_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="reviews")

    # One review per user per movie; writes are upserts
    __table_args__ = (
        UniqueConstraint('user_id', 'movie_id', name='unique_user_movie_review'),
    )
