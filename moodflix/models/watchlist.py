from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from moodflix.database import Base


class WatchlistItem(Base):
    """
    Watchlist model - Movies saved by users to watch later.
    Movie metadata is denormalised from TMDB at insert time.
    """
    __tablename__ = "watchlist"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False, index=True)  # TMDB movie ID
    title = Column(String(300), nullable=False)
    poster_path = Column(String(300), nullable=True)
    release_year = Column(Integer, nullable=True)
    rating = Column(Float, nullable=True)
    overview = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="watchlist_items")

    # Ensure one entry per user per movie
    __table_args__ = (
        UniqueConstraint('user_id', 'movie_id', name='unique_user_movie_watchlist'),
    )

    def __repr__(self):
        return f"<WatchlistItem(user_id={self.user_id}, movie_id={self.movie_id})>"


class Collection(Base):
    """
    Collections - user curated movie lists (e.g., "Rainy Sunday", "Date Night")
    """
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, default=False)  # Shareable via public link?
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="collections")
    movies = relationship(
        "CollectionMovie",
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="CollectionMovie.id",
    )

    def __repr__(self):
        return f"<Collection(id={self.id}, name={self.name}, user_id={self.user_id})>"


class CollectionMovie(Base):
    """
    Movies in a collection
    """
    __tablename__ = "collection_movies"

    id = Column(Integer, primary_key=True, index=True)
    collection_id = Column(Integer, ForeignKey('collections.id', ondelete='CASCADE'), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False)  # TMDB movie ID
    title = Column(String(300), nullable=False)
    poster_path = Column(String(300), nullable=True)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationship
    collection = relationship("Collection", back_populates="movies")

    __table_args__ = (
        UniqueConstraint('collection_id', 'movie_id', name='unique_collection_movie'),
    )

    def __repr__(self):
        return f"<CollectionMovie(collection_id={self.collection_id}, movie_id={self.movie_id})>"
