"""SQLAlchemy models for the posts and comments databases."""

from sqlalchemy import (
    create_engine, event, BigInteger, Column, ForeignKey, Index, Integer, Text
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PostModel(Base):
    """Database model for ingested posts."""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)

    # Unix seconds, UTC
    pub_time = Column(BigInteger, nullable=False, default=0)

    # Deduplication key
    link = Column(Text, unique=True, nullable=False)

    __table_args__ = (
        Index('idx_posts_pub_time', 'pub_time'),
    )


class CommentModel(Base):
    """Database model for comments. parent_id is NULL for top-level comments."""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    news_id = Column(Integer, nullable=False)
    parent_id = Column(Integer, ForeignKey("comments.id"), nullable=True)
    content = Column(Text, nullable=False)

    __table_args__ = (
        Index('idx_comments_news_id', 'news_id'),
    )


def _unicode_lower(value):
    return value.lower() if value is not None else None


def _configure_sqlite_connection(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Built-in lower() only folds ASCII
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def init_db(database_url: str, tables=None) -> Engine:
    """Initialize database and create tables (all of them unless given)."""
    engine = create_engine(database_url, echo=False, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _configure_sqlite_connection)
    Base.metadata.create_all(engine, tables=tables)
    return engine

