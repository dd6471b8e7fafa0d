from functools import lru_cache

import sqlalchemy
from sqlalchemy.orm import sessionmaker

from postboard.config import config

metadata = sqlalchemy.MetaData()

user_table = sqlalchemy.Table(
    "users",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.String(32), primary_key=True),
    sqlalchemy.Column("email", sqlalchemy.String, unique=True, nullable=False),
    sqlalchemy.Column("name", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("avatar", sqlalchemy.String, nullable=True),
    sqlalchemy.Column("password", sqlalchemy.String),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime(timezone=True), nullable=False),
)

# A post is stored as one document: likes and comments are embedded JSON
# arrays, and every write is conditional on `version`.
post_table = sqlalchemy.Table(
    "posts",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.String(32), primary_key=True),
    sqlalchemy.Column("user_id", sqlalchemy.ForeignKey("users.id"), nullable=False),
    sqlalchemy.Column("text", sqlalchemy.Text, nullable=False),
    # Denormalized author snapshot, not kept in sync with profile edits
    sqlalchemy.Column("name", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("avatar", sqlalchemy.String, nullable=True),
    sqlalchemy.Column("likes", sqlalchemy.JSON, nullable=False, default=list),
    sqlalchemy.Column("comments", sqlalchemy.JSON, nullable=False, default=list),
    sqlalchemy.Column("version", sqlalchemy.Integer, nullable=False, default=0),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime(timezone=True), nullable=False, index=True),
)


def make_engine(database_uri: str) -> sqlalchemy.engine.Engine:
    connect_args = {"check_same_thread": False} if "sqlite" in database_uri else {}
    return sqlalchemy.create_engine(database_uri, connect_args=connect_args)


@lru_cache()
def get_session_factory() -> sessionmaker:
    if not config.DATABASE_URI:
        raise RuntimeError("DATABASE_URI is not configured")
    engine = make_engine(config.DATABASE_URI)
    return sessionmaker(bind=engine, expire_on_commit=False)
