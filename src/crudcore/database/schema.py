from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship

from ..managers.resource_config import ResourceConfig

Base = declarative_base()


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class User(Base):
    __tablename__ = "users"
    __resource__ = ResourceConfig(
        transformer="crudcore.transformers.users.UserTransformer",
        rules={
            "store": {
                "name": "required|string|max:255",
                "email": "required|email|max:255",
                "password": "required|string|min:6",
                "enabled": "boolean",
            },
            "update": {
                "name": "string|max:255",
                "email": "email|max:255",
                "password": "string|min:6",
                "enabled": "boolean",
            },
        },
        hidden=["password"],
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)
    enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False, default=_utc_now_iso)  # ISO 8601 string

    posts = relationship("Post", back_populates="user", cascade="all, delete-orphan")


class Post(Base):
    __tablename__ = "posts"
    __resource__ = ResourceConfig(
        transformer="crudcore.transformers.posts.PostTransformer",
        rules={
            "default": {
                "user_id": "required|integer",
                "title": "required|string|max:255",
                "body": "nullable|string",
            },
            "update": {
                "title": "string|max:255",
                "body": "nullable|string",
            },
        },
        limit=25,
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=True)
    created_at = Column(String, nullable=False, default=_utc_now_iso)

    user = relationship("User", back_populates="posts")


def create_all(engine: Engine) -> None:
    Base.metadata.create_all(engine)
