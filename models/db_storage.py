import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from models.base_model import Base
from models.errors import DuplicateKeyError, RecordNotFoundError, StoreError
from models.post import Post
from models.refresh_token import RefreshToken
from models.user import User

logger = logging.getLogger(__name__)


def is_unique_violation(err: Exception) -> bool:
    """True when an IntegrityError comes from a unique constraint."""
    if not isinstance(err, IntegrityError):
        return False
    message = str(getattr(err, "orig", err)).lower()
    return (
        "unique constraint" in message
        or "unique violation" in message
        or "duplicate" in message
    )


class DBStorage:
    """
    Credential and post store over a SQLAlchemy scoped session.
    Each thread (request) gets its own session; close() removes it.
    """
    __engine = None
    __session = None

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize engine for the given URL"""
        if database_url.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection so every session sees the same in-memory DB
                options["poolclass"] = StaticPool
            self.__engine = create_engine(database_url, echo=echo, **options)

            # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
        else:
            self.__engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    @classmethod
    def from_config(cls, config) -> "DBStorage":
        return cls(config["DATABASE_URL"], echo=config.get("SQL_ECHO", False))

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session, translating failures into store errors"""
        try:
            self.__session.commit()
        except IntegrityError as err:
            self.__session.rollback()
            if is_unique_violation(err):
                raise DuplicateKeyError(str(err.orig)) from err
            raise StoreError(str(err.orig)) from err
        except SQLAlchemyError as err:
            self.__session.rollback()
            raise StoreError(str(err)) from err

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session

    def _persist(self, obj):
        self.new(obj)
        self.save()
        # load server-side defaults (timestamps) and eager relationships
        self.__session.refresh(obj)
        return obj

    # ---- users ----

    def create_user(self, email: str, name: str, password_hash: str) -> User:
        user = User(email=email, name=name, password_hash=password_hash)
        return self._persist(user)

    def find_user_by_email(self, email: str) -> Optional[User]:
        return self.__session.query(User).filter(User.email == email).first()

    # ---- refresh tokens ----

    def create_refresh_token(self, token: str, user_id: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
        self.new(record)
        self.save()
        return record

    def find_refresh_token(self, token: str) -> Optional[RefreshToken]:
        return self.__session.query(RefreshToken).filter(RefreshToken.token == token).first()

    def consume_refresh_token(self, token: str) -> bool:
        """
        Delete the record for this exact token in a single statement.
        Returns True only for the one caller whose DELETE removed the row.
        """
        session = self.__session
        try:
            deleted = (
                session.query(RefreshToken)
                .filter(RefreshToken.token == token)
                .delete(synchronize_session=False)
            )
            session.commit()
        except SQLAlchemyError as err:
            session.rollback()
            raise StoreError(str(err)) from err
        return deleted == 1

    def delete_refresh_token(self, token: str) -> None:
        if not self.consume_refresh_token(token):
            raise RecordNotFoundError("Refresh token not found")

    def purge_expired_refresh_tokens(self, user_id: Optional[str] = None, now: Optional[datetime] = None) -> int:
        """Delete refresh-token rows whose expiry has passed; returns the number removed."""
        now = now or datetime.now(timezone.utc)
        session = self.__session
        try:
            query = session.query(RefreshToken).filter(RefreshToken.expires_at < now)
            if user_id:
                query = query.filter(RefreshToken.user_id == user_id)
            purged = query.delete(synchronize_session=False)
            session.commit()
        except SQLAlchemyError as err:
            session.rollback()
            raise StoreError(str(err)) from err
        return purged

    def count_refresh_tokens(self, user_id: Optional[str] = None) -> int:
        query = self.__session.query(RefreshToken)
        if user_id:
            query = query.filter(RefreshToken.user_id == user_id)
        return query.count()

    # ---- posts ----

    def create_post(self, author_id: str, title: str, content: str) -> Post:
        post = Post(author_id=author_id, title=title, content=content)
        return self._persist(post)

    def list_posts(self, author_id: str) -> List[Post]:
        return (
            self.__session.query(Post)
            .filter(Post.author_id == author_id)
            .order_by(Post.created_at.asc())
            .all()
        )

    def get_post(self, post_id: str) -> Post:
        post = self.__session.get(Post, post_id)
        if not post:
            raise RecordNotFoundError("Post not found")
        return post

    def _owned_post(self, post_id: str, author_id: str) -> Post:
        post = (
            self.__session.query(Post)
            .filter(Post.id == post_id, Post.author_id == author_id)
            .first()
        )
        if not post:
            raise RecordNotFoundError("Post not found")
        return post

    def update_post(self, post_id: str, author_id: str, **fields) -> Post:
        post = self._owned_post(post_id, author_id)
        for key in ("title", "content"):
            if key in fields:
                setattr(post, key, fields[key])
        return self._persist(post)

    def delete_post(self, post_id: str, author_id: str) -> None:
        post = self._owned_post(post_id, author_id)
        self.delete(post)
        self.save()
