"""
SQLAlchemy-backed store.

Uniqueness of user names and of (entry, user, emoji) reactions is enforced by
database constraints; concurrent writers race at the database and the loser
gets an IntegrityError, which is translated here.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from wishboard.core.clock import as_utc
from wishboard.core.errors import StorageError
from wishboard.db.base import Database
from wishboard.domain import (
    CommentRecord,
    EntryPatch,
    EntryRecord,
    EntryType,
    ReactionRecord,
    UserRecord,
)
from wishboard.models import Comment, Entry, Reaction, User
from wishboard.stores.base import BoardRepository, BoardStore, DuplicateReactionError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ORM → record
# ---------------------------------------------------------------------------

def _user(u: User) -> UserRecord:
    return UserRecord(id=u.id, name=u.name)


def _reaction(r: Reaction) -> ReactionRecord:
    return ReactionRecord(id=r.id, entry_id=r.entry_id, user=_user(r.user), emoji=r.emoji)


def _comment(c: Comment) -> CommentRecord:
    return CommentRecord(
        id=c.id,
        entry_id=c.entry_id,
        user=_user(c.user),
        content=c.content,
        created_at=as_utc(c.created_at),
    )


def _entry(e: Entry) -> EntryRecord:
    return EntryRecord(
        id=e.id,
        user=_user(e.user),
        entry_type=EntryType(e.entry_type),
        content=e.content,
        year=e.year,
        image_url=e.image_url,
        locked_until=as_utc(e.locked_until),
        created_at=as_utc(e.created_at),
        reactions=[_reaction(r) for r in e.reactions],
        comments=[
            _comment(c) for c in sorted(e.comments, key=lambda c: as_utc(c.created_at))
        ],
    )


# ---------------------------------------------------------------------------
# Repository (one per session)
# ---------------------------------------------------------------------------

class SqlBoardRepository(BoardRepository):

    def __init__(self, db: Session):
        self.db = db

    def _entry_query(self):
        return self.db.query(Entry).options(
            selectinload(Entry.reactions),
            selectinload(Entry.comments),
        )

    def _load_entry(self, entry_id: str) -> Optional[Entry]:
        return self._entry_query().filter(Entry.id == entry_id).first()

    def _load_user(self, name: str) -> Optional[User]:
        return self.db.query(User).filter(User.name == name).first()

    # --- users ---

    def find_user(self, name: str) -> Optional[UserRecord]:
        user = self._load_user(name)
        return _user(user) if user else None

    def get_or_create_user(self, name: str) -> UserRecord:
        user = self._load_user(name)
        if user is not None:
            return _user(user)
        try:
            with self.db.begin_nested():
                user = User(name=name)
                self.db.add(user)
        except IntegrityError:
            # Lost the race against a concurrent first write by the same name.
            user = self.db.query(User).filter(User.name == name).one()
        return _user(user)

    def list_users(self) -> list[UserRecord]:
        return [_user(u) for u in self.db.query(User).order_by(User.name).all()]

    # --- entries ---

    def list_entries(
        self,
        user_name: Optional[str] = None,
        entry_type: Optional[EntryType] = None,
    ) -> list[EntryRecord]:
        query = self._entry_query()
        if user_name is not None:
            query = query.join(User, Entry.user_id == User.id).filter(User.name == user_name)
        if entry_type is not None:
            query = query.filter(Entry.entry_type == entry_type)
        return [_entry(e) for e in query.order_by(Entry.created_at.desc()).all()]

    def get_entry(self, entry_id: str) -> Optional[EntryRecord]:
        entry = self._load_entry(entry_id)
        return _entry(entry) if entry else None

    def create_entry(
        self,
        user: UserRecord,
        entry_type: EntryType,
        content: str,
        year: int,
        image_url: Optional[str] = None,
        locked_until: Optional[datetime] = None,
    ) -> EntryRecord:
        entry = Entry(
            user_id=user.id,
            entry_type=entry_type,
            content=content,
            year=year,
            image_url=image_url,
            locked_until=locked_until,
        )
        self.db.add(entry)
        self.db.flush()
        return _entry(self._load_entry(entry.id))

    def update_entry(self, entry_id: str, patch: EntryPatch) -> Optional[EntryRecord]:
        entry = self._load_entry(entry_id)
        if entry is None:
            return None
        for name, value in patch.changes().items():
            setattr(entry, name, value)
        self.db.flush()
        return _entry(entry)

    def delete_entry(self, entry_id: str) -> bool:
        entry = self._load_entry(entry_id)
        if entry is None:
            return False
        self.db.delete(entry)
        self.db.flush()
        return True

    # --- reactions ---

    def list_reactions(self, entry_id: str) -> list[ReactionRecord]:
        rows = self.db.query(Reaction).filter(Reaction.entry_id == entry_id).all()
        return [_reaction(r) for r in rows]

    def add_reaction(self, entry_id: str, user: UserRecord, emoji: str) -> ReactionRecord:
        reaction = Reaction(entry_id=entry_id, user_id=user.id, emoji=emoji)
        try:
            with self.db.begin_nested():
                self.db.add(reaction)
        except IntegrityError as exc:
            raise DuplicateReactionError(entry_id, user.name, emoji) from exc
        return ReactionRecord(id=reaction.id, entry_id=entry_id, user=user, emoji=emoji)

    def remove_reaction(self, entry_id: str, user: UserRecord, emoji: str) -> bool:
        deleted = (
            self.db.query(Reaction)
            .filter(
                Reaction.entry_id == entry_id,
                Reaction.user_id == user.id,
                Reaction.emoji == emoji,
            )
            .delete(synchronize_session=False)
        )
        return deleted > 0

    # --- comments ---

    def list_comments(self, entry_id: str) -> list[CommentRecord]:
        rows = (
            self.db.query(Comment)
            .filter(Comment.entry_id == entry_id)
            .order_by(Comment.created_at.asc())
            .all()
        )
        return [_comment(c) for c in rows]

    def get_comment(self, comment_id: str) -> Optional[CommentRecord]:
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()
        return _comment(comment) if comment else None

    def add_comment(self, entry_id: str, user: UserRecord, content: str) -> CommentRecord:
        comment = Comment(entry_id=entry_id, user_id=user.id, content=content)
        self.db.add(comment)
        self.db.flush()
        self.db.refresh(comment)
        return _comment(comment)

    def delete_comment(self, comment_id: str) -> bool:
        deleted = (
            self.db.query(Comment)
            .filter(Comment.id == comment_id)
            .delete(synchronize_session=False)
        )
        return deleted > 0

    # --- unit of work ---

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Commit failed: %s", exc)
            raise StorageError(backend="sql") from exc


# ---------------------------------------------------------------------------
# Store (process-wide)
# ---------------------------------------------------------------------------

class SqlBoardStore(BoardStore):
    name = "sql"

    def __init__(self, url: str, create_tables: bool = False, database: Database | None = None):
        self.url = url
        self.create_tables = create_tables
        self.database = database or Database()

    def open(self) -> None:
        self.database.init(self.url, create_tables=self.create_tables)

    def close(self) -> None:
        self.database.dispose()

    @contextmanager
    def repository(self) -> Iterator[SqlBoardRepository]:
        with self.database.session() as db:
            yield SqlBoardRepository(db)

    def ping(self) -> bool:
        try:
            with self.database.session() as db:
                db.execute(text("SELECT 1"))
        except Exception:
            return False
        return True
