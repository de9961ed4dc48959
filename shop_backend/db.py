"""
Document store abstraction with a SQLAlchemy backend and an in-memory test implementation.

Documents are plain JSON objects grouped in named collections. Every document
gets a store-generated ``object_id`` and an application-facing sequential
numeric ``id`` that is unique per collection.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy import (
    JSON,
    Column,
    Float,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

FIRST_ID = 1000
MAX_INSERT_ATTEMPTS = 5


class DbClient(Protocol):
    """Interface for document store access."""

    def list_documents(
        self,
        collection: str,
        *,
        sort: str = "id",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict]:
        ...

    def count_documents(self, collection: str) -> int:
        ...

    def get_document(self, collection: str, doc_id: int) -> Optional[dict]:
        ...

    def insert_document(self, collection: str, data: dict) -> dict:
        ...

    def insert_documents(self, collection: str, docs: Iterable[dict]) -> list[dict]:
        ...

    def update_document(
        self, collection: str, doc_id: int, changes: dict
    ) -> Optional[dict]:
        ...

    def delete_document(self, collection: str, doc_id: int) -> Optional[dict]:
        ...

    def drop_collection(self, collection: str) -> int:
        ...

    def drop_all(self) -> None:
        ...


@dataclass
class DocumentRecord:
    object_id: str
    collection: str
    id: int
    data: dict

    def as_dict(self) -> dict:
        return {"id": self.id, **copy.deepcopy(self.data)}


def _strip_id(data: dict) -> dict:
    return {key: value for key, value in data.items() if key != "id"}


def sort_documents(docs: list[dict], sort: str, descending: bool) -> list[dict]:
    """Sort documents on a top-level field; documents missing it go last."""
    present = [doc for doc in docs if doc.get(sort) is not None]
    missing = [doc for doc in docs if doc.get(sort) is None]
    present.sort(key=lambda doc: doc[sort], reverse=descending)
    return present + missing


def _page(docs: list[dict], offset: int, limit: Optional[int]) -> list[dict]:
    if limit is None:
        return docs[offset:]
    return docs[offset : offset + limit]


class InMemoryDbClient:
    """
    Simple in-memory document store for development and tests.

    Route handlers run in FastAPI's threadpool, so every public method holds
    ``self.lock``.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, DocumentRecord]] = {}
        self.lock = threading.RLock()

    def _records(self, collection: str) -> Dict[str, DocumentRecord]:
        return self.collections.setdefault(collection, {})

    def _find(self, collection: str, doc_id: int) -> Optional[DocumentRecord]:
        for record in self._records(collection).values():
            if record.id == doc_id:
                return record
        return None

    def _next_id(self, collection: str) -> int:
        ids = [record.id for record in self._records(collection).values()]
        return max(ids) + 1 if ids else FIRST_ID

    def list_documents(
        self,
        collection: str,
        *,
        sort: str = "id",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict]:
        with self.lock:
            docs = [record.as_dict() for record in self._records(collection).values()]
        docs = sort_documents(sort_documents(docs, "id", False), sort, descending)
        return _page(docs, offset, limit)

    def count_documents(self, collection: str) -> int:
        with self.lock:
            return len(self._records(collection))

    def get_document(self, collection: str, doc_id: int) -> Optional[dict]:
        with self.lock:
            record = self._find(collection, doc_id)
            return record.as_dict() if record else None

    def insert_document(self, collection: str, data: dict) -> dict:
        with self.lock:
            record = DocumentRecord(
                object_id=uuid.uuid4().hex,
                collection=collection,
                id=self._next_id(collection),
                data=copy.deepcopy(_strip_id(data)),
            )
            self._records(collection)[record.object_id] = record
            return record.as_dict()

    def insert_documents(self, collection: str, docs: Iterable[dict]) -> list[dict]:
        with self.lock:
            return [self.insert_document(collection, doc) for doc in docs]

    def update_document(
        self, collection: str, doc_id: int, changes: dict
    ) -> Optional[dict]:
        with self.lock:
            record = self._find(collection, doc_id)
            if not record:
                return None
            record.data.update(copy.deepcopy(_strip_id(changes)))
            return record.as_dict()

    def delete_document(self, collection: str, doc_id: int) -> Optional[dict]:
        with self.lock:
            record = self._find(collection, doc_id)
            if not record:
                return None
            del self._records(collection)[record.object_id]
            return record.as_dict()

    def drop_collection(self, collection: str) -> int:
        with self.lock:
            removed = len(self._records(collection))
            self.collections.pop(collection, None)
            return removed

    def drop_all(self) -> None:
        with self.lock:
            self.collections.clear()


class SqlDbClient:
    """
    SQLAlchemy-backed implementation storing each document as a JSON row.
    Accepts any SQLAlchemy URL (e.g., Postgres, or SQLite for tests).

    Rows also carry ``created_at``/``updated_at`` bookkeeping columns; they are
    not part of the returned documents.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)
        self._insert_lock = threading.Lock()

    @staticmethod
    def _to_record(row: "DocumentRow") -> DocumentRecord:
        return DocumentRecord(
            object_id=row.object_id,
            collection=row.collection,
            id=row.doc_id,
            data=dict(row.data or {}),
        )

    @staticmethod
    def _get_row(
        session: Session, collection: str, doc_id: int
    ) -> Optional["DocumentRow"]:
        stmt = select(DocumentRow).where(
            DocumentRow.collection == collection, DocumentRow.doc_id == doc_id
        )
        return session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def _next_id(session: Session, collection: str) -> int:
        current = session.execute(
            select(func.max(DocumentRow.doc_id)).where(
                DocumentRow.collection == collection
            )
        ).scalar()
        return current + 1 if current is not None else FIRST_ID

    def list_documents(
        self,
        collection: str,
        *,
        sort: str = "id",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict]:
        with self.Session() as session:
            stmt = select(DocumentRow).where(DocumentRow.collection == collection)
            if sort == "id":
                order = DocumentRow.doc_id.desc() if descending else DocumentRow.doc_id
                stmt = stmt.order_by(order).offset(offset)
                if limit is not None:
                    stmt = stmt.limit(limit)
                rows = session.execute(stmt).scalars().all()
                return [self._to_record(row).as_dict() for row in rows]

            # Document fields are sorted in Python.
            rows = session.execute(stmt.order_by(DocumentRow.doc_id)).scalars().all()
            docs = [self._to_record(row).as_dict() for row in rows]
            return _page(sort_documents(docs, sort, descending), offset, limit)

    def count_documents(self, collection: str) -> int:
        with self.Session() as session:
            return session.execute(
                select(func.count())
                .select_from(DocumentRow)
                .where(DocumentRow.collection == collection)
            ).scalar_one()

    def get_document(self, collection: str, doc_id: int) -> Optional[dict]:
        with self.Session() as session:
            row = self._get_row(session, collection, doc_id)
            return self._to_record(row).as_dict() if row else None

    def insert_document(self, collection: str, data: dict) -> dict:
        return self.insert_documents(collection, [data])[0]

    def insert_documents(self, collection: str, docs: Iterable[dict]) -> list[dict]:
        """
        Insert documents with the next free ids. The lock serializes id
        assignment within this process; a unique-constraint clash with another
        process is retried with freshly read ids.
        """
        docs = [_strip_id(data) for data in docs]
        with self._insert_lock:
            for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
                try:
                    return self._insert_rows(collection, docs)
                except IntegrityError:
                    if attempt == MAX_INSERT_ATTEMPTS:
                        raise
                    logger.warning(
                        "Id clash inserting into %s (attempt %d), retrying",
                        collection,
                        attempt,
                    )

    def _insert_rows(self, collection: str, docs: list[dict]) -> list[dict]:
        now = time.time()
        with self.Session() as session:
            next_id = self._next_id(session, collection)
            rows = []
            for offset, data in enumerate(docs):
                rows.append(
                    DocumentRow(
                        object_id=uuid.uuid4().hex,
                        collection=collection,
                        doc_id=next_id + offset,
                        data=data,
                        created_at=now,
                        updated_at=now,
                    )
                )
            session.add_all(rows)
            session.commit()
            return [self._to_record(row).as_dict() for row in rows]

    def update_document(
        self, collection: str, doc_id: int, changes: dict
    ) -> Optional[dict]:
        with self.Session() as session:
            row = self._get_row(session, collection, doc_id)
            if not row:
                return None
            # Reassign so the JSON column is flagged dirty.
            row.data = {**(row.data or {}), **_strip_id(changes)}
            row.updated_at = time.time()
            session.commit()
            return self._to_record(row).as_dict()

    def delete_document(self, collection: str, doc_id: int) -> Optional[dict]:
        with self.Session() as session:
            row = self._get_row(session, collection, doc_id)
            if not row:
                return None
            document = self._to_record(row).as_dict()
            session.delete(row)
            session.commit()
            return document

    def drop_collection(self, collection: str) -> int:
        with self.Session() as session:
            result = session.execute(
                delete(DocumentRow).where(DocumentRow.collection == collection)
            )
            session.commit()
            return result.rowcount or 0

    def drop_all(self) -> None:
        with self.Session() as session:
            session.execute(delete(DocumentRow))
            session.commit()


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "id", name="uq_collection_id"),)

    object_id = Column(String, primary_key=True)
    collection = Column(String, nullable=False, index=True)
    doc_id = Column("id", Integer, nullable=False)
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)

