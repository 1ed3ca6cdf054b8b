import logging
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .entities import BookRecord
from .errors import Conflict, NotFound
from .models import Book

logger = logging.getLogger(__name__)


class BookRepository:
    """Book persistence over one request-scoped session.

    Field dicts passed in are expected to come from ``validation.validate``.
    """

    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> list[Book]:
        records = self.session.execute(select(BookRecord).order_by(BookRecord.isbn)).scalars().all()
        return [self._to_schema(record) for record in records]

    def get_by_isbn(self, isbn: str) -> Book:
        return self._to_schema(self._load(isbn))

    def create(self, fields: dict[str, Any]) -> Book:
        isbn = fields["isbn"]
        # no existence pre-check: the primary key rejects duplicates atomically
        try:
            self.session.execute(insert(BookRecord).values(**fields))
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("book.duplicate_isbn", extra={"isbn": isbn})
            raise Conflict(isbn) from exc
        logger.info("book.created", extra={"isbn": isbn})
        return self.get_by_isbn(isbn)

    def update(self, isbn: str, fields: dict[str, Any]) -> Book:
        record = self._load(isbn)
        for field, value in fields.items():
            setattr(record, field, value)
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info("book.updated", extra={"isbn": isbn, "fields": sorted(fields)})
        return self._to_schema(record)

    def delete(self, isbn: str) -> None:
        record = self._load(isbn)
        self.session.delete(record)
        self.session.commit()
        logger.info("book.deleted", extra={"isbn": isbn})

    def _load(self, isbn: str) -> BookRecord:
        record = self.session.get(BookRecord, isbn)
        if record is None:
            raise NotFound(isbn)
        return record

    @staticmethod
    def _to_schema(record: BookRecord) -> Book:
        return Book.model_validate(record, from_attributes=True)
