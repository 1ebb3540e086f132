"""Transaction store for the Finance Tracker, backed by SQLAlchemy.

The store is constructed explicitly from a database URL, opened once at
application startup and closed at shutdown. Every public operation uses its own
short-lived session; writes are serialised so concurrent updates to the same
record resolve as last-write-wins.
"""

import threading
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import NotFoundError, TransportError, ValidationError
from app.core.models import EDITABLE_FIELDS, TransactionFields, TransactionRecord, describe_validation_error
from app.core.utils import get_logger, utcnow

Base = declarative_base()
logger = get_logger("finance-tracker.store")

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class TransactionRow(Base):
    """A persisted income or expense entry."""

    __tablename__ = "transactions"
    __table_args__ = {"sqlite_autoincrement": True}  # noqa: RUF012

    # Insertion sequence; breaks ties between records sharing a date.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, index=True, nullable=False)
    type = Column(String(16), nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String, nullable=False)
    note = Column(Text, nullable=False, default="")
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


def _aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _to_record(row: TransactionRow) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        type=row.type,
        amount=row.amount,
        category=row.category,
        note=row.note or "",
        date=row.date,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _validate(fields: object) -> TransactionFields:
    if not isinstance(fields, Mapping):
        msg = "Transaction fields must be an object"
        raise ValidationError(msg)
    try:
        return TransactionFields.model_validate(dict(fields))
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_error(exc)) from exc


class TransactionStore:
    """Durable collection of transactions with list, get, create, update and delete."""

    def __init__(self, database_url: str) -> None:
        """Remember the connection string; nothing is opened until :meth:`open`."""
        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None
        self._write_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        """Whether the engine has been created and not yet disposed."""
        return self._engine is not None

    def open(self) -> None:
        """Create the engine and make sure the transactions table exists."""
        if self.is_open:
            return
        options: dict[str, Any] = {}
        if self.database_url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
            if self.database_url in IN_MEMORY_URLS:
                options["poolclass"] = StaticPool
        self._engine = create_engine(self.database_url, **options)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(
            bind=self._engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        logger.info(f"Transaction store opened: {self._engine.url.render_as_string(hide_password=True)}")

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Transaction store closed")

    def __enter__(self) -> "TransactionStore":
        """Open the store for use in a ``with`` block."""
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close the store when the ``with`` block ends."""
        self.close()

    def _session(self) -> Session:
        if self._session_factory is None:
            msg = "Transaction store is not open"
            raise TransportError(msg)
        return self._session_factory()

    @staticmethod
    def _find(session: Session, transaction_id: str) -> TransactionRow | None:
        stmt = select(TransactionRow).where(TransactionRow.id == transaction_id)
        return session.execute(stmt).scalar_one_or_none()

    def list(self) -> list[TransactionRecord]:
        """Return every transaction, newest date first, ties newest-created first."""
        stmt = select(TransactionRow).order_by(TransactionRow.date.desc(), TransactionRow.seq.desc())
        with self._session() as session:
            return [_to_record(row) for row in session.execute(stmt).scalars()]

    def get(self, transaction_id: str) -> TransactionRecord:
        """Return a single transaction or raise :class:`NotFoundError`."""
        with self._session() as session:
            row = self._find(session, transaction_id)
            if row is None:
                raise NotFoundError
            return _to_record(row)

    def create(self, fields: Mapping[str, Any]) -> TransactionRecord:
        """Validate and persist a new transaction, assigning its id and timestamps."""
        validated = _validate(fields)
        now = utcnow()
        row = TransactionRow(
            id=uuid.uuid4().hex,
            type=validated.type.value,
            amount=validated.amount,
            category=validated.category,
            note=validated.note,
            date=validated.date,
            created_at=now,
            updated_at=now,
        )
        with self._write_lock, self._session() as session:
            session.add(row)
            session.commit()
            record = _to_record(row)
        logger.info(f"Created transaction {record.id} ({record.type.value} {record.amount} {record.category})")
        return record

    def update(self, transaction_id: str, fields: Mapping[str, Any]) -> TransactionRecord:
        """Merge editable fields into an existing transaction and re-validate the result."""
        if not isinstance(fields, Mapping):
            msg = "Transaction fields must be an object"
            raise ValidationError(msg)
        with self._write_lock, self._session() as session:
            row = self._find(session, transaction_id)
            if row is None:
                logger.warning(f"Update of unknown transaction {transaction_id}")
                raise NotFoundError
            merged = {
                "type": row.type,
                "amount": row.amount,
                "category": row.category,
                "note": row.note,
                "date": row.date,
            }
            merged.update({key: value for key, value in fields.items() if key in EDITABLE_FIELDS})
            validated = _validate(merged)
            row.type = validated.type.value
            row.amount = validated.amount
            row.category = validated.category
            row.note = validated.note
            row.date = validated.date
            row.updated_at = utcnow()
            session.commit()
            record = _to_record(row)
        logger.info(f"Updated transaction {record.id}")
        return record

    def delete(self, transaction_id: str) -> None:
        """Permanently remove a transaction."""
        with self._write_lock, self._session() as session:
            row = self._find(session, transaction_id)
            if row is None:
                logger.warning(f"Delete of unknown transaction {transaction_id}")
                raise NotFoundError
            session.delete(row)
            session.commit()
        logger.info(f"Deleted transaction {transaction_id}")
