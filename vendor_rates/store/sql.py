from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, create_engine, delete, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from vendor_rates.errors import StoreError
from vendor_rates.models import DEFAULT_COLLECTION, ColumnRecord, VendorDocument, document_path
from vendor_rates.store.base import ErrorListener, SnapshotListener, StoreSubscription, SubscriberRegistry

logger = logging.getLogger(__name__)

_metadata = MetaData()

vendor_documents_table = Table(
    "vendor_documents",
    _metadata,
    Column("collection", String(100), primary_key=True),
    Column("vendor_id", String(100), primary_key=True),
    Column("body", Text, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


def _is_memory_sqlite(connection_string: str) -> bool:
    return connection_string in {"sqlite://", "sqlite:///:memory:"}


def build_engine(connection_string: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if _is_memory_sqlite(connection_string):
        return create_engine(
            connection_string,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    return create_engine(connection_string, pool_pre_ping=True, future=True)


def _decode_body(vendor_id: str, body: str) -> ColumnRecord:
    raw = json.loads(body)
    if not isinstance(raw, dict):
        raise ValueError(f"Document '{vendor_id}' body must be a JSON object")
    return {str(column): [str(value) for value in values] for column, values in raw.items()}


class SqlVendorStore:
    """
    Vendor documents persisted through SQLAlchemy, one row per vendor id.

    Change notification is poll based. Writes through this instance notify
    subscribers immediately. Writes made by other processes reach subscribers
    only when the caller runs ``refresh``/``refresh_async`` or keeps a
    ``poll`` task alive; the store starts no background work of its own.
    """

    def __init__(
        self,
        connection_string: str | None = None,
        *,
        engine: Engine | None = None,
        collection: str = DEFAULT_COLLECTION,
    ) -> None:
        if engine is None:
            if not connection_string:
                raise ValueError("SqlVendorStore requires a connection_string or an engine")
            engine = build_engine(connection_string)
        self._engine = engine
        self.collection = collection
        self._subscribers = SubscriberRegistry()
        self._last_published: list[tuple[str, ColumnRecord]] | None = None
        try:
            _metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to prepare vendor document table: {exc}") from exc

    @property
    def engine(self) -> Engine:
        return self._engine

    def list_documents(self) -> list[VendorDocument]:
        statement = (
            select(vendor_documents_table.c.vendor_id, vendor_documents_table.c.body)
            .where(vendor_documents_table.c.collection == self.collection)
            .order_by(vendor_documents_table.c.vendor_id)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(statement).all()
            return [
                VendorDocument(vendor_id=row.vendor_id, record=_decode_body(row.vendor_id, row.body))
                for row in rows
            ]
        except (SQLAlchemyError, ValueError) as exc:
            raise StoreError(f"Failed to read collection '{self.collection}': {exc}") from exc

    def subscribe(
        self,
        on_snapshot: SnapshotListener,
        on_error: ErrorListener | None = None,
    ) -> StoreSubscription:
        subscription = self._subscribers.add(on_snapshot, on_error)
        try:
            documents = self.list_documents()
        except StoreError as exc:
            subscription.fail(exc)
            return subscription
        subscription.deliver(documents)
        return subscription

    def _write(self, vendor_id: str, record: ColumnRecord) -> None:
        table = vendor_documents_table
        body = json.dumps(record)
        with self._engine.begin() as conn:
            conn.execute(
                delete(table).where(
                    (table.c.collection == self.collection) & (table.c.vendor_id == vendor_id)
                )
            )
            conn.execute(
                insert(table).values(
                    collection=self.collection,
                    vendor_id=vendor_id,
                    body=body,
                    updated_at=datetime.now(timezone.utc),
                )
            )

    async def set_document(self, vendor_id: str, record: ColumnRecord) -> None:
        path = document_path(vendor_id, self.collection)
        try:
            await asyncio.to_thread(self._write, vendor_id, record)
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise StoreError(f"Write to {path} failed: {exc}", vendor_id=vendor_id) from exc
        logger.info("[STORE] Replaced %s", path)
        await self.refresh_async(force=True)

    def _publish(self, documents: list[VendorDocument], *, force: bool) -> bool:
        fingerprint = [(document.vendor_id, document.record) for document in documents]
        if not force and fingerprint == self._last_published:
            return False
        self._last_published = fingerprint
        self._subscribers.publish(documents)
        return True

    def _publish_error(self, exc: StoreError) -> bool:
        logger.warning("[STORE] Refresh failed: %s", exc)
        self._subscribers.publish_error(exc)
        return False

    def refresh(self, *, force: bool = False) -> bool:
        """Re-read the collection and notify listeners when it changed."""
        try:
            documents = self.list_documents()
        except StoreError as exc:
            return self._publish_error(exc)
        return self._publish(documents, force=force)

    async def refresh_async(self, *, force: bool = False) -> bool:
        """Like ``refresh``, with the read on a worker thread and notification on the loop."""
        try:
            documents = await asyncio.to_thread(self.list_documents)
        except StoreError as exc:
            return self._publish_error(exc)
        return self._publish(documents, force=force)

    async def poll(self, interval: float = 5.0) -> None:
        """Refresh every ``interval`` seconds until the task running it is cancelled."""
        if interval <= 0:
            raise ValueError(f"poll interval must be positive. Got: {interval}")
        while True:
            await self.refresh_async()
            await asyncio.sleep(interval)

    def dispose(self) -> None:
        self._engine.dispose()
