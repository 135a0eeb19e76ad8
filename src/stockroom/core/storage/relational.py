"""Embedded relational product storage backed by SQLite through SQLModel."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

import sqlalchemy as sa
from loguru import logger
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, col, create_engine, select

from src.stockroom.core.storage.errors import ProductNotFound, StorageUnavailable
from src.stockroom.core.storage.product_storage import ProductStorage, StorageBackend
from src.stockroom.entities.product import Product, ProductCreate, ProductTable, ProductUpdate


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


def _register_functions(dbapi_connection, _connection_record) -> None:
    # SQLite's lower()/LIKE only fold ASCII
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


class RelationalProductStorage(ProductStorage):
    """Products kept in the ``products`` table of an embedded SQLite database."""

    backend = StorageBackend.RELATIONAL

    def __init__(self, url: str, echo: bool = False, timeout: int = 20):
        super().__init__()
        self._url = url
        self._echo = echo
        self._timeout = timeout
        self._engine: Engine | None = None

    @property
    def url(self) -> str:
        return self._url

    async def init(self) -> None:
        """Open the database and create the table and trigger if needed."""
        if self._engine is not None:
            return
        self._engine = await asyncio.to_thread(self._open)

    def _is_memory(self) -> bool:
        database = make_url(self._url).database
        return not database or database == ":memory:"

    def _ensure_db_directory(self) -> None:
        if self._is_memory():
            return
        database = make_url(self._url).database
        Path(database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)

    def _open(self) -> Engine:
        engine: Engine | None = None
        try:
            self._ensure_db_directory()
            engine_kwargs: dict = {
                "echo": self._echo,
                "connect_args": {"check_same_thread": False, "timeout": self._timeout},
            }
            if self._is_memory():
                # One shared connection, or every checkout would see a fresh database
                engine_kwargs["poolclass"] = StaticPool
            engine = create_engine(self._url, **engine_kwargs)
            sa.event.listen(engine, "connect", _register_functions)
            SQLModel.metadata.create_all(engine, tables=[ProductTable.__table__])
        except (OSError, SQLAlchemyError) as e:
            if engine is not None:
                engine.dispose()
            raise StorageUnavailable(f"Cannot open product database {self._url}: {e}") from e

        logger.info("Product database ready at {}", self._url)
        return engine

    def _require_engine(self) -> Engine:
        if self._engine is None:
            raise StorageUnavailable("Product storage is not initialized; call init() first")
        return self._engine

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        session = Session(self._require_engine(), expire_on_commit=False)
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    async def get_all(self) -> list[Product]:
        return await asyncio.to_thread(self._select)

    async def search(self, query: str) -> list[Product]:
        return await asyncio.to_thread(self._select, query)

    def _select(self, query: str | None = None) -> list[Product]:
        statement = select(ProductTable)
        if query is not None:
            statement = statement.where(
                sa.func.casefold(col(ProductTable.name), type_=sa.String).contains(
                    query.casefold(), autoescape=True
                )
            )
        statement = statement.order_by(
            col(ProductTable.updated_at).desc(), col(ProductTable.id).asc()
        )
        with self._session_scope() as session:
            rows = session.exec(statement).all()
            return [Product.model_validate(row) for row in rows]

    async def get_by_id(self, product_id: int) -> Product | None:
        return await asyncio.to_thread(self._get, product_id)

    def _get(self, product_id: int) -> Product | None:
        with self._session_scope() as session:
            row = session.get(ProductTable, product_id)
            if row is None:
                return None
            return Product.model_validate(row)

    async def create(self, data: ProductCreate) -> Product:
        product = await asyncio.to_thread(self._insert, data)
        logger.debug("Created product {} ({})", product.id, product.name)
        return product

    def _insert(self, data: ProductCreate) -> Product:
        now = self._next_timestamp()
        row = ProductTable(**data.model_dump(), created_at=now, updated_at=now)
        with self._session_scope() as session:
            session.add(row)
            session.flush()
            session.refresh(row)
            return Product.model_validate(row)

    async def update(self, data: ProductUpdate) -> Product:
        changes = self._changes_for(data)
        product = await asyncio.to_thread(self._apply_update, data.id, changes)
        logger.debug("Updated product {} fields {}", product.id, sorted(changes))
        return product

    def _apply_update(self, product_id: int, changes: dict) -> Product:
        with self._session_scope() as session:
            row = session.get(ProductTable, product_id)
            if row is None:
                raise ProductNotFound(product_id)

            for field_name, value in changes.items():
                setattr(row, field_name, value)
            row.updated_at = self._next_timestamp(floor=_as_utc(row.updated_at))

            session.add(row)
            session.flush()
            session.refresh(row)
            return Product.model_validate(row)

    async def delete(self, product_id: int) -> bool:
        deleted = await asyncio.to_thread(self._delete, product_id)
        logger.debug("Delete product {}: {}", product_id, "removed" if deleted else "absent")
        return deleted

    def _delete(self, product_id: int) -> bool:
        with self._session_scope() as session:
            row = session.get(ProductTable, product_id)
            if row is None:
                return False
            session.delete(row)
            return True

    async def close(self) -> None:
        if self._engine is None:
            return
        engine, self._engine = self._engine, None
        await asyncio.to_thread(engine.dispose)
        logger.info("Product database at {} closed", self._url)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
