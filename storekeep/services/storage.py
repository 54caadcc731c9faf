"""
Storage Interface and Adapters

The rental ledger and reporting services only ever see plain dict rows
through four calls:

    select(table, filters) -> rows
    insert(table, row)     -> inserted row
    update(table, filters, patch)
    delete(table, filters)

Filters are equality matches keyed by column name; a list/tuple/set value
means "column IN values". Every backend failure is re-raised as
PersistenceError carrying the backend message.

Two adapters are provided:
  * SqlStorage      - SQLAlchemy session over the ORM tables (local/dev, tests)
  * SupabaseStorage - supabase-py PostgREST client (managed backend)
"""
import enum
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Uuid, delete as sa_delete, select as sa_select, update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storekeep.core.exceptions import PersistenceError
from storekeep.models import Building, Customer, Payment, Rental, Unit

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Filters = Dict[str, Any]

TABLE_MODELS = {
    "buildings": Building,
    "units": Unit,
    "customers": Customer,
    "rentals": Rental,
    "payments": Payment,
}


class Storage(ABC):
    """Backend-agnostic table access used by the ledger and reports"""

    @abstractmethod
    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        ...

    @abstractmethod
    def update(self, table: str, filters: Filters, patch: Row) -> None:
        ...

    @abstractmethod
    def delete(self, table: str, filters: Filters) -> None:
        ...

    def select_one(self, table: str, filters: Filters) -> Optional[Row]:
        """First matching row or None"""
        rows = self.select(table, filters, limit=1)
        return rows[0] if rows else None

    def count(self, table: str, filters: Optional[Filters] = None) -> int:
        return len(self.select(table, filters))


def _plain(value: Any) -> Any:
    """Normalise ORM column values to the shapes a REST backend returns"""
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value


def _wire(value: Any) -> Any:
    """Normalise Python values to JSON-safe values for PostgREST"""
    if isinstance(value, (list, tuple, set)):
        return [_wire(v) for v in value]
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


# ==================== SQLAlchemy ====================

class SqlStorage(Storage):
    """Storage over a SQLAlchemy session; each write commits on its own"""

    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: str):
        try:
            return TABLE_MODELS[table]
        except KeyError:
            raise PersistenceError(f"Unknown table '{table}'")

    def _coerce(self, model, column: str, value: Any) -> Any:
        attr = model.__table__.c.get(column)
        if attr is None:
            raise PersistenceError(f"Unknown column '{column}' on '{model.__tablename__}'")
        if isinstance(attr.type, Uuid):
            if isinstance(value, (list, tuple, set)):
                return [self._coerce(model, column, v) for v in value]
            if isinstance(value, str):
                try:
                    return uuid.UUID(value)
                except ValueError:
                    raise PersistenceError(f"invalid input syntax for type uuid: \"{value}\"")
        if isinstance(value, enum.Enum):
            return value.value
        return value

    def _where(self, model, filters: Optional[Filters]):
        clauses = []
        for column, value in (filters or {}).items():
            coerced = self._coerce(model, column, value)
            col = getattr(model, column)
            if isinstance(coerced, (list, tuple, set)):
                clauses.append(col.in_(list(coerced)))
            elif coerced is None:
                clauses.append(col.is_(None))
            else:
                clauses.append(col == coerced)
        return clauses

    def _values(self, model, row: Row) -> Row:
        return {k: self._coerce(model, k, v) for k, v in row.items()}

    @staticmethod
    def _to_row(obj) -> Row:
        return {c.name: _plain(getattr(obj, c.key)) for c in obj.__table__.columns}

    def select(self, table, filters=None, *, order_by=None, descending=False, limit=None):
        model = self._model(table)
        stmt = sa_select(model).where(*self._where(model, filters))
        if order_by:
            col = getattr(model, order_by)
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            return [self._to_row(obj) for obj in self.db.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"[storage] select {table} failed: {e}")
            raise PersistenceError(str(e.orig if getattr(e, "orig", None) else e))

    def insert(self, table, row):
        model = self._model(table)
        obj = model(**self._values(model, row))
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[storage] insert {table} failed: {e}")
            raise PersistenceError(str(e.orig if getattr(e, "orig", None) else e))
        return self._to_row(obj)

    def update(self, table, filters, patch):
        model = self._model(table)
        stmt = (
            sa_update(model)
            .where(*self._where(model, filters))
            .values(**self._values(model, patch))
            .execution_options(synchronize_session=False)
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[storage] update {table} failed: {e}")
            raise PersistenceError(str(e.orig if getattr(e, "orig", None) else e))

    def delete(self, table, filters):
        model = self._model(table)
        stmt = sa_delete(model).where(*self._where(model, filters)).execution_options(synchronize_session=False)
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[storage] delete {table} failed: {e}")
            raise PersistenceError(str(e.orig if getattr(e, "orig", None) else e))


# ==================== Supabase ====================

class SupabaseStorage(Storage):
    """Storage over the Supabase PostgREST API"""

    def __init__(self, client):
        self.client = client

    @staticmethod
    def _apply_filters(query, filters: Optional[Filters]):
        for column, value in (filters or {}).items():
            value = _wire(value)
            if isinstance(value, list):
                query = query.in_(column, value)
            elif value is None:
                query = query.is_(column, "null")
            else:
                query = query.eq(column, value)
        return query

    def _execute(self, action: str, table: str, query):
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"[supabase] {action} {table} failed: {e}")
            message = getattr(e, "message", None) or str(e)
            raise PersistenceError(message)

    def select(self, table, filters=None, *, order_by=None, descending=False, limit=None):
        query = self._apply_filters(self.client.table(table).select("*"), filters)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        response = self._execute("select", table, query)
        return list(response.data or [])

    def insert(self, table, row):
        payload = {k: _wire(v) for k, v in row.items()}
        response = self._execute("insert", table, self.client.table(table).insert(payload))
        if not response.data:
            raise PersistenceError(f"Insert into '{table}' returned no row")
        return response.data[0]

    def update(self, table, filters, patch):
        payload = {k: _wire(v) for k, v in patch.items()}
        query = self._apply_filters(self.client.table(table).update(payload), filters)
        self._execute("update", table, query)

    def delete(self, table, filters):
        query = self._apply_filters(self.client.table(table).delete(), filters)
        self._execute("delete", table, query)


def create_supabase_storage(url: str, key: str) -> SupabaseStorage:
    """Build a SupabaseStorage from project URL and API key"""
    from supabase import create_client

    try:
        client = create_client(url, key)
        logger.info("Supabase client initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        raise PersistenceError(f"Supabase client initialization failed: {e}")
    return SupabaseStorage(client)
