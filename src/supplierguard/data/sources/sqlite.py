"""SQLite supplier store implementation."""
import asyncio
from functools import partial
from pathlib import Path
from typing import Union

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from supplierguard.data.database import Database
from supplierguard.data.interfaces import BaseSupplierStore
from supplierguard.data.schema import SupplierRecord
from supplierguard.exceptions import Conflict
from supplierguard.models.supplier import Country, Supplier, SupplierQuery, SupplierSortField

_SORT_COLUMNS = {
    SupplierSortField.LEGAL_NAME: func.unicode_lower(SupplierRecord.legal_name),
    SupplierSortField.COMMERCIAL_NAME: func.unicode_lower(SupplierRecord.commercial_name),
    SupplierSortField.TAX_ID: SupplierRecord.tax_id,
    SupplierSortField.COUNTRY: SupplierRecord.country,
    SupplierSortField.ANNUAL_REVENUE: SupplierRecord.annual_revenue,
    SupplierSortField.CREATED_AT: SupplierRecord.created_at,
    SupplierSortField.LAST_MODIFIED_AT: func.coalesce(
        SupplierRecord.last_modified_at, SupplierRecord.created_at
    ),
}


def _conflict(supplier: Supplier) -> Conflict:
    return Conflict(f"A supplier with tax ID {supplier.tax_id} already exists.")


class SQLiteSupplierStore(BaseSupplierStore):
    """
    SQLite supplier store.

    Uses SQLAlchemy through the Database class from database.py. All methods
    are async-compatible by running sync SQLAlchemy code in a thread pool.
    Search filters, sorting and paging are evaluated by SQLite.
    """

    def __init__(self, db_path: Union[str, Path] = "data/supplierguard.db"):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
                     Use ':memory:' for an in-memory database (useful for testing).
        """
        self.db = Database(db_path)
        self.db.create_tables()

    def _run_sync(self, func, *args, **kwargs):
        """Run a synchronous function in a thread pool."""
        loop = asyncio.get_running_loop()
        return loop.run_in_executor(None, partial(func, *args, **kwargs))

    # ------------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------------

    def _get_by_id_sync(self, supplier_id: str) -> Supplier | None:
        with self.db.session_scope() as session:
            record = session.get(SupplierRecord, supplier_id)
            return record.to_domain() if record else None

    async def get_by_id(self, supplier_id: str) -> Supplier | None:
        return await self._run_sync(self._get_by_id_sync, supplier_id)

    def _get_by_tax_id_sync(self, tax_id: str) -> Supplier | None:
        with self.db.session_scope() as session:
            record = session.scalars(
                select(SupplierRecord).where(SupplierRecord.tax_id == tax_id)
            ).first()
            return record.to_domain() if record else None

    async def get_by_tax_id(self, tax_id: str) -> Supplier | None:
        return await self._run_sync(self._get_by_tax_id_sync, tax_id)

    def _list_all_sync(self) -> list[Supplier]:
        with self.db.session_scope() as session:
            records = session.scalars(
                select(SupplierRecord).order_by(
                    _SORT_COLUMNS[SupplierSortField.LAST_MODIFIED_AT].desc()
                )
            ).all()
            return [record.to_domain() for record in records]

    async def list_all(self) -> list[Supplier]:
        return await self._run_sync(self._list_all_sync)

    @staticmethod
    def _filtered(query: SupplierQuery):
        stmt = select(SupplierRecord)
        if query.search_term and query.search_term.strip():
            # instr() matches literally, so % and _ in the term are not wildcards
            term = query.search_term.strip().lower()
            stmt = stmt.where(
                or_(
                    *(
                        func.instr(func.unicode_lower(column), term) > 0
                        for column in (
                            SupplierRecord.legal_name,
                            SupplierRecord.commercial_name,
                            SupplierRecord.tax_id,
                            SupplierRecord.email,
                        )
                    )
                )
            )
        if query.country:
            stmt = stmt.where(SupplierRecord.country == Country.parse(query.country).name)
        if query.min_revenue is not None:
            stmt = stmt.where(SupplierRecord.annual_revenue >= query.min_revenue)
        if query.max_revenue is not None:
            stmt = stmt.where(SupplierRecord.annual_revenue <= query.max_revenue)
        return stmt

    def _find_sync(self, query: SupplierQuery) -> tuple[list[Supplier], int]:
        stmt = self._filtered(query)
        column = _SORT_COLUMNS[query.sort_field]
        with self.db.session_scope() as session:
            total = session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
            records = session.scalars(
                stmt.order_by(column.asc() if query.ascending else column.desc())
                .offset(query.offset)
                .limit(query.page_size)
            ).all()
            return [record.to_domain() for record in records], total

    async def find(self, query: SupplierQuery) -> tuple[list[Supplier], int]:
        return await self._run_sync(self._find_sync, query)

    def _count_sync(self) -> int:
        with self.db.session_scope() as session:
            return session.scalar(select(func.count(SupplierRecord.id))) or 0

    async def count(self) -> int:
        return await self._run_sync(self._count_sync)

    # ------------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------------

    def _add_sync(self, supplier: Supplier) -> Supplier:
        try:
            with self.db.session_scope() as session:
                session.add(SupplierRecord.from_domain(supplier))
        except IntegrityError as exc:
            raise _conflict(supplier) from exc
        return supplier

    async def add(self, supplier: Supplier) -> Supplier:
        return await self._run_sync(self._add_sync, supplier)

    def _update_sync(self, supplier: Supplier) -> Supplier:
        try:
            with self.db.session_scope() as session:
                record = session.get(SupplierRecord, supplier.id)
                if record is None:
                    session.add(SupplierRecord.from_domain(supplier))
                else:
                    record.apply(supplier)
        except IntegrityError as exc:
            raise _conflict(supplier) from exc
        return supplier

    async def update(self, supplier: Supplier) -> Supplier:
        return await self._run_sync(self._update_sync, supplier)

    def _delete_sync(self, supplier_id: str) -> bool:
        with self.db.session_scope() as session:
            record = session.get(SupplierRecord, supplier_id)
            if record is None:
                return False
            session.delete(record)
            return True

    async def delete(self, supplier_id: str) -> bool:
        return await self._run_sync(self._delete_sync, supplier_id)

    def _health_check_sync(self) -> bool:
        session: Session = self.db.get_session()
        try:
            session.execute(text("SELECT 1"))
            return True
        finally:
            session.close()

    async def health_check(self) -> bool:
        try:
            return await self._run_sync(self._health_check_sync)
        except Exception:
            return False
