"""Database connection and session management."""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from supplierguard.data.schema import Base

MEMORY_PATH = ":memory:"
UNICODE_LOWER = "unicode_lower"


def _unicode_lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


def _register_functions(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII
    dbapi_connection.create_function(UNICODE_LOWER, 1, _unicode_lower, deterministic=True)


class Database:
    """Database manager for SQLite.

    ``:memory:`` uses a single shared connection so every session sees the
    same database.
    """

    def __init__(self, db_path: Union[str, Path] = "data/supplierguard.db"):
        if str(db_path) == MEMORY_PATH:
            self.db_path = None
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        event.listen(self.engine, "connect", _register_functions)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    def create_tables(self) -> None:
        """Create all tables defined in the schema."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def get_session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def init_database(db_path: Union[str, Path] = "data/supplierguard.db") -> Database:
    """Create a database and its tables.

    Args:
        db_path: Path to the SQLite database file, or ``:memory:``.

    Returns:
        The initialized Database instance.
    """
    db = Database(db_path)
    db.create_tables()
    return db
