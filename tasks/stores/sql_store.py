"""SQLite snapshot storage for the task store.

The task store keeps its working set in memory and persists whole snapshots:
each write replaces the full contents of the tables it touches, the way the
browser version rewrote its local-storage keys.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import create_engine, delete, select
from sqlalchemy.orm import Session, sessionmaker

from tasks.schemas import Base

RecordT = TypeVar("RecordT", bound=Base)


class SQLStore:
    """Reads and replaces table snapshots in single transactions."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(f"sqlite+pysqlite:///{self.db_path}", future=True)
        self._session_factory = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    def create_all(self) -> None:
        """Create task and project tables if missing."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager that commits on success and rolls back on error."""
        sess = self._session_factory()
        try:
            yield sess
            sess.commit()
        except Exception:
            sess.rollback()
            raise
        finally:
            sess.close()

    def fetch_all(self, model: type[RecordT], order_by: Any) -> list[RecordT]:
        """All rows of ``model`` in the given order, detached from the session."""
        with self.session() as sess:
            return list(sess.scalars(select(model).order_by(order_by)))

    def replace_all(self, snapshots: dict[type[Base], Sequence[Base]]) -> None:
        """Make each table hold exactly the given records.

        Rows whose primary key is absent from a snapshot are deleted, the
        rest are inserted or updated. All tables change in one transaction,
        so a failure leaves the previous snapshot intact.
        """
        with self.session() as sess:
            for model, records in snapshots.items():
                keep = [record.id for record in records]
                sess.execute(delete(model).where(model.id.not_in(keep)))
                for record in records:
                    sess.merge(record)
