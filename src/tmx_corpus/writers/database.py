"""Dynamic-schema relational writer.

Schema:

    documents          (id, name UNIQUE)
    translation_units  (id, document_id -> documents.id, sequential_number,
                        en_gb, pl_01, de_de, ...)

Language columns are not known before parsing. A column is added with
ALTER TABLE the first time an accepted unit carries text in that language,
and always before any insert references it.

Document ids are memoised per run. Unit rows are buffered and committed in
batches of `batch_size`, one transaction per batch. Any store error is fatal:
the batch is detached before executing and never retried.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import DocumentInsertError, SchemaAlterError, TransactionCommitError
from ..pipeline.context import TranslationUnit
from ..stages.language_filter import RequestedLangs
from .base import TranslationUnitWriter

log = logging.getLogger("tmx_corpus.writers.database")

# How many translation units to insert in one transaction.
TRANSACTION_SIZE = 20_000

UNITS_TABLE = "translation_units"
DOCUMENTS_TABLE = "documents"

metadata = sa.MetaData()

documents = sa.Table(
    DOCUMENTS_TABLE,
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("name", sa.Text, nullable=False, unique=True),
)

translation_units = sa.Table(
    UNITS_TABLE,
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("document_id", sa.Integer, sa.ForeignKey(f"{DOCUMENTS_TABLE}.id")),
    sa.Column("sequential_number", sa.Integer),
)

BASE_COLUMNS = ("sequential_number", "document_id")


class DatabaseWriter(TranslationUnitWriter):
    name = "database"

    def __init__(
        self,
        engine: Engine,
        requested_langs: Optional[RequestedLangs] = None,
        *,
        batch_size: int = TRANSACTION_SIZE,
        owns_engine: bool = False,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        super().__init__(requested_langs or RequestedLangs.unlimited())
        self.engine = engine
        self.batch_size = batch_size
        self.owns_engine = owns_engine

        # language column registry, in creation order
        self._lang_columns: List[str] = []
        # document name -> documents.id
        self.docs_in_db: Dict[str, int] = {}
        # pending rows for the next transaction
        self.pending: List[Dict[str, Any]] = []
        self.rows_written = 0
        self.batches_committed = 0

        self.conn: Optional[Connection] = None
        try:
            self.conn = engine.connect()
            self._setup_schema()
        except SQLAlchemyError as e:
            self._closed = True
            self._release()
            raise SchemaAlterError("Error setting up schema", {"error": str(e)}) from e

    @property
    def language_columns(self) -> Tuple[str, ...]:
        return tuple(self._lang_columns)

    @property
    def document_count(self) -> int:
        return len(self.docs_in_db)

    def _setup_schema(self) -> None:
        # every run is a full rebuild
        with self.conn.begin():
            metadata.drop_all(self.conn)
            metadata.create_all(self.conn)

    def _quote(self, column: str) -> str:
        return self.engine.dialect.identifier_preparer.quote(column)

    def _add_lang_column(self, column: str) -> None:
        ddl = f"ALTER TABLE {UNITS_TABLE} ADD COLUMN {self._quote(column)} TEXT"
        try:
            with self.conn.begin():
                self.conn.execute(sa.text(ddl))
        except SQLAlchemyError as e:
            raise SchemaAlterError(
                f"Failed to add column {column}", {"statement": ddl, "error": str(e)}
            ) from e
        self._lang_columns.append(column)
        log.info(f"Added language column {column}")

    def _document_id(self, doc_name: str) -> int:
        """Return the surrogate id for `doc_name`, inserting the row if new."""
        doc_id = self.docs_in_db.get(doc_name)
        if doc_id is not None:
            return doc_id
        try:
            with self.conn.begin():
                doc_id = self.conn.execute(
                    sa.select(documents.c.id).where(documents.c.name == doc_name)
                ).scalar_one_or_none()
                if doc_id is None:
                    result = self.conn.execute(sa.insert(documents).values(name=doc_name))
                    doc_id = result.inserted_primary_key[0]
        except SQLAlchemyError as e:
            raise DocumentInsertError(
                f"Failed to insert document {doc_name}", {"document": doc_name, "error": str(e)}
            ) from e
        self.docs_in_db[doc_name] = doc_id
        return doc_id

    def handle(self, unit: TranslationUnit, sequence_number: int) -> None:
        doc_id = self._document_id(self.require_doc_name(unit))
        values = self.unit_columns(unit)

        for column, _ in values:
            if column not in self._lang_columns:
                self._add_lang_column(column)

        row: Dict[str, Any] = {"sequential_number": sequence_number, "document_id": doc_id}
        row.update(values)
        self.pending.append(row)

        if len(self.pending) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        """Commit the pending batch as a single transaction."""
        if not self.pending:
            return
        batch, self.pending = self.pending, []

        columns = [*BASE_COLUMNS, *self._lang_columns]
        rows = [{c: row.get(c) for c in columns} for row in batch]
        stmt = sa.insert(sa.table(UNITS_TABLE, *(sa.column(c) for c in columns)))
        try:
            with self.conn.begin():
                self.conn.execute(stmt, rows)
        except SQLAlchemyError as e:
            raise TransactionCommitError(
                f"Failed to commit {len(rows)} translation units",
                {"statement": str(stmt), "rows": len(rows), "error": str(e)},
            ) from e

        self.rows_written += len(rows)
        self.batches_committed += 1
        log.debug(f"Committed batch #{self.batches_committed} ({len(rows)} rows, total={self.rows_written})")

    def _release(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
        if self.owns_engine:
            self.engine.dispose()
