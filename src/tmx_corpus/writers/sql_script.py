"""SQL script writer.

Writes plain DDL/DML text instead of executing against a live store, so the
output can be loaded into PostgreSQL or any other server later:

    CREATE TABLE translation_units (...);
    ALTER TABLE translation_units ADD COLUMN en_gb TEXT;
    INSERT INTO translation_units (sequential_number, document_id, en_gb) VALUES
    (0, '32019R0001', 'Text'),
    ...;

Column naming and validation are shared with the database writer. The
document name is stored inline in `document_id`; there is no documents table.
"""

from __future__ import annotations
import logging
import os
from typing import Dict, List, Optional, TextIO, Tuple

from ..errors import OutputCreateError, OutputExistsError
from ..pipeline.context import TranslationUnit
from ..stages.language_filter import RequestedLangs
from .base import TranslationUnitWriter

log = logging.getLogger("tmx_corpus.writers.sql_script")

# How many translation units go into one INSERT statement.
INSERT_SIZE = 20_000

CREATE_TABLE = """CREATE TABLE translation_units (
    id SERIAL PRIMARY KEY,
    sequential_number INTEGER,
    document_id VARCHAR(255)
);
"""


def sql_literal(value: Optional[str]) -> str:
    if value is None:
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


class SqlScriptWriter(TranslationUnitWriter):
    name = "sql"

    def __init__(
        self,
        path: str,
        requested_langs: Optional[RequestedLangs] = None,
        *,
        batch_size: int = INSERT_SIZE,
    ):
        if os.path.exists(path):
            raise OutputExistsError(path)
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        super().__init__(requested_langs or RequestedLangs.unlimited())
        self.path = path
        self.batch_size = batch_size

        # (sequence number, document name, {column: text})
        self.incoming_batch: List[Tuple[int, str, Dict[str, str]]] = []
        # columns referenced by the current batch, in order of first sight
        self.columns_in_batch: List[str] = []
        # columns already added by an ALTER TABLE in the script
        self.lang_columns: List[str] = []
        self.rows_written = 0

        self.out: Optional[TextIO] = None
        try:
            self.out = open(path, "x", encoding="utf-8")
        except OSError as e:
            self._closed = True
            raise OutputCreateError(f"Cannot create {path}", {"path": path, "error": str(e)}) from e
        self.out.write(CREATE_TABLE)

    @property
    def language_columns(self) -> Tuple[str, ...]:
        return tuple(self.lang_columns)

    def handle(self, unit: TranslationUnit, sequence_number: int) -> None:
        doc_name = self.require_doc_name(unit)
        values = dict(self.unit_columns(unit))
        for column in values:
            if column not in self.columns_in_batch:
                self.columns_in_batch.append(column)
        self.incoming_batch.append((sequence_number, doc_name, values))
        if len(self.incoming_batch) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not self.incoming_batch:
            return
        batch, self.incoming_batch = self.incoming_batch, []
        columns, self.columns_in_batch = self.columns_in_batch, []

        for column in columns:
            if column not in self.lang_columns:
                self.out.write(f"ALTER TABLE translation_units ADD COLUMN {column} TEXT;\n")
                self.lang_columns.append(column)

        column_list = ", ".join(["sequential_number", "document_id", *columns])
        self.out.write(f"INSERT INTO translation_units ({column_list}) VALUES")
        for i, (seq, doc_name, values) in enumerate(batch):
            literals = [str(seq), sql_literal(doc_name)]
            literals.extend(sql_literal(values.get(c)) for c in columns)
            sep = "," if i else ""
            self.out.write(f"{sep}\n({', '.join(literals)})")
        self.out.write(";\n")
        self.out.flush()

        self.rows_written += len(batch)
        log.debug(f"Wrote INSERT with {len(batch)} rows (total={self.rows_written})")

    def _release(self) -> None:
        if self.out is not None:
            self.out.close()
            self.out = None
