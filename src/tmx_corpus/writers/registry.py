"""Writer registry.

Output formats are selected by name (CLI subcommand or `output.format` in the
config). Factories check that the output does not exist before any writer
state is created.

Add new writers without changing pipeline code by registering them here.
"""

from __future__ import annotations
import os
from typing import Callable, Dict, List, Optional

import sqlalchemy as sa

from ..errors import OutputExistsError
from ..stages.language_filter import RequestedLangs
from .base import TranslationUnitWriter
from .database import TRANSACTION_SIZE, DatabaseWriter
from .sql_script import INSERT_SIZE, SqlScriptWriter

WriterFactory = Callable[[str, RequestedLangs, Optional[int]], TranslationUnitWriter]


def _ensure_absent(path: str) -> None:
    if os.path.exists(path):
        raise OutputExistsError(path)


def _make_sqlite_writer(path: str, langs: RequestedLangs, batch_size: Optional[int]) -> TranslationUnitWriter:
    _ensure_absent(path)
    engine = sa.create_engine(f"sqlite:///{os.path.abspath(path)}")
    return DatabaseWriter(
        engine,
        langs,
        batch_size=batch_size or TRANSACTION_SIZE,
        owns_engine=True,
    )


def _make_sql_script_writer(path: str, langs: RequestedLangs, batch_size: Optional[int]) -> TranslationUnitWriter:
    _ensure_absent(path)
    return SqlScriptWriter(path, langs, batch_size=batch_size or INSERT_SIZE)


_WRITERS: Dict[str, WriterFactory] = {
    "sqlite": _make_sqlite_writer,
    "sql": _make_sql_script_writer,
}


def register_writer(name: str, factory: WriterFactory) -> None:
    """Register a new output format dynamically."""
    if name in _WRITERS:
        raise ValueError(f"Writer '{name}' already registered")
    _WRITERS[name] = factory


def list_writers() -> List[str]:
    return list(_WRITERS.keys())


def make_writer(
    name: str,
    path: str,
    langs: Optional[RequestedLangs] = None,
    batch_size: Optional[int] = None,
) -> TranslationUnitWriter:
    """Create the writer for output format `name`."""
    if name not in _WRITERS:
        raise KeyError(
            f"Unknown output format: {name}. "
            f"Available: {list(_WRITERS)}. "
            f"Register with register_writer()"
        )
    return _WRITERS[name](path, langs or RequestedLangs.unlimited(), batch_size)
