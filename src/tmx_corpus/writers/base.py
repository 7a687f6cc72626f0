"""Output writers.

A writer receives accepted translation units together with their position in
the source document, buffers them and commits them in batches.

Lifecycle:
- `handle(unit, seq)` per accepted unit, in document order
- `flush()` commits the pending batch (no-op when empty)
- `close()` flushes once more and releases resources; safe to call twice

Writers are context managers. A writer that is never closed still flushes when
it is garbage collected.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from ..errors import MissingDocumentIdentityError
from ..langs import lang_code_to_column
from ..pipeline.context import TranslationUnit
from ..stages.language_filter import RequestedLangs

log = logging.getLogger("tmx_corpus.writers")


class TranslationUnitWriter(ABC):
    name: str
    batch_size: int

    def __init__(self, requested_langs: RequestedLangs):
        self.requested_langs = requested_langs
        self._closed = False

    @abstractmethod
    def handle(self, unit: TranslationUnit, sequence_number: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def flush(self) -> None:
        raise NotImplementedError

    def _release(self) -> None:
        """Free underlying resources after the final flush."""

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.flush()
        finally:
            self._release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __del__(self):
        if not getattr(self, "_closed", True):
            self.close()

    def require_doc_name(self, unit: TranslationUnit) -> str:
        doc_name = unit.doc_name()
        if doc_name is None:
            raise MissingDocumentIdentityError(
                "No document ID provided for the translation unit."
            )
        return doc_name.strip()

    def unit_columns(self, unit: TranslationUnit) -> List[Tuple[str, str]]:
        """(column, text) pairs for the unit's allowed languages.

        First segment per column wins. Every language is validated before
        anything is returned, so an invalid code rejects the whole unit.
        """
        values: Dict[str, str] = {}
        for seg in unit.segments:
            if not self.requested_langs.allows(seg.lang):
                continue
            column = lang_code_to_column(seg.lang)
            if column in values:
                log.debug(f"Duplicate segment for {column} in unit, keeping the first")
                continue
            values[column] = seg.content
        return list(values.items())
