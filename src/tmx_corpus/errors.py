"""Exceptions raised by tmx_corpus.

Two families:
- entry-level errors (decode/parse): the pipeline skips the entry and continues
- run-level errors (identity, schema, commit, output, config): the run aborts
"""

from __future__ import annotations
from typing import Any, Dict, Optional


class TmxCorpusError(Exception):
    """Base exception for all tmx_corpus errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# Entry-level

class EntryError(TmxCorpusError):
    """A single archive entry could not be turned into a document."""


class EntryDecodeError(EntryError):
    """Entry bytes are not valid in the expected text encoding."""


class TmxParseError(EntryError):
    """Entry text is not a well-formed TMX document."""


# Run-level

class MissingDocumentIdentityError(TmxCorpusError):
    """An accepted translation unit has no document name."""


class InvalidLanguageColumnError(TmxCorpusError):
    """A language code does not normalize to a valid column name."""

    def __init__(self, lang_code: str, column: str) -> None:
        super().__init__(
            f"Invalid language code: {lang_code!r}",
            {"lang_code": lang_code, "column": column},
        )
        self.lang_code = lang_code
        self.column = column


class WriterError(TmxCorpusError):
    """The output store rejected an operation."""


class DocumentInsertError(WriterError):
    pass


class SchemaAlterError(WriterError):
    pass


class TransactionCommitError(WriterError):
    pass


class OutputCreateError(WriterError):
    """The output file could not be created."""


class OutputExistsError(TmxCorpusError):
    """The target output already exists."""

    def __init__(self, path: str) -> None:
        super().__init__(f"{path} already exists!", {"path": path})
        self.path = path


class ConfigError(TmxCorpusError):
    """Invalid configuration or command-line arguments."""
