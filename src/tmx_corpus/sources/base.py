"""Entry source interface.

A source yields one `RawEntry` per document member found in its archives.
Sources know nothing about TMX beyond the file suffix; decoding and parsing
happen in the pipeline.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable


@dataclass
class RawEntry:
    archive: str   # path of the containing archive
    name: str      # member name inside the archive
    data: bytes


class DataSource:
    """Base interface for all sources."""
    name: str

    def metadata(self) -> Dict[str, Any]:
        return {}

    def count_entries(self) -> int:
        """Total entries `stream()` will yield (used for progress)."""
        raise NotImplementedError

    def stream(self) -> Iterable[RawEntry]:
        raise NotImplementedError
