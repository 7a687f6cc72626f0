"""ZIP archive source.

DGT-TM is distributed as a flat directory of ZIP files, each holding TMX
documents. Files that are not valid ZIP archives are skipped, as are members
without the configured suffix (readme files, licences, ...) and members that
cannot be decompressed.
"""

from __future__ import annotations
import logging
import os
import zipfile
import zlib
from typing import Any, Dict, Iterable, List

from .base import DataSource, RawEntry

log = logging.getLogger("tmx_corpus.sources.zip_archives")


class ZipArchiveSource(DataSource):
    name = "zip_archives"

    def __init__(self, input_dir: str, entry_suffix: str = ".tmx"):
        self.input_dir = input_dir
        self.entry_suffix = entry_suffix.lower()
        self.archives = self._resolve_archives(input_dir)

    def _resolve_archives(self, input_dir: str) -> List[str]:
        paths = []
        for entry in sorted(os.listdir(input_dir)):
            path = os.path.join(input_dir, entry)
            if os.path.isfile(path):
                paths.append(path)
        return paths

    def _is_document(self, info: zipfile.ZipInfo) -> bool:
        return not info.is_dir() and info.filename.lower().endswith(self.entry_suffix)

    def _open(self, path: str):
        try:
            return zipfile.ZipFile(path)
        except (zipfile.BadZipFile, OSError) as e:
            log.warning(f"Skipping {path}: not a readable ZIP archive ({e})")
            return None

    def metadata(self) -> Dict[str, Any]:
        return {
            "kind": self.name,
            "input_dir": self.input_dir,
            "archives": len(self.archives),
            "entry_suffix": self.entry_suffix,
        }

    def count_entries(self) -> int:
        total = 0
        for path in self.archives:
            zf = self._open(path)
            if zf is None:
                continue
            with zf:
                total += sum(1 for info in zf.infolist() if self._is_document(info))
        return total

    def stream(self) -> Iterable[RawEntry]:
        for path in self.archives:
            zf = self._open(path)
            if zf is None:
                continue
            with zf:
                for info in zf.infolist():
                    if not self._is_document(info):
                        continue
                    try:
                        data = zf.read(info)
                    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
                        log.warning(f"Skipping {path}:{info.filename}: {e}")
                        continue
                    yield RawEntry(archive=path, name=info.filename, data=data)
