"""Pipeline build runner.

archive entry -> decode -> parse -> (unit, sequence number) -> language
filter -> writer

- documents are processed one at a time, units in document order
- a unit's sequence number is its position in the document body, assigned
  before filtering
- entries that fail to decode or parse are skipped (archives may hold
  non-TMX artifacts)
- an accepted unit without a document name aborts the run

This module is the entrypoint for running a full rebuild.
"""

from __future__ import annotations
import logging
import os
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from tqdm import tqdm

from ..config import validate_config
from ..errors import ConfigError, EntryError, MissingDocumentIdentityError
from ..manifest import manifest_path, write_manifest
from ..parsers.tmx import parse_tmx
from ..run_id import resolve_run_id
from ..sources.base import DataSource
from ..sources.zip_archives import ZipArchiveSource
from ..stages.language_filter import LanguageFilter, RequestedLangs
from ..utils.text import DEFAULT_ENCODING, decode_entry
from ..writers.base import TranslationUnitWriter
from ..writers.registry import make_writer

log = logging.getLogger("tmx_corpus.build")


@dataclass
class IngestStats:
    entries: int = 0
    documents: int = 0
    skipped_entries: int = 0
    units_seen: int = 0
    units_accepted: int = 0
    units_rejected: int = 0


def ingest(
    source: DataSource,
    writer: TranslationUnitWriter,
    requested: RequestedLangs,
    *,
    encoding: str = DEFAULT_ENCODING,
    progress: bool = True,
) -> IngestStats:
    """Stream every document in `source` through the filter into `writer`.

    The writer is not flushed or closed here; that belongs to its owner.
    """
    lang_filter = LanguageFilter(requested)
    stats = IngestStats()
    total = source.count_entries() if progress else None

    for entry in tqdm(source.stream(), total=total, unit="doc", desc="Parsing", disable=not progress):
        stats.entries += 1
        try:
            doc = parse_tmx(decode_entry(entry.data, encoding))
        except EntryError as e:
            stats.skipped_entries += 1
            log.warning(f"Skipping {entry.archive}:{entry.name}: {e}")
            continue
        stats.documents += 1

        for seq, unit in enumerate(doc.body):
            stats.units_seen += 1
            if not lang_filter.apply(unit).accepted:
                stats.units_rejected += 1
                continue
            if unit.doc_name() is None:
                raise MissingDocumentIdentityError(
                    "No document ID provided for the translation unit.",
                    {"archive": entry.archive, "entry": entry.name, "sequence_number": seq},
                )
            writer.handle(unit, seq)
            stats.units_accepted += 1

    return stats


def build(cfg: Dict[str, Any], run_id: Optional[str] = None, *, progress: bool = True) -> IngestStats:
    """Run a full rebuild as described by `cfg` (see tmx_corpus.config)."""
    validate_config(cfg)
    run_id = run_id or resolve_run_id(cfg)
    inp, out, langs_cfg = cfg["input"], cfg["output"], cfg["langs"]

    if not os.path.isdir(inp["dir"]):
        raise ConfigError(f"Input directory not found: {inp['dir']}")

    source = ZipArchiveSource(inp["dir"], entry_suffix=inp.get("entry_suffix") or ".tmx")
    requested = RequestedLangs.from_cli(langs_cfg.get("include"), bool(langs_cfg.get("require_each")))
    log.info(
        f"Starting run_id={run_id} input={inp['dir']} archives={len(source.archives)} "
        f"format={out['format']} output={out['path']} langs={requested.mode.value}:{sorted(requested.langs)}"
    )

    start = time.time()
    writer = make_writer(out["format"], out["path"], requested, out.get("batch_size"))
    with writer:
        stats = ingest(
            source,
            writer,
            requested,
            encoding=inp.get("encoding") or DEFAULT_ENCODING,
            progress=progress,
        )
    elapsed = time.time() - start

    columns = list(getattr(writer, "language_columns", ()))
    log.info(
        f"Build complete: documents={stats.documents} skipped={stats.skipped_entries} "
        f"units={stats.units_seen} accepted={stats.units_accepted} rejected={stats.units_rejected} "
        f"columns={len(columns)} elapsed={elapsed:.1f}s"
    )

    run_cfg = cfg.get("run") or {}
    if run_cfg.get("write_manifest", True) and run_cfg.get("log_dir"):
        path = manifest_path(run_cfg["log_dir"], run_id)
        write_manifest(path, {
            "run_id": run_id,
            "input_dir": inp["dir"],
            "source": source.metadata(),
            "output": {"format": out["format"], "path": out["path"]},
            "langs": {"mode": requested.mode.value, "requested": sorted(requested.langs)},
            "stats": asdict(stats),
            "language_columns": columns,
            "elapsed_s": round(elapsed, 3),
        })
        log.info(f"manifest={path}")

    return stats
