"""CLI entrypoint.

Parse the DGT translation memory, distributed as ZIP archives of TMX files,
and save the multilingual parallel texts into another output format.

Commands:
- `tmx-corpus -i data/zipped sqlite -o dgt.sqlite`
- `tmx-corpus -i data/zipped -l en -l pl -r sqlite -o dgt.sqlite`
- `tmx-corpus --config configs/build.yaml sql -o dgt.sql`

Global options go before the subcommand. CLI flags override the config file.
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .config import load_config
from .errors import TmxCorpusError
from .logging_ import setup_logging
from .pipeline.build import build
from .run_id import resolve_run_id

log = logging.getLogger("tmx_corpus.cli")


def make_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tmx-corpus",
        description="Parse and transform the DGT-TM (translation memory).",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-i", "--input-dir", help="Path to directory containing a flat collection of ZIP files")
    p.add_argument("-l", dest="langs", action="append", metavar="LANG",
                   help="Language that should be included in the output (repeatable; en, pl, DE-DE, ...)")
    p.add_argument("-r", "--require-each-lang", action="store_true",
                   help="Only include translation units where each of the specified languages is present")
    p.add_argument("--config", help="YAML run configuration")
    p.add_argument("--batch-size", type=int, help="Translation units per transaction / INSERT statement")
    p.add_argument("--log-dir", help="Directory for the run log and manifest")
    p.add_argument("--run-id")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar")

    sub = p.add_subparsers(dest="cmd", required=True)
    ps = sub.add_parser("sqlite", help="Save translation units in an SQLite database")
    ps.add_argument("-o", "--output", dest="output_file", required=True, help="Output file")
    pq = sub.add_parser("sql", help="Write translation units as a SQL script")
    pq.add_argument("-o", "--output", dest="output_file", required=True, help="Output file")
    return p


def apply_args(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Overlay command-line arguments on a loaded config."""
    if args.input_dir:
        cfg["input"]["dir"] = args.input_dir
    if args.langs:
        cfg["langs"]["include"] = args.langs
    if args.require_each_lang:
        cfg["langs"]["require_each"] = True
    if args.batch_size is not None:
        cfg["output"]["batch_size"] = args.batch_size
    if args.log_dir:
        cfg["run"]["log_dir"] = args.log_dir
    if args.run_id:
        cfg["run"]["run_id"] = args.run_id
    cfg["output"]["format"] = args.cmd
    cfg["output"]["path"] = args.output_file
    return cfg


def main(argv: Optional[List[str]] = None) -> int:
    args = make_parser().parse_args(argv)

    try:
        cfg = apply_args(load_config(args.config), args)
    except (OSError, TmxCorpusError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    run_id = resolve_run_id(cfg)
    setup_logging(run_id=run_id, log_dir=cfg["run"].get("log_dir"))

    try:
        build(cfg, run_id=run_id, progress=not args.no_progress)
    except TmxCorpusError as e:
        log.error(f"Run failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
