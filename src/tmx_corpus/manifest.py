"""Run manifest.

One JSON file per run at `<log_dir>/manifests/<run_id>.json`, recording what
was ingested and where it went.
"""

from __future__ import annotations
import json
import os
from typing import Any, Dict


def manifest_path(log_dir: str, run_id: str) -> str:
    return os.path.join(log_dir, "manifests", f"{run_id}.json")


def write_manifest(path: str, manifest: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
