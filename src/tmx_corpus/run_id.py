"""Run ID resolution: explicit or auto-generated.

Auto-generated ids look like `tmx_20240131T120000` (UTC) and name the log file
and the run manifest.
"""

from __future__ import annotations
import re
from datetime import datetime, timezone
from typing import Any, Dict


def generate_run_id(prefix: str = "tmx") -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"{prefix}_{ts}"


def resolve_run_id(cfg: Dict[str, Any]) -> str:
    """Return run.run_id if set (made filename-safe), else a generated id."""
    run = cfg.get("run") or {}
    explicit = run.get("run_id")
    if explicit is not None and str(explicit).strip():
        return re.sub(r"[^\w\-.]", "_", str(explicit).strip())
    return generate_run_id()
