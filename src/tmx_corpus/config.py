"""Run configuration.

Configuration is a YAML file with the sections below; every key is optional
and CLI flags override whatever the file sets.

    run:
      run_id: null          # explicit id, else auto-generated
      log_dir: logs
      write_manifest: true
    input:
      dir: data/zipped      # directory of ZIP archives
      entry_suffix: .tmx
      encoding: utf-16-le
    langs:
      include: [en, pl]     # null = all languages
      require_each: false   # true = unit must contain every language
    output:
      format: sqlite        # sqlite | sql
      path: out/dgt.sqlite
      batch_size: null      # null = writer default
"""

from __future__ import annotations
import codecs
import copy
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

DEFAULT_CONFIG: Dict[str, Any] = {
    "run": {"run_id": None, "log_dir": "logs", "write_manifest": True},
    "input": {"dir": None, "entry_suffix": ".tmx", "encoding": "utf-16-le"},
    "langs": {"include": None, "require_each": False},
    "output": {"format": "sqlite", "path": None, "batch_size": None},
}


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge `override` into a copy of `base`."""
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge(out[key], value)
        else:
            out[key] = value
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    return merge(DEFAULT_CONFIG, load_yaml(path))


def validate_config(cfg: Dict[str, Any]) -> None:
    if not cfg["input"].get("dir"):
        raise ConfigError("No input directory given (input.dir / -i)")
    if not cfg["output"].get("path"):
        raise ConfigError("No output path given (output.path / -o)")

    from .writers.registry import list_writers
    fmt = cfg["output"].get("format")
    if fmt not in list_writers():
        raise ConfigError(f"Unknown output format: {fmt}", {"available": list_writers()})

    batch_size = cfg["output"].get("batch_size")
    if batch_size is not None and (
        isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1
    ):
        raise ConfigError(f"batch_size must be a positive integer, got {batch_size!r}")

    langs = cfg["langs"]
    if langs.get("include") is not None and not isinstance(langs["include"], list):
        raise ConfigError("langs.include must be a list of language codes")
    if langs.get("require_each") and not langs.get("include"):
        raise ConfigError("langs.require_each needs langs.include")

    try:
        codecs.lookup(cfg["input"].get("encoding") or "")
    except LookupError as e:
        raise ConfigError(f"Unknown encoding: {cfg['input'].get('encoding')!r}") from e
