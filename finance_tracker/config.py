from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "data_file": "all_in_one.txt",
    "users_file": "users.yaml",
    "sections": {
        "transactions": "Transactions",
        "income": "Income",
        "expense": "Expense",
    },
}

DATA_FILE_ENV = "FINANCE_TRACKER_DATA_FILE"
LOG_LEVEL_ENV = "FINANCE_TRACKER_LOG"


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged or merged[key] is None:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: Optional[Path] = None) -> Dict[str, object]:
    """Read ``path`` and fill in defaults.

    A missing file gives the defaults. ``FINANCE_TRACKER_DATA_FILE`` wins over
    the configured data file.
    """
    data: Dict[str, object] = {}
    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
    config = _merge_defaults(data, DEFAULT_CONFIG)
    env_data_file = os.environ.get(DATA_FILE_ENV)
    if env_data_file:
        config["data_file"] = env_data_file
    return config


def save_config(config: Dict[str, object], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(config, fp, sort_keys=False)
