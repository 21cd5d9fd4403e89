from __future__ import annotations
import json
import os
from typing import List, Optional

from .config import DEFAULT_LABELS

def parse_labels(obj) -> List[str]:
    """Accept a list, {"classes": [...]}, {"label2idx": {...}} or an index map {"0": "hello", ...}."""
    if isinstance(obj, list):
        return [str(x) for x in obj]
    if isinstance(obj, dict):
        if "classes" in obj:
            return [str(x) for x in obj["classes"]]
        if "labels" in obj and isinstance(obj["labels"], list):
            return [str(x) for x in obj["labels"]]
        if "label2idx" in obj:
            return [c for c, _ in sorted(obj["label2idx"].items(), key=lambda kv: int(kv[1]))]
        try:
            items = sorted(((int(k), v) for k, v in obj.items()), key=lambda kv: kv[0])
        except (TypeError, ValueError):
            items = None
        if items is not None:
            if [k for k, _ in items] != list(range(len(items))):
                raise ValueError(f"label index map is not contiguous from 0: {[k for k, _ in items]}")
            return [str(v) for _, v in items]
    raise ValueError(f"unrecognized labels format: {type(obj).__name__}")

def load_labels(path: Optional[str]) -> List[str]:
    """Read a label table from json or newline text. No path -> built-in table."""
    if not path:
        return list(DEFAULT_LABELS)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"labels file not found: {path}")
    if path.lower().endswith(".json"):
        with open(path, "r", encoding="utf-8") as f:
            return parse_labels(json.load(f))
    with open(path, "r", encoding="utf-8") as f:
        return [ln.strip() for ln in f if ln.strip()]
