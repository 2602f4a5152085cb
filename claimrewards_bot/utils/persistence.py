"""Whole-file JSON persistence shared by the file-backed stores.

Every store keeps its working set in memory and mirrors it to one JSON file.
Writes go to a sibling temp file first and then replace the target, so a
crash mid-write never leaves a truncated document behind.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

PathLike = Union[str, Path]


def read_json(path: PathLike) -> Any:
    """Read and parse `path`. Raises OSError / json.JSONDecodeError / UnicodeDecodeError."""
    # utf-8-sig tolerates a leading BOM written by Windows editors
    return json.loads(Path(path).read_text(encoding="utf-8-sig"))


def write_json(path: PathLike, data: Any) -> None:
    """Serialize `data` with stable indentation and overwrite `path`."""
    path = Path(path)
    text = json.dumps(data, indent=2, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text + "\n", encoding="utf-8")
    tmp.replace(path)
