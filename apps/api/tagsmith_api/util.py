from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path


def rfc3339_from_timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def env_flag(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp.{os.getpid()}")
    # newline="" keeps the caller's line endings as written.
    with tmp_path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)
    tmp_path.replace(path)
