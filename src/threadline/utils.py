from __future__ import annotations

import hashlib
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

UNKNOWN_MONTH = "unknown"


def slugify(value: str, default: str = "conversation", max_len: int = 60) -> str:
    lowered = re.sub(r"\s+", "-", value.strip().lower())
    cleaned = re.sub(r"[^a-z0-9._-]+", "-", lowered).strip("-._")
    if not cleaned:
        cleaned = default
    return cleaned[:max_len].rstrip("-._") or default


def sanitize_segment(segment: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "-", segment).strip(".-")
    return cleaned or "unknown"


def epoch_to_datetime(value: float | int | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def format_timestamp(value: float | int | str | None) -> str | None:
    """Epoch seconds -> ISO-8601 UTC with a ``Z`` suffix, None when unusable."""
    parsed = epoch_to_datetime(value)
    if parsed is None:
        return None
    return parsed.isoformat().replace("+00:00", "Z")


def month_key(value: float | int | str | None) -> str:
    parsed = epoch_to_datetime(value)
    if parsed is None:
        return UNKNOWN_MONTH
    return parsed.strftime("%Y-%m")


def format_basename_timestamp(value: float | int | str | None) -> str:
    parsed = epoch_to_datetime(value)
    if parsed is None:
        return "undated"
    return parsed.strftime("%Y-%m-%d-%H%M")


def now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat().replace("+00:00", "Z")


def sha256_json(payload: Any) -> str:
    canonical = json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(content, encoding="utf-8")
    tmp_path.replace(path)


def atomic_write_json(path: Path, content: dict) -> None:
    serialized = json.dumps(content, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
    atomic_write_text(path, serialized)
