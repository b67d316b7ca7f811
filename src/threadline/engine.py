from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from threadline.linearize import StructuralViolation
from threadline.models import ConvertedConversation
from threadline.redact import redact_value
from threadline.render import render_document
from threadline.utils import (
    atomic_write_json,
    atomic_write_text,
    format_basename_timestamp,
    now_iso,
    sanitize_segment,
    sha256_json,
    slugify,
)

logger = logging.getLogger(__name__)

STATE_DIR = ".threadline"


@dataclass
class ConvertResult:
    discovered: int = 0
    exported: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    dry_run: bool = False


def index_path_for(output_path: Path) -> Path:
    return output_path / STATE_DIR / "index.json"


def load_index(index_path: Path) -> dict:
    if not index_path.exists():
        return {"version": 1, "conversations": {}}
    try:
        raw = json.loads(index_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable index at %s", index_path)
        return {"version": 1, "conversations": {}}
    if not isinstance(raw, dict):
        logger.warning("Ignoring index without an object at %s", index_path)
        return {"version": 1, "conversations": {}}
    conversations = raw.get("conversations", {})
    if not isinstance(conversations, dict):
        conversations = {}
    return {"version": raw.get("version", 1), "conversations": conversations}


def _claimed_stems(records: dict) -> dict[str, str]:
    """Output paths without suffix, mapped to the conversation key that owns them."""
    claimed: dict[str, str] = {}
    for key, record in records.items():
        output_rel = record.get("output_path")
        if output_rel:
            claimed[str(Path(output_rel).with_suffix(""))] = key
    return claimed


def _conversation_basename(
    conversation: ConvertedConversation,
    raw_create_time,
    preferred: str | None,
    *,
    is_taken,
) -> str:
    if preferred:
        return preferred
    stamp = format_basename_timestamp(raw_create_time)
    slug = slugify(conversation.title, default=slugify(conversation.id[-8:] or "conversation"))
    basename = f"{stamp}-{slug}"
    if is_taken(basename):
        # Same minute and title as another conversation ("New chat").
        basename = f"{basename}-{sanitize_segment(conversation.id[-8:])}"
    return basename


def convert_archive(
    *,
    adapter,
    input_path: Path,
    output_path: Path,
    history_subpath: str,
    source_system: str,
    fmt: str = "yaml",
    dry_run: bool = False,
    redact: bool = True,
) -> ConvertResult:
    history_root = output_path / history_subpath
    index_path = index_path_for(output_path)
    index = load_index(index_path)
    records: dict = index["conversations"]
    claimed = _claimed_stems(records)

    result = ConvertResult(dry_run=dry_run)
    for raw in adapter.discover_conversations(input_path):
        result.discovered += 1
        try:
            peek = adapter.peek_conversation(raw, source_system)
        except ValueError:
            logger.warning("Skipping conversation without id (title=%r)", raw.get("title"))
            result.failed += 1
            continue
        key = peek["conversation_key"]
        fingerprint = sha256_json({"format": fmt, "redact": redact, "fingerprint": peek["fingerprint"]})

        prior = records.get(key, {})
        if prior.get("fingerprint") == fingerprint:
            output_rel = prior.get("output_path")
            if output_rel and (output_path / output_rel).exists():
                result.skipped += 1
                continue

        try:
            conversation = adapter.parse_conversation(raw, redact=redact)
        except StructuralViolation as exc:
            logger.warning("Conversation %s has a broken message tree: %s", peek["conversation_id"], exc)
            result.failed += 1
            continue
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Could not convert conversation %s: %r", peek["conversation_id"], exc)
            result.failed += 1
            continue

        out_dir = history_root / sanitize_segment(conversation.month)
        month_rel = out_dir.relative_to(output_path)

        def is_taken(candidate: str) -> bool:
            owner = claimed.get(str(month_rel / candidate))
            return owner is not None and owner != key

        basename = _conversation_basename(
            conversation, peek["create_time"], prior.get("basename"), is_taken=is_taken
        )
        target = out_dir / f"{basename}.{fmt}"
        claimed[str(month_rel / basename)] = key
        previous_rel = prior.get("output_path")
        if not dry_run:
            document = redact_value(conversation.to_dict(), redact=redact)
            atomic_write_text(target, render_document(document, fmt))
            # A format change leaves the old rendering behind otherwise.
            if previous_rel and (output_path / previous_rel) != target:
                (output_path / previous_rel).unlink(missing_ok=True)
            logger.debug("Wrote %s", target)

        records[key] = {
            "conversation_key": key,
            "conversation_id": conversation.id,
            "fingerprint": fingerprint,
            "source_system": source_system,
            "title": conversation.title,
            "month": conversation.month,
            "output_path": str(target.relative_to(output_path)),
            "basename": basename,
            "format": fmt,
            "create_time": conversation.create_time,
            "updated_at": now_iso(),
        }
        if prior:
            result.updated += 1
        else:
            result.exported += 1

    if not dry_run:
        _ensure_state_gitignore(output_path)
        atomic_write_json(index_path, index)
    return result


def _ensure_state_gitignore(output_path: Path) -> None:
    gitignore = output_path / STATE_DIR / ".gitignore"
    content = "*\n!.gitignore\n"
    if not gitignore.exists() or gitignore.read_text() != content:
        atomic_write_text(gitignore, content)
