from __future__ import annotations

import json
import logging
import zipfile
from pathlib import Path
from typing import Any

from threadline.linearize import linearize_conversation
from threadline.models import ConvertedConversation
from threadline.redact import redact_mapping
from threadline.utils import format_timestamp, month_key, sha256_json

logger = logging.getLogger(__name__)

ARCHIVE_MEMBER = "conversations.json"


def _conversation_id(raw: dict[str, Any]) -> str:
    value = raw.get("id") or raw.get("conversation_id")
    if not value:
        raise ValueError("Conversation has no id")
    return str(value)


def _read_archive_json(input_path: Path) -> Any:
    if input_path.is_dir():
        input_path = input_path / ARCHIVE_MEMBER
    if not input_path.exists():
        raise ValueError(f"No {ARCHIVE_MEMBER} found at {input_path}")
    if zipfile.is_zipfile(input_path):
        with zipfile.ZipFile(input_path) as archive:
            members = [name for name in archive.namelist() if Path(name).name == ARCHIVE_MEMBER]
            if not members:
                raise ValueError(f"{input_path} does not contain {ARCHIVE_MEMBER}")
            # Exports put it at the top level; prefer the shallowest match.
            member = min(members, key=lambda name: name.count("/"))
            with archive.open(member) as handle:
                return json.load(handle)
    try:
        return json.loads(input_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {input_path}: {exc}") from exc


class ChatGPTAdapter:
    def discover_conversations(self, input_path: Path) -> list[dict[str, Any]]:
        data = _read_archive_json(input_path)
        if isinstance(data, dict):
            # single conversation saved on its own
            data = [data]
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of conversations in {input_path}")
        conversations: list[dict[str, Any]] = []
        for position, item in enumerate(data):
            if not isinstance(item, dict):
                logger.debug("Skipping non-object entry %d in %s", position, input_path)
                continue
            conversations.append(item)
        return conversations

    def peek_conversation(self, raw: dict[str, Any], source_system: str) -> dict:
        conversation_id = _conversation_id(raw)
        return {
            "conversation_id": conversation_id,
            "conversation_key": f"{source_system}:{conversation_id}",
            "title": str(raw.get("title") or "Untitled"),
            "create_time": raw.get("create_time"),
            "month": month_key(raw.get("create_time")),
            "fingerprint": sha256_json(raw),
        }

    def find_conversation(self, input_path: Path, conversation_id: str) -> dict[str, Any]:
        for raw in self.discover_conversations(input_path):
            if str(raw.get("id") or raw.get("conversation_id") or "") == conversation_id:
                return raw
        raise KeyError(conversation_id)

    def parse_conversation(self, raw: dict[str, Any], *, redact: bool = False) -> ConvertedConversation:
        mapping = raw.get("mapping") or {}
        if not isinstance(mapping, dict):
            raise TypeError("Conversation mapping is not an object")
        # Scrub before teasers are cut so a truncated key cannot slip through.
        mapping = redact_mapping(mapping, redact=redact)
        return ConvertedConversation(
            id=_conversation_id(raw),
            title=str(raw.get("title") or "Untitled"),
            create_time=format_timestamp(raw.get("create_time")),
            update_time=format_timestamp(raw.get("update_time")),
            month=month_key(raw.get("create_time")),
            messages=linearize_conversation(mapping),
        )
