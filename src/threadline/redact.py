from __future__ import annotations

from typing import Any, Mapping

import hyperscan

from threadline.redact_patterns import PATTERNS

REDACTED = "[REDACTED]"

_db: hyperscan.Database | None = None


def _get_db() -> hyperscan.Database:
    global _db
    if _db is None:
        exprs, ids = zip(*PATTERNS)
        _db = hyperscan.Database()
        _db.compile(
            expressions=list(exprs),
            ids=list(ids),
            elements=len(PATTERNS),
            flags=[hyperscan.HS_FLAG_UTF8 | hyperscan.HS_FLAG_SOM_LEFTMOST] * len(PATTERNS),
        )
    return _db


def _secret_spans(data: bytes) -> list[tuple[int, int]]:
    """Byte spans of every secret in ``data``, overlapping hits merged."""
    hits: list[tuple[int, int]] = []

    def on_match(id: int, from_: int, to: int, flags: int, context: list) -> None:
        context.append((from_, to))

    _get_db().scan(data, match_event_handler=on_match, context=hits)
    spans: list[tuple[int, int]] = []
    for start, end in sorted(hits):
        if spans and start <= spans[-1][1]:
            spans[-1] = (spans[-1][0], max(spans[-1][1], end))
        else:
            spans.append((start, end))
    return spans


def redact_secrets(text: str, *, redact: bool = True) -> str:
    if not redact or not text:
        return text
    data = text.encode("utf-8")
    pieces: list[bytes] = []
    cursor = 0
    for start, end in _secret_spans(data):
        pieces.append(data[cursor:start])
        pieces.append(REDACTED.encode("utf-8"))
        cursor = end
    if not pieces:
        return text
    pieces.append(data[cursor:])
    return b"".join(pieces).decode("utf-8")


def redact_value(value: Any, *, redact: bool = True) -> Any:
    """Return a copy of ``value`` with every nested string scrubbed.

    Runs on plain data (dicts, lists, scalars) before serialization, so a
    replacement can never break YAML or JSON quoting.
    """
    if not redact:
        return value
    if isinstance(value, str):
        return redact_secrets(value)
    if isinstance(value, dict):
        return {key: redact_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    return value


def redact_mapping(mapping: Mapping[str, Mapping[str, Any]], *, redact: bool = True) -> Mapping[str, Mapping[str, Any]]:
    """Copy of an export mapping whose message contents are scrubbed.

    Only ``message.content`` is rewritten; node ids, parents and children
    stay as they are so the tree shape is untouched. Teasers cut from the
    result can no longer keep the head of a key that straddles the cut.
    """
    if not redact:
        return mapping
    scrubbed: dict[str, Mapping[str, Any]] = {}
    for node_id, node in mapping.items():
        message = node.get("message")
        if message is None or "content" not in message:
            scrubbed[node_id] = node
            continue
        scrubbed[node_id] = {**node, "message": {**message, "content": redact_value(message["content"])}}
    return scrubbed
