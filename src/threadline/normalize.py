from __future__ import annotations

from typing import Any

from threadline.content import parse_content
from threadline.models import NormalizedMessage

TEASER_WIDTH = 70


def author_tag(author: dict[str, Any]) -> str:
    role = author["role"]
    if role == "tool":
        return f"tool({author['name']})"
    return role


def normalize_message(message: dict[str, Any]) -> NormalizedMessage:
    """Flatten one export message into a record plus a one-line teaser.

    The teaser reads ``[<content_type>][<author>] <body>`` where the body is
    the first line of the kind's main text, capped so that prefix and body
    together fit in ``TEASER_WIDTH`` characters.
    """
    author = author_tag(message["author"])
    content = parse_content(message.get("content") or {})
    prefix = f"[{content.kind}][{author}] "
    body = content.teaser_body(max(TEASER_WIDTH - len(prefix), 0))
    return NormalizedMessage(
        id=message["id"],
        author=author,
        content_type=content.kind,
        teaser=prefix + body,
        fields=content.fields(),
    )
