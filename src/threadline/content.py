"""
Message content variants.

A ChatGPT export tags every message payload with ``content_type``. Each known
kind gets its own dataclass exposing the simplified fields that end up in the
exported record and the text its teaser is cut from. Anything else becomes
``UnknownContent``, which keeps the payload untouched so newer export shapes
survive conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

UNKNOWN_TEASER = "UNKNOWN"


def first_line(text: str | None) -> str:
    if not text:
        return ""
    return str(text).split("\n", 1)[0]


@dataclass(frozen=True)
class TextContent:
    kind: ClassVar[str] = "text"
    value: Any = None

    def fields(self) -> dict[str, Any]:
        return {"value": self.value}

    def teaser_body(self, max_len: int) -> str:
        return first_line(self.value)[:max_len]


@dataclass(frozen=True)
class CodeContent:
    kind: ClassVar[str] = "code"
    text: str | None = None

    def fields(self) -> dict[str, Any]:
        return {"text": self.text}

    def teaser_body(self, max_len: int) -> str:
        return first_line(self.text)[:max_len]


@dataclass(frozen=True)
class MultimodalTextContent:
    kind: ClassVar[str] = "multimodal_text"
    asset_pointer: str | None = None

    def fields(self) -> dict[str, Any]:
        return {"asset_pointer": self.asset_pointer}

    def teaser_body(self, max_len: int) -> str:
        # Pointers are single-line ids, so they are capped but not split.
        return (self.asset_pointer or "")[:max_len]


@dataclass(frozen=True)
class ExecutionOutputContent:
    kind: ClassVar[str] = "execution_output"
    text: str | None = None

    def fields(self) -> dict[str, Any]:
        return {"text": self.text}

    def teaser_body(self, max_len: int) -> str:
        return first_line(self.text)[:max_len]


@dataclass(frozen=True)
class TetherBrowsingDisplayContent:
    kind: ClassVar[str] = "tether_browsing_display"
    result: str | None = None

    def fields(self) -> dict[str, Any]:
        return {"result": self.result}

    def teaser_body(self, max_len: int) -> str:
        return first_line(self.result)[:max_len]


@dataclass(frozen=True)
class TetherQuoteContent:
    kind: ClassVar[str] = "tether_quote"
    url: str | None = None
    domain: str | None = None
    text: str | None = None

    def fields(self) -> dict[str, Any]:
        return {"url": self.url, "domain": self.domain, "text": self.text}

    def teaser_body(self, max_len: int) -> str:
        # The cap covers the quote only; the url is prepended afterwards and
        # can push the teaser past the nominal width.
        return f"{self.url} | {first_line(self.text)[:max_len]}"


@dataclass(frozen=True)
class SystemErrorContent:
    kind: ClassVar[str] = "system_error"
    text: str | None = None

    def fields(self) -> dict[str, Any]:
        return {"text": self.text}

    def teaser_body(self, max_len: int) -> str:
        return first_line(self.text)[:max_len]


@dataclass(frozen=True)
class UnknownContent:
    content_type: str
    original_content: Any = None

    @property
    def kind(self) -> str:
        return self.content_type

    def fields(self) -> dict[str, Any]:
        return {"original_content": self.original_content}

    def teaser_body(self, max_len: int) -> str:
        return UNKNOWN_TEASER


Content = (
    TextContent
    | CodeContent
    | MultimodalTextContent
    | ExecutionOutputContent
    | TetherBrowsingDisplayContent
    | TetherQuoteContent
    | SystemErrorContent
    | UnknownContent
)


def _first_asset_pointer(parts: list) -> str | None:
    for part in parts:
        if isinstance(part, dict) and "asset_pointer" in part:
            return part["asset_pointer"]
    return None


def parse_content(raw: dict[str, Any]) -> Content:
    content_type = raw.get("content_type")
    if content_type == "text":
        parts = raw.get("parts") or []
        return TextContent(value=parts[0] if parts else None)
    if content_type == "code":
        return CodeContent(text=raw.get("text"))
    if content_type == "multimodal_text":
        return MultimodalTextContent(asset_pointer=_first_asset_pointer(raw.get("parts") or []))
    if content_type == "execution_output":
        return ExecutionOutputContent(text=raw.get("text"))
    if content_type == "tether_browsing_display":
        return TetherBrowsingDisplayContent(result=raw.get("result"))
    if content_type == "tether_quote":
        return TetherQuoteContent(url=raw.get("url"), domain=raw.get("domain"), text=raw.get("text"))
    if content_type == "system_error":
        return SystemErrorContent(text=raw.get("text"))
    return UnknownContent(content_type=str(content_type), original_content=raw)
