from __future__ import annotations

from pathlib import Path

from .chatgpt import ChatGPTAdapter


def get_adapter(source_system: str):
    normalized = source_system.strip().lower()
    if normalized in {"chatgpt", "openai"}:
        return ChatGPTAdapter()
    raise ValueError(f"Unsupported source system: {source_system}")


def default_input_path(source_system: str) -> Path:
    normalized = source_system.strip().lower()
    if normalized in {"chatgpt", "openai"}:
        return Path("~/Downloads/conversations.json").expanduser()
    raise ValueError(f"No default input path for source system: {source_system}")
