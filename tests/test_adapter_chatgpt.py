from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest

from threadline.adapters import default_input_path, get_adapter
from threadline.adapters.chatgpt import ChatGPTAdapter
from threadline.linearize import StructuralViolation
from threadline.models import BranchMarker


def _message(node_id: str, role: str, text: str, name: str | None = None) -> dict:
    return {
        "id": node_id,
        "author": {"role": role, "name": name, "metadata": {}},
        "create_time": 1700000000.0,
        "update_time": None,
        "content": {"content_type": "text", "parts": [text]},
        "status": "finished_successfully",
        "end_turn": True,
        "weight": 1.0,
        "metadata": {},
        "recipient": "all",
    }


def _conversation(conversation_id: str = "conv-1", create_time: float | None = 1700000000.0) -> dict:
    return {
        "id": conversation_id,
        "title": "Trip planning",
        "create_time": create_time,
        "update_time": 1700000500.25,
        "current_node": "a2",
        "mapping": {
            "client-created-root": {"id": "client-created-root", "message": None, "parent": None, "children": ["u1"]},
            "u1": {"id": "u1", "message": _message("u1", "user", "Plan a trip"), "parent": "client-created-root", "children": ["a1", "a2"]},
            "a1": {"id": "a1", "message": _message("a1", "assistant", "Go to Rome"), "parent": "u1", "children": []},
            "a2": {"id": "a2", "message": _message("a2", "assistant", "Go to Oslo"), "parent": "u1", "children": []},
        },
    }


def _write_json(path: Path, payload) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_get_adapter() -> None:
    assert isinstance(get_adapter("ChatGPT"), ChatGPTAdapter)
    with pytest.raises(ValueError):
        get_adapter("codex")
    assert default_input_path("chatgpt").name == "conversations.json"


def test_discover_from_json_file(tmp_path: Path) -> None:
    path = _write_json(tmp_path / "conversations.json", [_conversation("a"), "junk", _conversation("b")])
    found = ChatGPTAdapter().discover_conversations(path)
    assert [raw["id"] for raw in found] == ["a", "b"]


def test_discover_from_export_folder(tmp_path: Path) -> None:
    _write_json(tmp_path / "export" / "conversations.json", [_conversation()])
    assert len(ChatGPTAdapter().discover_conversations(tmp_path / "export")) == 1


def test_discover_from_zip(tmp_path: Path) -> None:
    archive = tmp_path / "export.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("conversations.json", json.dumps([_conversation("z")]))
        zf.writestr("chat.html", "<html></html>")
    assert [raw["id"] for raw in ChatGPTAdapter().discover_conversations(archive)] == ["z"]


def test_zip_without_conversations_is_rejected(tmp_path: Path) -> None:
    archive = tmp_path / "export.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("user.json", "{}")
    with pytest.raises(ValueError):
        ChatGPTAdapter().discover_conversations(archive)


def test_invalid_json_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "conversations.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        ChatGPTAdapter().discover_conversations(path)


def test_missing_folder_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        ChatGPTAdapter().discover_conversations(tmp_path)


def test_single_conversation_file(tmp_path: Path) -> None:
    path = _write_json(tmp_path / "one.json", _conversation("solo"))
    assert [raw["id"] for raw in ChatGPTAdapter().discover_conversations(path)] == ["solo"]


def test_peek_conversation() -> None:
    peek = ChatGPTAdapter().peek_conversation(_conversation(), "chatgpt")
    assert peek["conversation_key"] == "chatgpt:conv-1"
    assert peek["month"] == "2023-11"
    assert peek["title"] == "Trip planning"
    assert len(peek["fingerprint"]) == 64


def test_peek_uses_conversation_id_fallback() -> None:
    raw = _conversation()
    del raw["id"]
    raw["conversation_id"] = "legacy"
    assert ChatGPTAdapter().peek_conversation(raw, "chatgpt")["conversation_id"] == "legacy"


def test_parse_conversation() -> None:
    conversation = ChatGPTAdapter().parse_conversation(_conversation())
    assert conversation.id == "conv-1"
    assert conversation.create_time == "2023-11-14T22:13:20Z"
    assert conversation.update_time == "2023-11-14T22:21:40.250000Z"
    assert conversation.month == "2023-11"
    assert [entry.id for entry in conversation.messages[:1]] == ["u1"]
    marker = conversation.messages[1]
    assert isinstance(marker, BranchMarker)
    assert marker.branches == {"branch1": [], "branch2": []}


def test_parse_conversation_without_timestamps() -> None:
    conversation = ChatGPTAdapter().parse_conversation(_conversation(create_time=None))
    assert conversation.create_time is None
    assert conversation.month == "unknown"


def test_parse_conversation_with_broken_tree() -> None:
    raw = _conversation()
    raw["mapping"]["a1"]["children"] = ["a2"]
    raw["mapping"]["a2"]["children"] = []
    with pytest.raises(StructuralViolation):
        ChatGPTAdapter().parse_conversation(raw)


def test_find_conversation(tmp_path: Path) -> None:
    path = _write_json(tmp_path / "conversations.json", [_conversation("a"), _conversation("b")])
    adapter = ChatGPTAdapter()
    assert adapter.find_conversation(path, "b")["id"] == "b"
    with pytest.raises(KeyError):
        adapter.find_conversation(path, "missing")
