from __future__ import annotations

import pytest

from threadline.content import UnknownContent, parse_content
from threadline.normalize import TEASER_WIDTH, normalize_message


def _message(content: dict, role: str = "user", name: str | None = None, message_id: str = "m1") -> dict:
    author: dict = {"role": role, "name": name, "metadata": {}}
    return {
        "id": message_id,
        "author": author,
        "create_time": 1700000000.0,
        "content": content,
        "metadata": {"model_slug": "gpt-4"},
    }


def _text(value: str, role: str = "user") -> dict:
    return _message({"content_type": "text", "parts": [value]}, role=role)


def test_text_message_is_flattened() -> None:
    record = normalize_message(_text("hello\nworld")).to_dict()
    assert record == {
        "id": "m1",
        "teaser": "[text][user] hello",
        "author": "user",
        "content_type": "text",
        "value": "hello\nworld",
    }


def test_tool_author_embeds_tool_name() -> None:
    msg = _message({"content_type": "execution_output", "text": "42\n"}, role="tool", name="python")
    normalized = normalize_message(msg)
    assert normalized.author == "tool(python)"
    assert normalized.teaser == "[execution_output][tool(python)] 42"
    assert normalized.fields == {"text": "42\n"}


def test_tool_author_without_name_is_a_precondition_violation() -> None:
    msg = {"id": "m1", "author": {"role": "tool"}, "content": {"content_type": "text", "parts": ["x"]}}
    with pytest.raises(KeyError):
        normalize_message(msg)


@pytest.mark.parametrize("role", ["system", "assistant", "user"])
def test_other_roles_pass_through(role: str) -> None:
    assert normalize_message(_text("x", role=role)).author == role


def test_code_message() -> None:
    msg = _message({"content_type": "code", "language": "python", "text": "print(1)\nprint(2)"}, role="assistant")
    record = normalize_message(msg).to_dict()
    assert record["text"] == "print(1)\nprint(2)"
    assert record["teaser"] == "[code][assistant] print(1)"
    assert "language" not in record


def test_multimodal_text_uses_asset_pointer() -> None:
    pointer = "file-service://file-" + "A" * 80
    msg = _message(
        {
            "content_type": "multimodal_text",
            "parts": [
                {"content_type": "image_asset_pointer", "asset_pointer": pointer, "width": 512},
                "what is in this picture?",
            ],
        }
    )
    normalized = normalize_message(msg)
    prefix = "[multimodal_text][user] "
    assert normalized.fields == {"asset_pointer": pointer}
    assert normalized.teaser == prefix + pointer[: TEASER_WIDTH - len(prefix)]
    assert len(normalized.teaser) == TEASER_WIDTH


def test_browsing_display_uses_result() -> None:
    msg = _message(
        {"content_type": "tether_browsing_display", "result": "# 【0†Title】\nbody", "summary": None},
        role="tool",
        name="browser",
    )
    normalized = normalize_message(msg)
    assert normalized.fields == {"result": "# 【0†Title】\nbody"}
    assert normalized.teaser == "[tether_browsing_display][tool(browser)] # 【0†Title】"


def test_tether_quote_prefixes_url_after_truncation() -> None:
    quote = "q" * 200
    msg = _message(
        {
            "content_type": "tether_quote",
            "url": "https://example.com/a",
            "domain": "example.com",
            "title": "Example",
            "text": quote + "\nsecond line",
        },
        role="tool",
        name="browser",
    )
    normalized = normalize_message(msg)
    prefix = "[tether_quote][tool(browser)] "
    cap = TEASER_WIDTH - len(prefix)
    assert normalized.fields == {
        "url": "https://example.com/a",
        "domain": "example.com",
        "text": quote + "\nsecond line",
    }
    assert normalized.teaser == prefix + "https://example.com/a | " + "q" * cap
    assert len(normalized.teaser) > TEASER_WIDTH


def test_system_error() -> None:
    msg = _message({"content_type": "system_error", "name": "tool_error", "text": "Timeout\ntrace"}, role="tool", name="python")
    normalized = normalize_message(msg)
    assert normalized.fields == {"text": "Timeout\ntrace"}
    assert normalized.teaser.endswith("] Timeout")


def test_unknown_kind_passes_payload_through() -> None:
    payload = {"content_type": "thoughts", "thoughts": [{"summary": "s", "content": "c"}], "source_analysis_msg_id": "x"}
    record = normalize_message(_message(payload, role="assistant")).to_dict()
    assert record["content_type"] == "thoughts"
    assert record["original_content"] == payload
    assert record["original_content"] is payload
    assert record["teaser"] == "[thoughts][assistant] UNKNOWN"


def test_parse_content_falls_back_for_unknown_kinds() -> None:
    content = parse_content({"content_type": "reasoning_recap", "content": "Thought for 5s"})
    assert isinstance(content, UnknownContent)
    assert content.kind == "reasoning_recap"


@pytest.mark.parametrize("parts", [[""], []])
def test_empty_text_gives_empty_teaser_body(parts: list) -> None:
    msg = _message({"content_type": "text", "parts": parts})
    assert normalize_message(msg).teaser == "[text][user] "


def test_missing_field_gives_empty_teaser_body() -> None:
    msg = _message({"content_type": "code"}, role="assistant")
    normalized = normalize_message(msg)
    assert normalized.teaser == "[code][assistant] "
    assert normalized.fields == {"text": None}


@pytest.mark.parametrize("delta", [-1, 0, 1])
def test_teaser_truncation_boundary(delta: int) -> None:
    prefix = "[text][user] "
    cap = TEASER_WIDTH - len(prefix)
    body = "x" * (cap + delta)
    teaser = normalize_message(_text(body + "\nrest")).teaser
    assert teaser == prefix + "x" * min(cap, cap + delta)
    assert len(teaser) <= TEASER_WIDTH


def test_teaser_uses_only_first_line() -> None:
    assert normalize_message(_text("first\nsecond\nthird")).teaser == "[text][user] first"
