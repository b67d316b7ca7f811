from __future__ import annotations

import json
from typing import Any

import yaml
from rich.markup import escape
from rich.tree import Tree

FORMATS = ("yaml", "json")


def render_yaml(data: dict[str, Any]) -> str:
    return yaml.safe_dump(
        data,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
        width=100,
    )


def render_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def render_document(data: dict[str, Any], fmt: str) -> str:
    if fmt == "yaml":
        return render_yaml(data)
    if fmt == "json":
        return render_json(data)
    raise ValueError(f"Unsupported output format: {fmt}")


def _add_entries(parent: Tree, entries: list[dict[str, Any]]) -> None:
    for entry in entries:
        branches = entry.get("branches")
        if branches is None:
            parent.add(escape(entry["teaser"]))
            continue
        split = parent.add(f"[yellow]{escape(entry['teaser'])}[/]")
        for name, sequence in branches.items():
            branch = split.add(f"[cyan]{name}[/] [dim]({len(sequence)} entries)[/]")
            _add_entries(branch, sequence)


def render_tree(data: dict[str, Any]) -> Tree:
    """Teaser tree of a converted conversation (``ConvertedConversation.to_dict()``)."""
    created = data.get("create_time") or "undated"
    tree = Tree(f"[bold]{escape(data['title'])}[/] [dim]{data['id']} · {created}[/]")
    _add_entries(tree, data["messages"])
    return tree
