from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

BRANCH_TEASER = "--- BRANCH SPLIT ---"


@dataclass(frozen=True)
class NormalizedMessage:
    id: str
    author: str
    content_type: str
    teaser: str
    # kind-specific simplified fields, flattened into the record by to_dict()
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "teaser": self.teaser,
            "author": self.author,
            "content_type": self.content_type,
        }
        data.update(self.fields)
        return data


@dataclass(frozen=True)
class BranchMarker:
    branches: dict[str, list["Entry"]]
    teaser: str = BRANCH_TEASER

    def to_dict(self) -> dict[str, Any]:
        return {
            "teaser": self.teaser,
            "branches": {
                name: [entry.to_dict() for entry in sequence]
                for name, sequence in self.branches.items()
            },
        }


Entry = Union[NormalizedMessage, BranchMarker]


@dataclass(frozen=True)
class ConvertedConversation:
    id: str
    title: str
    create_time: str | None
    update_time: str | None
    month: str
    messages: list[Entry]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "create_time": self.create_time,
            "update_time": self.update_time,
            "messages": [entry.to_dict() for entry in self.messages],
        }
