"""
Graph-to-sequence linearization of a conversation mapping.

An export stores a conversation as ``{node_id: {"message", "parent",
"children"}}``. Walking it depth-first from the first real message gives the
straight-line transcript; wherever a node has several children (edits,
regenerations) the walk stops appending to the current sequence and emits a
``BranchMarker`` holding one fresh sequence per child, named ``branch1``,
``branch2``, ... in child order.

A node without children contributes nothing: only nodes that lead somewhere
append their own message, so the final message of every path is not part of
the output.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from threadline.models import BranchMarker, Entry
from threadline.normalize import normalize_message

logger = logging.getLogger(__name__)


class StructuralViolation(ValueError):
    def __init__(self, node_id: str, reason: str) -> None:
        super().__init__(f"{reason}: {node_id}")
        self.node_id = node_id
        self.reason = reason


def linearize(root_id: str, mapping: Mapping[str, Mapping[str, Any]]) -> list[Entry]:
    """Linearize the subtree under ``root_id``.

    ``root_id`` must name a node that carries a message, i.e. the single child
    of the synthetic export root, not the synthetic root itself.

    Raises ``StructuralViolation`` when a node is reached twice (cycle or
    shared descendant) or when a node other than the synthetic root has no
    message. Nothing is returned in that case.
    """
    result: list[Entry] = []
    visited: set[str] = set()
    # (node id, sequence the node's message goes into); popped LIFO so the
    # visiting order matches a recursive pre-order walk.
    stack: list[tuple[str, list[Entry]]] = [(root_id, result)]

    while stack:
        node_id, sequence = stack.pop()
        node = mapping[node_id]
        if node_id in visited:
            logger.error("Node %s reached twice while linearizing from %s", node_id, root_id)
            raise StructuralViolation(node_id, "node visited twice")
        message = node.get("message")
        if message is None:
            logger.error("Node %s has no message (linearizing from %s)", node_id, root_id)
            raise StructuralViolation(node_id, "node has no message")
        visited.add(node_id)

        normalized = normalize_message(message)
        children = list(node.get("children") or [])

        if not children:
            continue
        sequence.append(normalized)
        if len(children) == 1:
            stack.append((children[0], sequence))
            continue

        branches: dict[str, list[Entry]] = {
            f"branch{index}": [] for index in range(1, len(children) + 1)
        }
        sequence.append(BranchMarker(branches=branches))
        for index in range(len(children), 0, -1):
            stack.append((children[index - 1], branches[f"branch{index}"]))

    return result


def find_root_placeholder(mapping: Mapping[str, Mapping[str, Any]]) -> str | None:
    for node_id, node in mapping.items():
        if node.get("message") is None and node.get("parent") is None:
            return node_id
    for node_id, node in mapping.items():
        if node.get("message") is None:
            return node_id
    return None


def linearize_conversation(mapping: Mapping[str, Mapping[str, Any]]) -> list[Entry]:
    """Linearize a whole export mapping starting below its synthetic root."""
    if not mapping:
        return []
    placeholder = find_root_placeholder(mapping)
    if placeholder is None:
        raise StructuralViolation("<none>", "mapping has no root placeholder")
    children = list(mapping[placeholder].get("children") or [])
    if not children:
        return []
    if len(children) > 1:
        raise StructuralViolation(placeholder, "root placeholder has several children")
    return linearize(children[0], mapping)
