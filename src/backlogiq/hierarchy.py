"""Organization hierarchy editing and persistence.

The hierarchy is a forest: an ordered list of root ``PositionNode`` objects,
each owning an ordered list of children. Every mutation returns a new forest
and leaves its input untouched. Only the nodes on the path from a root to the
changed node are copied; every other subtree is shared with the input.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Protocol

from backlogiq.exceptions import HierarchyError
from backlogiq.schemas import PersistedPosition, PositionFields, PositionNode

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "tmp-"
DEFAULT_ROOT_ID = "root"

_EDITABLE_FIELDS = frozenset({"title", "description"})


class PositionWriter(Protocol):
    """Storage side of ``persist_hierarchy``."""

    async def create_position(
        self,
        *,
        organization_id: str,
        title: str,
        description: str | None,
        parent_position_id: str | None,
    ) -> PersistedPosition: ...


def new_position(
    title: str,
    description: str | None = None,
    parent_id: str | None = None,
) -> PositionNode:
    """Build a transient position with a client-side temporary id."""
    return PositionNode(
        id=f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}",
        title=title,
        description=description,
        parent_id=parent_id,
    )


def default_hierarchy() -> list[PositionNode]:
    """Return the seed forest shown when the editor opens."""
    return [
        PositionNode(
            id=DEFAULT_ROOT_ID,
            title="CEO",
            description="Chief Executive Officer",
            parent_id=None,
        )
    ]


def insert_position(
    forest: list[PositionNode],
    parent_id: str | None,
    node: PositionNode,
) -> list[PositionNode]:
    """Append ``node`` under ``parent_id``, or as a new root if it is None.

    The inserted node's ``parent_id`` is rewritten to match where it lands.
    If no node has id ``parent_id``, the forest is returned unchanged.
    """
    if parent_id is None:
        return [*forest, node.model_copy(update={"parent_id": None})]

    def _append_child(parent: PositionNode) -> PositionNode:
        child = node.model_copy(update={"parent_id": parent.id})
        return parent.model_copy(update={"children": [*parent.children, child]})

    updated = _replace_node(forest, parent_id, _append_child)
    return list(forest) if updated is None else updated


def update_position(
    forest: list[PositionNode],
    node_id: str,
    fields: PositionFields | Mapping[str, Any],
) -> list[PositionNode]:
    """Merge ``title``/``description`` into the node with id ``node_id``.

    ``id``, ``parent_id`` and ``children`` are never changed, even when present
    in ``fields``. Unknown ids leave the forest unchanged.
    """
    if isinstance(fields, PositionFields):
        changes = fields.model_dump(exclude_unset=True)
    else:
        changes = dict(fields)
    changes = {key: value for key, value in changes.items() if key in _EDITABLE_FIELDS}

    updated = _replace_node(forest, node_id, lambda target: target.model_copy(update=changes))
    return list(forest) if updated is None else updated


def remove_position(forest: list[PositionNode], node_id: str) -> list[PositionNode]:
    """Remove the node with id ``node_id`` together with its whole subtree."""
    updated = _without_node(forest, node_id)
    return list(forest) if updated is None else updated


def find_position(forest: list[PositionNode], node_id: str) -> PositionNode | None:
    """Return the first node with id ``node_id`` in depth-first order."""
    for node, _depth in iter_positions(forest):
        if node.id == node_id:
            return node
    return None


def iter_positions(forest: list[PositionNode]) -> Iterator[tuple[PositionNode, int]]:
    """Yield ``(node, depth)`` pairs in pre-order, roots at depth 0."""
    stack: list[tuple[PositionNode, int]] = [(node, 0) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.children))


def count_positions(forest: list[PositionNode]) -> int:
    """Count every node in the forest."""
    total = 0
    for node in forest:
        total += 1
        total += count_positions(node.children)
    return total


def validate_hierarchy(forest: list[PositionNode]) -> None:
    """Check that the forest is a strict tree with consistent parent links.

    Raises:
        HierarchyError: If an id appears twice, or a node's ``parent_id`` does
            not name the node that actually contains it.
    """
    seen: set[str] = set()
    stack: list[tuple[PositionNode, str | None]] = [(node, None) for node in reversed(forest)]
    while stack:
        node, expected_parent = stack.pop()
        if node.id in seen:
            raise HierarchyError(f"Duplicate position id {node.id!r}")
        seen.add(node.id)
        if node.parent_id != expected_parent:
            raise HierarchyError(
                f"Position {node.id!r} has parent_id {node.parent_id!r} "
                f"but is placed under {expected_parent!r}"
            )
        stack.extend((child, node.id) for child in reversed(node.children))


async def persist_hierarchy(
    writer: PositionWriter,
    organization_id: str,
    forest: list[PositionNode],
) -> list[PersistedPosition]:
    """Create one storage record per position, parents before children.

    Walks the forest in pre-order with an explicit stack. A node is only pushed
    once its parent has been created, carrying the parent's storage-assigned
    id, so temporary client ids never reach storage. Creates run one at a time.

    There is no rollback: if a create fails the walk stops, the error
    propagates, and the records created so far stay in storage. Persisting
    the same forest twice creates duplicates.

    Args:
        writer: Storage collaborator that creates position records.
        organization_id: Organization that owns the positions.
        forest: Positions to persist.

    Returns:
        The created records in the order they were persisted.
    """
    persisted: list[PersistedPosition] = []
    stack: list[tuple[PositionNode, str | None]] = [(node, None) for node in reversed(forest)]

    while stack:
        node, parent_position_id = stack.pop()
        try:
            record = await writer.create_position(
                organization_id=organization_id,
                title=node.title,
                description=node.description,
                parent_position_id=parent_position_id,
            )
        except Exception:
            logger.error(
                "Failed to save position %r after %d created",
                node.title,
                len(persisted),
                extra={"organization_id": organization_id, "position_id": node.id},
            )
            raise

        logger.debug("Saved position %s as %s", node.id, record.id)
        persisted.append(record)
        stack.extend((child, record.id) for child in reversed(node.children))

    return persisted


def _replace_node(
    nodes: list[PositionNode],
    node_id: str,
    replace: Callable[[PositionNode], PositionNode],
) -> list[PositionNode] | None:
    for index, node in enumerate(nodes):
        if node.id == node_id:
            result = list(nodes)
            result[index] = replace(node)
            return result
        children = _replace_node(node.children, node_id, replace)
        if children is not None:
            result = list(nodes)
            result[index] = node.model_copy(update={"children": children})
            return result
    return None


def _without_node(nodes: list[PositionNode], node_id: str) -> list[PositionNode] | None:
    for index, node in enumerate(nodes):
        if node.id == node_id:
            return [*nodes[:index], *nodes[index + 1 :]]
        children = _without_node(node.children, node_id)
        if children is not None:
            result = list(nodes)
            result[index] = node.model_copy(update={"children": children})
            return result
    return None
