# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Structural edits: append, move, insert and remove.

Each operator relinks the structure first, then updates the store's node
index and state sets, and finally recomputes the cached flags of the
nodes whose derived state may have changed. Misuse (moving a node into its
own subtree, moving it onto its current slot, removing a detached node)
is a silent no-op.
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from . import propagation

if TYPE_CHECKING:
    from .node import TreeModelNode
    from .store import TreeModelStore

logger = logging.getLogger(__name__)


def _as_list(items: Any) -> list[Any]:
    if isinstance(items, (list, tuple)):
        return list(items)
    if items is None:
        return []
    return [items]


def _sibling_list(tree: TreeModelStore, parent: TreeModelNode | None) -> list[TreeModelNode]:
    """Return the child list of parent, turning it into a list if needed."""
    if parent is None:
        return tree.children
    if not isinstance(parent.children, list):
        parent.children = []
    return parent.children


def append_nodes(
    tree: TreeModelStore,
    parent: TreeModelNode | None,
    items: Any,
) -> None:
    """Append payloads or nodes under parent (None for the root list).

    Existing nodes are moved; payloads become new nodes. Afterwards the
    parent, its ancestors and every new subtree are recomputed.

    Args:
        tree: The store receiving the nodes.
        parent: The new parent, or None for root level.
        items: A payload, a node, or a list of them.
    """
    from .node import TreeModelNode

    items = _as_list(items)
    if not items:
        return
    with tree.batch():
        created = []
        for item in items:
            if isinstance(item, TreeModelNode):
                move(tree, item, parent)
                continue
            node = TreeModelNode(tree, tree.coerce_payload(item), parent)
            siblings = _sibling_list(tree, parent)
            siblings.append(node)
            created.append(node)
            tree.on_node_inserted(node, len(siblings) - 1)
        tree.reflow(parent)
        if parent is not None:
            propagation.update_related(parent)
        else:
            for node in created:
                propagation.update_related(node)
            for sibling in tree.children:
                propagation.update(sibling)


def move(
    tree: TreeModelStore,
    node: TreeModelNode,
    new_parent: TreeModelNode | None,
    index: int | None = None,
) -> bool:
    """Move node under new_parent at index (append when index is None).

    The node keeps its subtree and the expanded state of the subtree;
    checked and activated entries are dropped, so the moved nodes are only
    checked if they derive it from their new ancestors.

    Args:
        tree: The destination store (may differ from node.tree).
        node: The node to move.
        new_parent: The new parent, or None for the root list of tree.
        index: Position among the new siblings.

    Returns:
        True if the node was moved, False for a refused no-op.
    """
    if new_parent is not None:
        chain = [new_parent] + new_parent.get_parents()
        if any(item.value == node.value for item in chain):
            logger.debug("Refused to move %r into its own subtree", node.value)
            return False

    source = node.tree
    attached = source.is_attached(node)
    old_index = node.get_index() if attached else -1
    same_list = attached and source is tree and node.parent is new_parent

    if same_list:
        # index counts the siblings before the move; map it past the removal
        count = len(node.get_siblings())
        if index is None:
            position = count - 1
        else:
            position = index + count if index < 0 else index
            if old_index < position:
                position -= 1
            position = max(0, min(position, count - 1))
        if position == old_index:
            return False
        if index is not None:
            index = position

    with tree.batch():
        if attached:
            remove(source, node)

        node.set_parent(new_parent)
        siblings = _sibling_list(tree, new_parent)
        if index is None:
            siblings.append(node)
            position = len(siblings) - 1
        else:
            siblings.insert(index, node)
            position = siblings.index(node)

        for item in node.walk():
            item.tree = tree
            tree.register(item)
            if item.expanded:
                tree.expanded_set.add(item.value)

        tree.on_node_inserted(node, position)

        scope = new_parent.walk() if new_parent is not None else list(tree.walk())
        for item in scope:
            propagation.update(item)
            propagation.update_checked(item)
        if new_parent is not None:
            propagation.update_parents(new_parent)
        tree.reflow()
    return True


def insert(
    tree: TreeModelStore,
    anchor: TreeModelNode,
    item: Any,
    index: int | None = None,
) -> None:
    """Insert item among the siblings of anchor.

    Args:
        tree: The store of anchor.
        anchor: The node whose sibling list receives the item.
        item: A payload or an existing node (moved).
        index: Position in the sibling list; None appends.
    """
    from .node import TreeModelNode

    parent = anchor.parent
    if isinstance(item, TreeModelNode):
        move(tree, item, parent, index)
        return
    if item is None:
        return
    with tree.batch():
        node = TreeModelNode(tree, tree.coerce_payload(item), parent)
        siblings = anchor.get_siblings()
        if index is None:
            siblings.append(node)
        else:
            siblings.insert(index, node)
        tree.on_node_inserted(node, node.get_index())
        for sibling in siblings:
            propagation.update(sibling)
        propagation.update_related(node)
        tree.reflow()


def insert_before(tree: TreeModelStore, anchor: TreeModelNode, item: Any) -> None:
    insert(tree, anchor, item, anchor.get_index())


def insert_after(tree: TreeModelStore, anchor: TreeModelNode, item: Any) -> None:
    insert(tree, anchor, item, anchor.get_index() + 1)


def remove(tree: TreeModelStore, node: TreeModelNode) -> None:
    """Detach node and its subtree from tree.

    Every identity of the subtree leaves the node index and the four state
    sets. The removed nodes keep their cached flags and node keeps its
    parent reference, so they stay inspectable.
    """
    if not tree.is_attached(node):
        return
    with tree.batch():
        nodes = node.walk()
        siblings = node.get_siblings()
        index = node.get_index()
        if index >= 0:
            del siblings[index]
        for item in nodes:
            tree.clean(item)
        for sibling in siblings:
            propagation.update(sibling)
        propagation.update_parents(node)
        tree.on_node_deleted(node, index)
        tree.reflow()
