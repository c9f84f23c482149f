# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Expanded state with sibling mutex.

When the governing node of a sibling group has expand mutex enabled,
expanding one sibling collapses the others. The governing node is the
parent, or the node itself at root level. With ``expand_parent`` the
ancestors are expanded too, each one applying its own mutex, from the
node up to the root.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .. import loader, propagation
from ..children import ChildState

if TYPE_CHECKING:
    from ..node import TreeModelNode


def is_expanded(node: TreeModelNode, expanded_set: set[Any] | None = None) -> bool:
    tree = node.tree
    expanded = tree.expanded_set if expanded_set is None else expanded_set
    return tree.is_attached(node) and node.value in expanded


def _governed_by_mutex(node: TreeModelNode) -> bool:
    parent = node.parent
    if parent is not None:
        return parent.is_expand_mutex()
    return node.is_expand_mutex()


def _apply(node: TreeModelNode, expanded: bool, target: set[Any]) -> list[TreeModelNode]:
    """Apply the change to target and return the nodes whose flag changed."""
    if not expanded:
        target.discard(node.value)
        return [node]
    candidates = [node]
    if node.tree.config.expand_parent:
        candidates.extend(node.get_parents())
    touched = []
    for candidate in candidates:
        if _governed_by_mutex(candidate):
            for sibling in candidate.get_siblings():
                if sibling is not candidate and sibling.value in target:
                    target.discard(sibling.value)
                    touched.append(sibling)
        target.add(candidate.value)
        touched.append(candidate)
    return touched


def preview_expanded(node: TreeModelNode, expanded: bool) -> set[Any]:
    target = set(node.tree.expanded_set)
    _apply(node, expanded, target)
    return target


def set_expanded(node: TreeModelNode, expanded: bool) -> list[Any]:
    """Set the expanded state of node and refresh what it reveals.

    Expanding a node whose children are unloaded starts the lazy loader.

    Returns:
        The expanded identities of the store after the change.
    """
    tree = node.tree
    with tree.batch():
        touched = _apply(node, expanded, tree.expanded_set)
        propagation.update(node)
        if node.expanded and node.children is ChildState.UNLOADED:
            loader.schedule_load(node)
        # ancestors first, so descendants read settled flags
        for item in sorted(touched, key=lambda n: n.get_level()):
            propagation.update(item)
            propagation.update_children(item)
    return tree.get_expanded()
