# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Checked and indeterminate state.

Outside strict mode a node is checked when it has an explicit entry, when
all its children are checked, or (for nodes without loaded children) when
an ancestor has an explicit entry. Checking a node writes its whole subtree
and drops the explicit entries of its ancestors, whose state is then
derived again from their children.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .. import propagation

if TYPE_CHECKING:
    from ..node import TreeModelNode


def is_checked(node: TreeModelNode, checked_set: set[Any] | None = None) -> bool:
    """Return the derived checked state of node.

    Args:
        node: The node to evaluate.
        checked_set: Hypothetical checked set; the live one if None.
    """
    tree = node.tree
    checked = tree.checked_set if checked_set is None else checked_set
    if not tree.is_attached(node):
        return False
    if node.value in checked:
        return True
    if tree.config.check_strictly:
        return False
    children = node.children
    if isinstance(children, list) and children:
        return all(is_checked(child, checked) for child in children)
    # no loaded children: a checked ancestor implies this node
    return any(parent.value in checked for parent in node.get_parents())


def is_indeterminate(node: TreeModelNode) -> bool:
    """True if the descendants of node do not share the same checked state."""
    children = node.children
    if not isinstance(children, list):
        return False
    first_state = None
    for child in children:
        if is_indeterminate(child):
            return True
        state = is_checked(child)
        if first_state is None:
            first_state = state
        elif state != first_state:
            return True
    return False


def _apply(node: TreeModelNode, checked: bool, target: set[Any]) -> bool:
    if not node.is_checkable() or checked == is_checked(node):
        return False
    if node.tree.config.check_strictly:
        affected = [node]
    else:
        affected = node.walk()
        for parent in node.get_parents():
            target.discard(parent.value)
    for item in affected:
        if checked:
            target.add(item.value)
        else:
            target.discard(item.value)
    return True


def preview_checked(node: TreeModelNode, checked: bool) -> set[Any]:
    """Return the checked set that setting node to checked would produce.

    The live set is not touched.
    """
    target = set(node.tree.checked_set)
    _apply(node, checked, target)
    return target


def set_checked(node: TreeModelNode, checked: bool) -> list[Any]:
    """Set the checked state of node and propagate it.

    No-op if the node is not checkable or already has the requested state.

    Returns:
        The checked identities of the store after the change.
    """
    tree = node.tree
    with tree.batch():
        if _apply(node, checked, tree.checked_set):
            if tree.config.check_strictly:
                propagation.update_checked(node)
            else:
                for related in tree.get_related_nodes([node.value]):
                    propagation.update_checked(related)
    return tree.get_checked()
