# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Recompute routines for the cached node flags.

The store's state sets are the only stored truth; every boolean on a node
is a cache. After a structural edit or a state change the operators call
these functions over the closure of nodes whose derived state may have
moved:

- update: position flags, level, activated, expanded, visible
- update_checked: checked and indeterminate (writes derived checked back)
- update_children: descendants, top-down, self excluded
- update_parents: ancestors, nearest first, self excluded
- update_related: ancestors and the whole subtree, then a reflow
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .state import activated as activated_state
from .state import checked as checked_state
from .state import expanded as expanded_state
from .state import visibility

if TYPE_CHECKING:
    from .node import TreeModelNode


def update(node: TreeModelNode) -> None:
    """Recompute the view flags of a single node."""
    node.first = node.is_first()
    node.last = node.is_last()
    node.leaf = node.is_leaf()
    node.level = node.get_level()
    node.activated = activated_state.is_activated(node)
    node.expanded = expanded_state.is_expanded(node)
    node.visible = visibility.get_visible(node)
    node.tree.updated(node)


def update_checked(node: TreeModelNode) -> None:
    """Recompute checked and indeterminate of a single node.

    A node that derives to checked gets an explicit entry, so the checked
    set always contains every checked node after a recompute.
    """
    tree = node.tree
    node.check_enabled = node.is_checkable()
    if not node.check_enabled:
        return
    node.checked = checked_state.is_checked(node)
    if node.checked:
        tree.checked_set.add(node.value)
    node.indeterminate = checked_state.is_indeterminate(node)
    tree.updated(node)


def update_children(node: TreeModelNode) -> None:
    if not isinstance(node.children, list):
        return
    for child in node.children:
        update(child)
        update_checked(child)
        update_children(child)


def update_parents(node: TreeModelNode) -> None:
    parent = node.parent
    if parent is not None:
        update(parent)
        update_checked(parent)
        update_parents(parent)


def update_related(node: TreeModelNode) -> None:
    tree = node.tree
    with tree.batch():
        for related in tree.get_related_nodes([node.value]):
            update(related)
            update_checked(related)
        tree.reflow()
