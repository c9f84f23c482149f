# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Activated (highlighted) state."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .. import propagation

if TYPE_CHECKING:
    from ..node import TreeModelNode


def is_activated(node: TreeModelNode, activated_set: set[Any] | None = None) -> bool:
    tree = node.tree
    activated = tree.activated_set if activated_set is None else activated_set
    return tree.is_attached(node) and node.value in activated


def _apply(node: TreeModelNode, activated: bool, target: set[Any]) -> list[Any]:
    """Apply the change to target and return the identities it dropped."""
    if not node.is_activable():
        return []
    if not activated:
        target.discard(node.value)
        return []
    dropped = []
    if not node.tree.config.active_multiple:
        dropped = [value for value in target if value != node.value]
        target.clear()
    target.add(node.value)
    return dropped


def preview_activated(node: TreeModelNode, activated: bool) -> set[Any]:
    target = set(node.tree.activated_set)
    _apply(node, activated, target)
    return target


def set_activated(node: TreeModelNode, activated: bool) -> list[Any]:
    """Set the activated state of node.

    In single activation mode, activating a node deactivates every other
    node. Activation does not cascade to ancestors or descendants.

    Returns:
        The activated identities of the store after the change.
    """
    tree = node.tree
    with tree.batch():
        dropped = _apply(node, activated, tree.activated_set)
        propagation.update(node)
        for value in dropped:
            other = tree.nodes_index.get(value)
            if other is not None:
                propagation.update(other)
    return tree.get_activated()
