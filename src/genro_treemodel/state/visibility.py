# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Visibility through the expansion chain or the filter predicate."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .expanded import is_expanded

if TYPE_CHECKING:
    from ..node import TreeModelNode


def get_visible(node: TreeModelNode) -> bool:
    """Return whether node is visible.

    A node is visible when every ancestor is expanded, or when it matches
    the configured filter. The filter is evaluated on every call and its
    outcome recorded in the store's filter set.
    """
    tree = node.tree
    if not tree.is_attached(node):
        return False
    expand_visible = all(is_expanded(parent) for parent in node.get_parents())
    filter_visible = False
    config = tree.config
    if config.has_filter:
        filter_visible = bool(config.filter(node.get_model()))
        if filter_visible:
            tree.filter_set.add(node.value)
        else:
            tree.filter_set.discard(node.value)
    return expand_visible or filter_visible
