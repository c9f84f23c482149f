# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Children markers and lazy loader states."""

from __future__ import annotations

from enum import Enum


class ChildState(Enum):
    """Children marker for nodes that do not hold a loaded child list.

    A node's children attribute is either a list of nodes (loaded), or one
    of these markers:
    - UNLOADED: the node has children that have not been fetched yet
    - NO_CHILDREN: the node is a leaf
    """

    UNLOADED = 'unloaded'
    NO_CHILDREN = 'no_children'


class LoadState(Enum):
    """Lazy loader state of a node, derived from children and loading."""

    UNLOADED = 'unloaded'
    LOADING = 'loading'
    LOADED = 'loaded'
    NO_CHILDREN = 'no_children'
