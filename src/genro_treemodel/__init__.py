# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeModel - Tree state engine for hierarchical views.

A lightweight, zero-dependency library keeping a mutable tree and its
checked, expanded, activated and filter-matched state consistent under
structural edits and lazy loading of subtrees.
"""

__version__ = "0.1.0"

from .children import ChildState, LoadState
from .config import LoadErrorPolicy, TreeConfig, TreeKeys, ValueMode
from .exceptions import LoadError, NodeNotFoundError, TreeModelError
from .model import TreeNodeModel
from .node import TreeModelNode
from .store import TreeModelStore

__all__ = [
    # Core classes
    "TreeModelStore",
    "TreeModelNode",
    "TreeNodeModel",
    # Configuration
    "TreeConfig",
    "TreeKeys",
    "ValueMode",
    "LoadErrorPolicy",
    # Children markers
    "ChildState",
    "LoadState",
    # Exceptions
    "TreeModelError",
    "NodeNotFoundError",
    "LoadError",
]
