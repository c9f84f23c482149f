# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeModelStore package - the tree state container.

The package is organized into:
- core: TreeModelStore with node index, state sets and bulk operations
- loading: Payload normalization for sources
- subscription: Event subscription and notification system

Example:
    >>> from genro_treemodel import TreeModelStore
    >>> store = TreeModelStore([{'value': 'a', 'children': [{'value': 'b'}]}],
    ...                        checkable=True)
    >>> store.get_node('b').set_checked(True)
    ['a', 'b']
"""

from .core import TreeModelStore

__all__ = ["TreeModelStore"]
