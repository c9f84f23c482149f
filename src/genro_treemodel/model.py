# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Read-only node view handed to filters and external collaborators."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .node import TreeModelNode


class TreeNodeModel:
    """A snapshot of a node's state plus its public accessors.

    The state attributes are copied from the node's cached flags when the
    model is built. Accessors and the append/insert helpers act on the
    live node.

    Attributes:
        value: Node identity.
        label: Node label.
        data: Node payload.
        activated, expanded, checked, indeterminate, loading: Cached flags.
    """

    __slots__ = (
        '_node', 'value', 'label', 'data', 'activated', 'expanded',
        'checked', 'indeterminate', 'loading',
    )

    def __init__(self, node: TreeModelNode) -> None:
        self._node = node
        self.value = node.value
        self.label = node.label
        self.data = node.data
        self.activated = node.activated
        self.expanded = node.expanded
        self.checked = node.checked
        self.indeterminate = node.indeterminate
        self.loading = node.loading

    def __repr__(self) -> str:
        return f"TreeNodeModel({self.value!r}, label={self.label!r})"

    def get_path_data(self) -> list[dict[str, Any]]:
        return self._node.get_path_data()

    def get_parent_data(self) -> dict[str, Any] | None:
        return self._node.get_parent_data()

    def get_parents_data(self) -> list[dict[str, Any]]:
        return self._node.get_parents_data()

    def get_root_data(self) -> dict[str, Any]:
        return self._node.get_root_data()

    def get_siblings_data(self) -> list[dict[str, Any]]:
        return self._node.get_siblings_data()

    def get_index(self) -> int:
        return self._node.get_index()

    def get_level(self) -> int:
        return self._node.get_level()

    def is_first(self) -> bool:
        return self._node.is_first()

    def is_last(self) -> bool:
        return self._node.is_last()

    def is_leaf(self) -> bool:
        return self._node.is_leaf()

    def append_data(self, data: Any) -> None:
        self._node.append(data)

    def insert_before(self, data: Any) -> None:
        self._node.insert_before(data)

    def insert_after(self, data: Any) -> None:
        self._node.insert_after(data)
