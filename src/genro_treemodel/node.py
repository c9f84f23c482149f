# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeModel node classes."""

from __future__ import annotations

import weakref
from typing import Any, Iterator, TYPE_CHECKING

from . import loader, mutation, propagation
from .children import ChildState, LoadState
from .state import activated as activated_state
from .state import checked as checked_state
from .state import expanded as expanded_state
from .state.visibility import get_visible

if TYPE_CHECKING:
    from .model import TreeNodeModel
    from .store import TreeModelStore


class TreeModelNode:
    """A node in a TreeModelStore hierarchy.

    Each node has:
    - value: Identity, unique within the store (payload or generated)
    - label: Display text
    - data: The payload the node was built from
    - parent: Weak reference to the parent node (None at root level)
    - children: A list of nodes, ChildState.UNLOADED or ChildState.NO_CHILDREN

    The boolean attributes first, last, leaf, checked, expanded, activated,
    indeterminate and visible are caches recomputed by the propagation
    functions; the store's state sets are the authority.

    Example:
        >>> store = TreeModelStore([{'value': 'a', 'children': [{'value': 'b'}]}])
        >>> node = store.get_node('b')
        >>> node.get_parent().value
        'a'
    """

    __slots__ = (
        'tree', 'value', 'label', 'data', '_parent', 'children',
        'expand_mutex', 'activable', 'checkable', 'disabled', 'draggable',
        'loading', 'first', 'last', 'leaf', 'level', 'check_enabled',
        'checked', 'expanded', 'activated', 'indeterminate', 'visible',
        '__weakref__',
    )

    def __init__(
        self,
        tree: TreeModelStore,
        data: dict[str, Any] | None = None,
        parent: TreeModelNode | None = None,
    ) -> None:
        """Initialize a TreeModelNode and register it in the store.

        Args:
            tree: The owning store.
            data: Node payload. Keys are read through ``tree.config.keys``;
                the behaviour overrides are read from 'expand_mutex',
                'activable', 'checkable', 'disabled', 'draggable', and the
                initial state from 'checked', 'expanded', 'activated'.
            parent: The parent node, or None for a root-level node.
        """
        payload = data if data is not None else {}
        config = tree.config
        keys = config.keys
        children = payload.get(keys.children)

        self.tree = tree
        self.data = payload
        self.children: list[TreeModelNode] | ChildState = ChildState.NO_CHILDREN
        self.check_enabled = False
        self.first = False
        self.last = False
        self.leaf = False
        self.indeterminate = False

        self.expand_mutex = bool(payload.get('expand_mutex', False))
        self.activable = bool(payload.get('activable', False))
        self.checkable = bool(payload.get('checkable', False))
        self.disabled = bool(payload.get('disabled', False))
        self.draggable = bool(payload.get('draggable', False))
        self.loading = False

        self.label = payload.get(keys.label) or ''
        value = payload.get(keys.value)
        self.value = value if value not in (None, '') else tree.generate_id()
        tree.register(self)

        self._parent = weakref.ref(parent) if parent is not None else None

        # must be set before the initial state: expansion reads it
        if children is True:
            self.children = ChildState.UNLOADED

        self.level = 0
        self.visible = True

        self.activated = bool(payload.get('activated', False))
        self._init_activated()
        self.expanded = bool(payload.get('expanded', False))
        self._init_expanded()
        self.checked = bool(payload.get('checked', False))
        self._init_checked()

        propagation.update(self)
        tree.reflow(self)

        # children read their parent's state, so they come last
        if isinstance(children, (list, tuple)):
            self.append(list(children))
        elif children is True and not config.lazy:
            loader.schedule_load(self)

        self.checked = False
        self.indeterminate = False
        propagation.update_checked(self)

    def __repr__(self) -> str:
        if isinstance(self.children, list):
            children_repr = f"[{len(self.children)}]"
        else:
            children_repr = self.children.name
        return f"TreeModelNode({self.value!r}, label={self.label!r}, children={children_repr})"

    # ==================== Initial State ====================

    def _init_activated(self) -> None:
        if self.activated:
            self.tree.activated_set.add(self.value)

    def _init_expanded(self) -> None:
        tree = self.tree
        config = tree.config
        expanded = self.expanded
        if isinstance(config.expand_level, int) and self.get_level() < config.expand_level:
            expanded = True
        if config.expand_all:
            expanded = True
        if self.children is ChildState.UNLOADED and config.lazy:
            expanded = False
        if expanded:
            tree.expanded_set.add(self.value)
        else:
            tree.expanded_set.discard(self.value)
        self.expanded = expanded

    def _init_checked(self) -> None:
        tree = self.tree
        checked = self.checked and self.is_checkable()
        parent = self.parent
        if not tree.config.check_strictly and parent is not None:
            checked = checked or parent.value in tree.checked_set
        if checked:
            tree.checked_set.add(self.value)
        self.checked = checked

    # ==================== Structure ====================

    @property
    def parent(self) -> TreeModelNode | None:
        """The parent node, or None for a root-level node."""
        return self._parent() if self._parent is not None else None

    def set_parent(self, parent: TreeModelNode | None) -> None:
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def load_state(self) -> LoadState:
        """Current lazy loader state."""
        if self.loading:
            return LoadState.LOADING
        if isinstance(self.children, list):
            return LoadState.LOADED
        if self.children is ChildState.UNLOADED:
            return LoadState.UNLOADED
        return LoadState.NO_CHILDREN

    def get_parent(self) -> TreeModelNode | None:
        return self.parent

    def get_parents(self) -> list[TreeModelNode]:
        """Return all ancestors, nearest first."""
        parents = []
        node = self.parent
        while node is not None:
            parents.append(node)
            node = node.parent
        return parents

    def get_siblings(self) -> list[TreeModelNode]:
        """Return the sibling list this node lives in, itself included.

        This is the live list: the parent's children, or the store's root
        list for a root-level node.
        """
        parent = self.parent
        if parent is not None:
            return parent.children if isinstance(parent.children, list) else []
        return self.tree.children

    def get_root(self) -> TreeModelNode:
        """Return the root-level ancestor (self for a root-level node)."""
        parents = self.get_parents()
        return parents[-1] if parents else self

    def get_index(self) -> int:
        """Return the position among siblings, or -1 if detached."""
        for index, sibling in enumerate(self.get_siblings()):
            if sibling is self:
                return index
        return -1

    def get_path(self) -> list[TreeModelNode]:
        """Return the nodes from the root down to this node."""
        path = self.get_parents()
        path.reverse()
        path.append(self)
        return path

    def get_level(self) -> int:
        return len(self.get_parents())

    def iter_walk(self) -> Iterator[TreeModelNode]:
        """Yield this node and all its descendants depth-first."""
        yield self
        if isinstance(self.children, list):
            for child in self.children:
                yield from child.iter_walk()

    def walk(self) -> list[TreeModelNode]:
        """Return this node and all its descendants depth-first."""
        return list(self.iter_walk())

    # ==================== Payload Accessors ====================

    def get_path_data(self) -> list[dict[str, Any]]:
        return [node.data for node in self.get_path()]

    def get_parent_data(self) -> dict[str, Any] | None:
        parent = self.parent
        return parent.data if parent is not None else None

    def get_parents_data(self) -> list[dict[str, Any]]:
        return [node.data for node in self.get_parents()]

    def get_root_data(self) -> dict[str, Any]:
        return self.get_root().data

    def get_siblings_data(self) -> list[dict[str, Any]]:
        return [node.data for node in self.get_siblings()]

    def get_model(self) -> TreeNodeModel:
        """Return the read-only view handed to filters and subscribers."""
        from .model import TreeNodeModel
        return TreeNodeModel(self)

    # ==================== Predicates ====================

    def is_first(self) -> bool:
        siblings = self.get_siblings()
        return bool(siblings) and siblings[0] is self

    def is_last(self) -> bool:
        siblings = self.get_siblings()
        return bool(siblings) and siblings[-1] is self

    def is_leaf(self) -> bool:
        """True if the node has no children and none are pending."""
        if isinstance(self.children, list):
            return len(self.children) == 0
        return self.children is ChildState.NO_CHILDREN

    def is_disabled(self) -> bool:
        return self.tree.config.disabled or self.disabled

    def is_expand_mutex(self) -> bool:
        return self.tree.config.expand_mutex or self.expand_mutex

    def is_activable(self) -> bool:
        return self.tree.config.activable or self.activable

    def is_checkable(self) -> bool:
        return self.tree.config.checkable or self.checkable

    def is_draggable(self) -> bool:
        return self.tree.config.draggable or self.draggable

    def is_checked(self, checked_set: set[Any] | None = None) -> bool:
        return checked_state.is_checked(self, checked_set)

    def is_indeterminate(self) -> bool:
        return checked_state.is_indeterminate(self)

    def is_expanded(self, expanded_set: set[Any] | None = None) -> bool:
        return expanded_state.is_expanded(self, expanded_set)

    def is_activated(self, activated_set: set[Any] | None = None) -> bool:
        return activated_state.is_activated(self, activated_set)

    def get_visible(self) -> bool:
        return get_visible(self)

    # ==================== State Toggles ====================

    def preview_checked(self, checked: bool) -> list[Any]:
        """Return the checked identities that set_checked would produce."""
        return self.tree.get_checked(checked_state.preview_checked(self, checked))

    def set_checked(self, checked: bool) -> list[Any]:
        """Commit a checked state change and return the checked identities."""
        return checked_state.set_checked(self, checked)

    def toggle_checked(self) -> list[Any]:
        return self.set_checked(not self.is_checked())

    def preview_expanded(self, expanded: bool) -> list[Any]:
        return self.tree.get_expanded(expanded_state.preview_expanded(self, expanded))

    def set_expanded(self, expanded: bool) -> list[Any]:
        return expanded_state.set_expanded(self, expanded)

    def toggle_expanded(self) -> list[Any]:
        return self.set_expanded(not self.is_expanded())

    def preview_activated(self, activated: bool) -> list[Any]:
        return self.tree.get_activated(activated_state.preview_activated(self, activated))

    def set_activated(self, activated: bool) -> list[Any]:
        return activated_state.set_activated(self, activated)

    def toggle_activated(self) -> list[Any]:
        return self.set_activated(not self.is_activated())

    def set(
        self,
        *,
        label: str | None = None,
        disabled: bool | None = None,
        checkable: bool | None = None,
        draggable: bool | None = None,
        expand_mutex: bool | None = None,
        activable: bool | None = None,
        checked: bool | None = None,
        expanded: bool | None = None,
        activated: bool | None = None,
        loading: bool | None = None,
    ) -> None:
        """Update the mutable fields of the node.

        Arguments left to None are not touched. checked, expanded and
        activated are committed through set_checked, set_expanded and
        set_activated, so they follow the same rules and propagation.
        """
        with self.tree.batch():
            if label is not None:
                self.label = label
            if disabled is not None:
                self.disabled = disabled
            if checkable is not None:
                self.checkable = checkable
            if draggable is not None:
                self.draggable = draggable
            if expand_mutex is not None:
                self.expand_mutex = expand_mutex
            if activable is not None:
                self.activable = activable
            if loading is not None:
                self.loading = loading
            if checked is not None:
                self.set_checked(checked)
            if expanded is not None:
                self.set_expanded(expanded)
            if activated is not None:
                self.set_activated(activated)
            propagation.update(self)
            propagation.update_checked(self)

    # ==================== Mutations ====================

    def append(self, data: Any) -> None:
        """Append payload(s) or existing node(s) as children of this node."""
        mutation.append_nodes(self.tree, self, data)

    def append_to(
        self,
        tree: TreeModelStore,
        parent: TreeModelNode | None = None,
        index: int | None = None,
    ) -> bool:
        """Move this node under parent (None for the root list of tree)."""
        return mutation.move(tree, self, parent, index)

    def insert(self, item: Any, index: int | None = None) -> None:
        """Insert a sibling at index (append when index is None)."""
        mutation.insert(self.tree, self, item, index)

    def insert_before(self, item: Any) -> None:
        mutation.insert_before(self.tree, self, item)

    def insert_after(self, item: Any) -> None:
        mutation.insert_after(self.tree, self, item)

    def remove(self) -> None:
        """Detach this node and its subtree from the store."""
        mutation.remove(self.tree, self)

    async def load_children(self) -> None:
        """Fetch unloaded children through the configured load function."""
        await loader.load_children(self)

    # ==================== Recompute ====================

    def update(self) -> None:
        propagation.update(self)

    def update_checked(self) -> None:
        propagation.update_checked(self)

    def update_children(self) -> None:
        propagation.update_children(self)

    def update_parents(self) -> None:
        propagation.update_parents(self)

    def update_related(self) -> None:
        propagation.update_related(self)
