# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeModelStore - tree structure with checked, expanded, activated and
filter state.

This module provides the TreeModelStore class, the context owning a tree
of TreeModelNode instances. The store holds the authoritative facts:

    - **Node index**: identity -> node; a node is attached iff indexed
    - **State sets**: checked, expanded, activated and filter-matched
      identities (presence means True)
    - **Root list**: the ordered top-level nodes
    - **Config**: a TreeConfig with the tree-wide options

Every boolean stored on a node is a cache derived from these facts and
recomputed by the propagation functions after each operation.

Change notification:
    Operators run inside ``batch()``. When the outermost batch closes the
    store rebuilds its flat node list (``reflow``) and notifies the
    subscribers of the nodes whose flags were recomputed (``update``).

Example:
    Basic usage::

        store = TreeModelStore([
            {'value': 'fruit', 'children': [
                {'value': 'apple'},
                {'value': 'pear'},
            ]},
        ], checkable=True)

        store.get_node('apple').set_checked(True)
        store.get_node('fruit').indeterminate   # True
        store.get_checked()                     # ['apple']
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TYPE_CHECKING

from .. import mutation, propagation
from ..config import TreeConfig, ValueMode
from ..exceptions import NodeNotFoundError
from ..node import TreeModelNode
from .loading import coerce_payload, export_payload, items_from_source
from .subscription import SubscriptionMixin

if TYPE_CHECKING:
    from ..model import TreeNodeModel

logger = logging.getLogger(__name__)

_id_counter = itertools.count(1)


class TreeModelStore(SubscriptionMixin):
    """A tree of TreeModelNode with four state projections.

    Attributes:
        config: The TreeConfig of the tree.
        children: The ordered root-level nodes.
        nodes_index: identity -> attached node.
        checked_set: Identities explicitly (or derivedly, after a
            recompute) checked.
        expanded_set: Identities of expanded nodes.
        activated_set: Identities of activated nodes.
        filter_set: Identities matching the current filter.

    Example:
        >>> store = TreeModelStore([{'value': 'a'}, {'value': 'b'}], activable=True)
        >>> store.get_node('a').set_activated(True)
        ['a']
    """

    __slots__ = (
        'config', 'children', 'nodes_index',
        'checked_set', 'expanded_set', 'activated_set', 'filter_set',
        '_flat', '_flat_stale', '_should_reflow', '_updated', '_batch_depth',
        '_load_tasks', '_subscribers',
    )

    def __init__(
        self,
        source: list | dict | TreeModelStore | None = None,
        config: TreeConfig | None = None,
        **options: Any,
    ) -> None:
        """Initialize a TreeModelStore.

        Args:
            source: Optional initial data. Can be:
                - list: payload dicts for the root-level nodes
                - dict: a single root-level payload
                - TreeModelStore: copy of another store's structure
            config: Optional TreeConfig. Keyword options are applied on
                top of it (or on a fresh TreeConfig).
            **options: TreeConfig options (checkable=True, lazy=True, ...).

        Example:
            >>> TreeModelStore([{'label': 'a', 'children': True}], lazy=True, load=fetch)
            >>> TreeModelStore(other_store)  # copy
        """
        self.config = config if config is not None else TreeConfig()
        if options:
            self.config.update(**options)
        self.children: list[TreeModelNode] = []
        self.nodes_index: dict[Any, TreeModelNode] = {}
        self.checked_set: set[Any] = set()
        self.expanded_set: set[Any] = set()
        self.activated_set: set[Any] = set()
        self.filter_set: set[Any] = set()
        self._flat: list[TreeModelNode] = []
        self._flat_stale = False
        self._should_reflow = False
        self._updated: dict[Any, TreeModelNode] = {}
        self._batch_depth = 0
        self._load_tasks: set[asyncio.Task] = set()
        self._init_subscribers()

        if source is not None:
            self.append(items_from_source(source))

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"TreeModelStore({[node.value for node in self.children]})"

    def __len__(self) -> int:
        """Return the number of attached nodes."""
        return len(self.nodes_index)

    def __iter__(self) -> Iterator[TreeModelNode]:
        """Iterate over root-level nodes in order."""
        return iter(self.children)

    def __contains__(self, value: Any) -> bool:
        """Check whether an identity names an attached node."""
        return value in self.nodes_index

    # ==================== Registration ====================

    def generate_id(self) -> Any:
        """Return a fresh identity for a payload without one."""
        if self.config.id_factory is not None:
            return self.config.id_factory()
        return f"{self.config.prefix}{next(_id_counter)}"

    def coerce_payload(self, item: Any) -> Any:
        return coerce_payload(item)

    def register(self, node: TreeModelNode) -> None:
        """Add node to the index under its identity."""
        current = self.nodes_index.get(node.value)
        if current is not None and current is not node:
            logger.warning("Identity %r reused, replacing the indexed node", node.value)
        self.nodes_index[node.value] = node

    def clean(self, node: TreeModelNode) -> None:
        """Drop node's identity from the index and every state set."""
        value = node.value
        self.activated_set.discard(value)
        self.checked_set.discard(value)
        self.expanded_set.discard(value)
        self.filter_set.discard(value)
        if self.nodes_index.get(value) is node:
            del self.nodes_index[value]

    def is_attached(self, node: TreeModelNode) -> bool:
        return self.nodes_index.get(node.value) is node

    def track_load(self, task: asyncio.Task) -> None:
        self._load_tasks.add(task)
        task.add_done_callback(self._load_tasks.discard)

    async def wait_loaded(self) -> None:
        """Wait until every scheduled children load has finished.

        Loads started by other loads (nested non-lazy children) are
        awaited too.

        Raises:
            LoadError: If a load failed under the RAISE policy.
        """
        while self._load_tasks:
            await asyncio.gather(*list(self._load_tasks))

    # ==================== Change Notification ====================

    @contextmanager
    def batch(self) -> Iterator[TreeModelStore]:
        """Defer reflow and update notifications until the outermost exit.

        Example:
            >>> with store.batch():
            ...     store.append({'value': 'x'})
            ...     store.get_node('x').set_expanded(True)
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush()

    def reflow(self, node: TreeModelNode | None = None) -> None:
        """Mark the flat node list for rebuild."""
        self._flat_stale = True
        self._should_reflow = True
        if node is not None:
            self.updated(node)
        elif self._batch_depth == 0:
            self._flush()

    def updated(self, node: TreeModelNode) -> None:
        """Record node as changed for the next update notification."""
        self._updated[node.value] = node
        if self._batch_depth == 0:
            self._flush()

    def _flush(self) -> None:
        if self._should_reflow:
            self._should_reflow = False
            self._rebuild_flat()
            self.emit('reflow', nodes=list(self._flat))
        if self._updated:
            nodes = list(self._updated.values())
            self._updated = {}
            self.emit('update', nodes=nodes)

    def _rebuild_flat(self) -> None:
        if self._flat_stale:
            self._flat_stale = False
            self._flat = list(self.walk())

    def on_node_inserted(self, node: TreeModelNode, index: int) -> None:
        self.emit('insert', node=node, index=index)

    def on_node_deleted(self, node: TreeModelNode, index: int) -> None:
        self.emit('delete', node=node, index=index)

    # ==================== Navigation ====================

    def walk(self) -> Iterator[TreeModelNode]:
        """Yield every attached node depth-first, in tree order."""
        for node in self.children:
            yield from node.iter_walk()

    @property
    def nodes(self) -> list[TreeModelNode]:
        """The flat list of attached nodes in tree order."""
        self._rebuild_flat()
        return list(self._flat)

    @property
    def visible_nodes(self) -> list[TreeModelNode]:
        """Attached nodes whose cached visible flag is set, in tree order."""
        return [node for node in self.nodes if node.visible]

    def get_node(self, item: Any) -> TreeModelNode | None:
        """Return the attached node for an identity or a node, else None."""
        if isinstance(item, TreeModelNode):
            item = item.value
        return self.nodes_index.get(item)

    def _require(self, item: Any) -> TreeModelNode:
        node = self.get_node(item)
        if node is None:
            raise NodeNotFoundError(f"Node {item!r} not found")
        return node

    def get_nodes(
        self,
        item: Any = None,
        level: int | None = None,
        filter: Callable[[TreeNodeModel], bool] | None = None,
        props: dict[str, Any] | None = None,
    ) -> list[TreeModelNode]:
        """Return nodes in tree order, optionally narrowed.

        Args:
            item: Identity or node; if given, only its subtree (itself
                included). An unknown identity gives an empty list.
            level: Keep nodes whose level is at most this value.
            filter: Keep nodes whose model satisfies this predicate.
            props: Keep nodes whose attributes equal these values,
                e.g. ``{'checked': True}``.
        """
        if item is None:
            nodes = self.nodes
        else:
            node = self.get_node(item)
            nodes = node.walk() if node is not None else []
        if level is not None:
            nodes = [node for node in nodes if node.level <= level]
        if filter is not None:
            nodes = [node for node in nodes if filter(node.get_model())]
        if props:
            nodes = [
                node for node in nodes
                if all(getattr(node, key, None) == value for key, value in props.items())
            ]
        return nodes

    def get_index(self, item: Any) -> int:
        """Return the sibling position of a node, or -1 if not attached."""
        node = self.get_node(item)
        return node.get_index() if node is not None else -1

    def get_parent(self, item: Any) -> TreeModelNode | None:
        node = self.get_node(item)
        return node.parent if node is not None else None

    def get_parents(self, item: Any) -> list[TreeModelNode]:
        node = self.get_node(item)
        return node.get_parents() if node is not None else []

    def get_related_nodes(
        self,
        values: list[Any],
        with_parents: bool = True,
    ) -> list[TreeModelNode]:
        """Return the nodes whose derived state depends on the given nodes.

        For each identity: its subtree, deepest first, followed by its
        ancestors nearest first. Duplicates are dropped.

        Args:
            values: Identities (or nodes).
            with_parents: If False, only the subtrees are returned.
        """
        related: dict[Any, TreeModelNode] = {}
        for value in values:
            node = self.get_node(value)
            if node is None:
                continue
            for item in reversed(node.walk()):
                related.setdefault(item.value, item)
            if with_parents:
                for parent in node.get_parents():
                    related.setdefault(parent.value, parent)
        return list(related.values())

    # ==================== Structure ====================

    def append(self, items: Any) -> None:
        """Append payload(s) or node(s) at root level."""
        mutation.append_nodes(self, None, items)

    def reload(self, items: Any) -> None:
        """Replace the whole tree with new payloads."""
        with self.batch():
            self.remove()
            self.append(items)

    def insert_before(self, value: Any, item: Any) -> None:
        """Insert item before the node named by value.

        Raises:
            NodeNotFoundError: If value does not name an attached node.
        """
        self._require(value).insert_before(item)

    def insert_after(self, value: Any, item: Any) -> None:
        """Insert item after the node named by value.

        Raises:
            NodeNotFoundError: If value does not name an attached node.
        """
        self._require(value).insert_after(item)

    def remove(self, value: Any = None) -> None:
        """Remove the node named by value, or every node if value is None.

        An unknown identity is ignored.
        """
        if value is not None:
            node = self.get_node(value)
            if node is not None:
                mutation.remove(self, node)
            return
        with self.batch():
            for node in list(self.children):
                mutation.remove(self, node)

    def as_list(self) -> list[dict[str, Any]]:
        """Export the structure as a list of payloads (see TreeModelStore(source))."""
        return export_payload(self, self.config.keys)

    # ==================== Checked ====================

    def get_checked(self, checked_set: set[Any] | None = None) -> list[Any]:
        """Return checked identities in tree order, shaped by value_mode.

        Args:
            checked_set: Hypothetical checked set; the live one if None.
        """
        checked = self.checked_set if checked_set is None else checked_set
        config = self.config
        mode = config.value_mode
        strict = config.check_strictly
        values = []
        for node in self.walk():
            if not node.is_checked(checked):
                continue
            if strict or mode is ValueMode.ALL:
                values.append(node.value)
            elif mode is ValueMode.PARENT_FIRST:
                parent = node.parent
                if parent is None or not parent.is_checked(checked):
                    values.append(node.value)
            elif node.is_leaf():
                values.append(node.value)
        return values

    def get_checked_nodes(self) -> list[TreeModelNode]:
        return [self.nodes_index[value] for value in self.get_checked()]

    def set_checked(self, values: list[Any], checked: bool = True) -> list[Any]:
        """Set the checked state of several nodes at once.

        Unknown identities and non-checkable nodes are skipped.
        """
        with self.batch():
            for value in values:
                node = self.get_node(value)
                if node is not None:
                    node.set_checked(checked)
        return self.get_checked()

    def replace_checked(self, values: list[Any]) -> list[Any]:
        """Make values the only checked nodes."""
        with self.batch():
            self.reset_checked()
            return self.set_checked(values)

    def reset_checked(self) -> None:
        with self.batch():
            self.checked_set.clear()
            for node in self.walk():
                propagation.update_checked(node)

    # ==================== Expanded ====================

    def get_expanded(self, expanded_set: set[Any] | None = None) -> list[Any]:
        """Return expanded identities in tree order."""
        expanded = self.expanded_set if expanded_set is None else expanded_set
        return [node.value for node in self.walk() if node.value in expanded]

    def set_expanded(self, values: list[Any], expanded: bool = True) -> list[Any]:
        with self.batch():
            for value in values:
                node = self.get_node(value)
                if node is not None:
                    node.set_expanded(expanded)
        return self.get_expanded()

    def replace_expanded(self, values: list[Any]) -> list[Any]:
        with self.batch():
            self.reset_expanded()
            return self.set_expanded(values)

    def reset_expanded(self) -> None:
        with self.batch():
            self.expanded_set.clear()
            self.update_all()

    # ==================== Activated ====================

    def get_activated(self, activated_set: set[Any] | None = None) -> list[Any]:
        """Return activated identities in tree order."""
        activated = self.activated_set if activated_set is None else activated_set
        return [node.value for node in self.walk() if node.value in activated]

    def get_activated_nodes(self) -> list[TreeModelNode]:
        return [self.nodes_index[value] for value in self.get_activated()]

    def set_activated(self, values: list[Any], activated: bool = True) -> list[Any]:
        with self.batch():
            for value in values:
                node = self.get_node(value)
                if node is not None:
                    node.set_activated(activated)
        return self.get_activated()

    def replace_activated(self, values: list[Any]) -> list[Any]:
        with self.batch():
            self.reset_activated()
            return self.set_activated(values)

    def reset_activated(self) -> None:
        with self.batch():
            self.activated_set.clear()
            self.update_all()

    # ==================== Filter ====================

    def get_filter_matched(self) -> list[Any]:
        """Return identities matching the current filter, in tree order."""
        return [node.value for node in self.walk() if node.value in self.filter_set]

    def set_filter(self, predicate: Callable[[TreeNodeModel], bool] | None) -> None:
        """Replace the filter predicate and recompute every node."""
        with self.batch():
            self.config.filter = predicate
            self.filter_set.clear()
            self.update_all()

    # ==================== Recompute ====================

    def set_config(self, **options: Any) -> None:
        """Update config options and recompute every node."""
        with self.batch():
            self.config.update(**options)
            self.update_all()

    def update_all(self) -> None:
        """Recompute the cached flags of every node."""
        with self.batch():
            for node in self.walk():
                propagation.update(node)
                propagation.update_checked(node)
            self.reflow()
