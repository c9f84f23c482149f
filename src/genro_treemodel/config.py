# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Store configuration.

TreeConfig collects the tree-wide options a TreeModelStore is built with.
Boolean behaviour flags (checkable, disabled, activable, draggable,
expand_mutex) act as defaults that are OR'd with the per-node overrides:
when the config flag is True every node has the behaviour.

Example:
    >>> config = TreeConfig(checkable=True, expand_level=1)
    >>> config.checkable
    True
    >>> config.update(lazy=True)
    >>> config.lazy
    True
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable


class ValueMode(str, Enum):
    """Which checked identities get_checked() reports."""

    ALL = 'all'
    PARENT_FIRST = 'parentFirst'
    ONLY_LEAF = 'onlyLeaf'


class LoadErrorPolicy(str, Enum):
    """What a node becomes when its lazy fetch fails.

    - RESET: back to unloaded, the next expand retries the fetch
    - NO_CHILDREN: the node becomes a leaf
    - RAISE: back to unloaded, then the failure propagates as LoadError
    """

    RESET = 'reset'
    NO_CHILDREN = 'no_children'
    RAISE = 'raise'


class TreeKeys:
    """Field names used to read node payloads.

    Attributes:
        children: Payload key holding the child list (or True for lazy).
        label: Payload key holding the display text.
        value: Payload key holding the node identity.
    """

    __slots__ = ('children', 'label', 'value')

    def __init__(
        self,
        children: str = 'children',
        label: str = 'label',
        value: str = 'value',
    ) -> None:
        self.children = children
        self.label = label
        self.value = value

    def __repr__(self) -> str:
        return (
            f"TreeKeys(children={self.children!r}, label={self.label!r}, "
            f"value={self.value!r})"
        )


_DEFAULTS: dict[str, Any] = {
    'prefix': 't',
    'id_factory': None,
    'checkable': False,
    'disabled': False,
    'activable': False,
    'draggable': False,
    'expand_mutex': False,
    'check_strictly': False,
    'active_multiple': False,
    'expand_all': False,
    'expand_level': 0,
    'expand_parent': False,
    'lazy': False,
    'load': None,
    'filter': None,
    'value_mode': ValueMode.ALL,
    'load_error': LoadErrorPolicy.RESET,
}


class TreeConfig:
    """Tree-wide options for a TreeModelStore.

    Attributes:
        keys: TreeKeys mapping payload fields to children/label/value.
        prefix: Prefix for generated identities.
        id_factory: Optional callable returning a fresh identity; takes
            precedence over the prefix counter.
        checkable, disabled, activable, draggable, expand_mutex: Defaults
            OR'd with the per-node overrides.
        check_strictly: Checked state comes only from explicit entries.
        active_multiple: Allow more than one activated node.
        expand_all: Expand every node at construction.
        expand_level: Expand nodes whose level is below this value.
        expand_parent: Expanding a node also expands its ancestors.
        lazy: Do not fetch unloaded children at construction.
        load: Fetch function ``load(node) -> list`` (sync or async).
        filter: Predicate ``filter(model) -> bool`` for filter visibility.
        value_mode: ValueMode used by get_checked().
        load_error: LoadErrorPolicy applied when ``load`` fails.
    """

    __slots__ = ('keys',) + tuple(_DEFAULTS)

    def __init__(self, keys: TreeKeys | dict[str, str] | None = None, **options: Any) -> None:
        """Initialize a TreeConfig.

        Args:
            keys: TreeKeys instance or dict with children/label/value names.
            **options: Any of the documented options.

        Raises:
            TypeError: If an unknown option is passed.
        """
        self.keys = _coerce_keys(keys)
        for name, default in _DEFAULTS.items():
            setattr(self, name, default)
        self.update(**options)

    def __repr__(self) -> str:
        changed = {
            name: getattr(self, name)
            for name, default in _DEFAULTS.items()
            if getattr(self, name) != default
        }
        return f"TreeConfig({changed})"

    def update(self, **options: Any) -> None:
        """Set options in place.

        Raises:
            TypeError: If an unknown option is passed.
        """
        for name, value in options.items():
            if name == 'keys':
                self.keys = _coerce_keys(value)
                continue
            if name not in _DEFAULTS:
                raise TypeError(f"Unknown tree option '{name}'")
            if name == 'value_mode':
                value = ValueMode(value)
            elif name == 'load_error':
                value = LoadErrorPolicy(value)
            setattr(self, name, value)

    @property
    def has_filter(self) -> bool:
        return callable(self.filter)

    def get_load(self) -> Callable[..., Any] | None:
        """Return the fetch function if one is configured."""
        return self.load if callable(self.load) else None


def _coerce_keys(keys: TreeKeys | dict[str, str] | None) -> TreeKeys:
    if keys is None:
        return TreeKeys()
    if isinstance(keys, TreeKeys):
        return keys
    if isinstance(keys, dict):
        return TreeKeys(**keys)
    raise TypeError(f"keys must be TreeKeys or dict, not {type(keys).__name__}")
