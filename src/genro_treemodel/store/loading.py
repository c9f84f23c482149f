# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Payload normalization for TreeModelStore sources.

A source is turned into a list of node payloads:
- list or tuple: each item is a payload (or an existing node)
- dict: a single payload
- TreeModelStore: the payload tree exported by ``as_list()``
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import TreeKeys
    from .core import TreeModelStore


def coerce_payload(item: Any) -> Mapping[str, Any]:
    """Return item if it can be used as a node payload.

    Raises:
        TypeError: If item is not a mapping.
    """
    if isinstance(item, Mapping):
        return item
    raise TypeError(f"node payload must be a mapping, not {type(item).__name__}")


def items_from_source(source: Any) -> list[Any]:
    """Return the list of payloads described by source.

    Raises:
        TypeError: If source is not a list, tuple, dict or TreeModelStore.
    """
    from .core import TreeModelStore

    if isinstance(source, TreeModelStore):
        return source.as_list()
    if isinstance(source, (list, tuple)):
        return list(source)
    if isinstance(source, Mapping):
        return [source]
    raise TypeError(
        f"source must be list, dict, or TreeModelStore, not {type(source).__name__}"
    )


def export_payload(store: TreeModelStore, keys: TreeKeys) -> list[dict[str, Any]]:
    """Rebuild payloads from the live structure of store.

    Each payload is a copy of the node's data with the identity, the label
    and the current children. Unloaded children are exported as True so
    the copy loads them again.
    """
    from ..children import ChildState

    def _export(node: Any) -> dict[str, Any]:
        payload = dict(node.data)
        payload[keys.value] = node.value
        payload[keys.label] = node.label
        if isinstance(node.children, list):
            payload[keys.children] = [_export(child) for child in node.children]
        elif node.children is ChildState.UNLOADED:
            payload[keys.children] = True
        else:
            payload.pop(keys.children, None)
        return payload

    return [_export(node) for node in store.children]
