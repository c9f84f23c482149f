# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Lazy children loading.

A node built with ``children: True`` starts UNLOADED. Loading moves it to
LOADING (the node's ``loading`` flag, which also guards against a second
fetch) and then to LOADED when the fetch returns a non-empty list, or to
NO_CHILDREN when it returns an empty or falsy result.

The fetch function is ``config.load``; it receives the node and may be a
plain function or a coroutine function. A ``load`` event is emitted after
every attempt, successful or not.

A failed fetch never leaves the node LOADING; ``config.load_error``
decides whether it returns to UNLOADED (RESET, RAISE) or becomes a leaf
(NO_CHILDREN). RAISE re-raises the failure as LoadError.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, TYPE_CHECKING

from . import mutation, propagation
from .children import ChildState
from .config import LoadErrorPolicy
from .exceptions import LoadError

if TYPE_CHECKING:
    from .node import TreeModelNode

logger = logging.getLogger(__name__)


def _begin(node: TreeModelNode) -> Callable[..., Any] | None:
    """Enter LOADING if the node can load; return the fetch function."""
    fetch = node.tree.config.get_load()
    if fetch is None or node.loading or node.children is not ChildState.UNLOADED:
        return None
    node.loading = True
    propagation.update(node)
    return fetch


async def _fetch(node: TreeModelNode, fetch: Callable[..., Any]) -> None:
    tree = node.tree
    try:
        result = fetch(node)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        _fail(node, exc)
        return
    except BaseException:
        # cancelled: the node must not stay LOADING
        node.loading = False
        raise

    node.loading = False
    try:
        with tree.batch():
            if not tree.is_attached(node):
                logger.debug("Node %r was detached while loading, result dropped", node.value)
            elif isinstance(result, (list, tuple)) and result:
                mutation.append_nodes(tree, node, list(result))
            else:
                node.children = ChildState.NO_CHILDREN
            propagation.update(node)
    except Exception as exc:
        _discard_children(node)
        _fail(node, exc)
        return
    tree.emit('load', node=node, data=result, error=None)


def _discard_children(node: TreeModelNode) -> None:
    """Drop the children appended by a load that failed halfway."""
    tree = node.tree
    if isinstance(node.children, list):
        with tree.batch():
            for child in list(node.children):
                mutation.remove(tree, child)
    node.children = ChildState.UNLOADED


def _fail(node: TreeModelNode, error: Exception) -> None:
    tree = node.tree
    policy = tree.config.load_error
    node.loading = False
    if policy is LoadErrorPolicy.NO_CHILDREN:
        node.children = ChildState.NO_CHILDREN
    with tree.batch():
        propagation.update(node)
    tree.emit('load', node=node, data=None, error=error)
    if policy is LoadErrorPolicy.RAISE:
        raise LoadError(node.value, error) from error
    logger.warning("Loading children of %r failed: %s", node.value, error)


async def load_children(node: TreeModelNode) -> None:
    """Fetch the children of an unloaded node and wait for the outcome.

    No-op if the node is not UNLOADED, is already loading, or no load
    function is configured.

    Raises:
        LoadError: If the fetch fails and the policy is RAISE.
    """
    fetch = _begin(node)
    if fetch is not None:
        await _fetch(node, fetch)


async def _fetch_and_wait(node: TreeModelNode, fetch: Callable[..., Any]) -> None:
    # loads started by the fetched children must finish inside the same loop
    await _fetch(node, fetch)
    await node.tree.wait_loaded()


def schedule_load(node: TreeModelNode) -> asyncio.Task | None:
    """Start loading from synchronous code.

    The node enters LOADING before this returns. With a running event loop
    the fetch runs as a task tracked by the store (see
    ``TreeModelStore.wait_loaded``); without one it runs to completion,
    together with the loads its children start, before returning.

    Returns:
        The task, or None if nothing was scheduled or the load already ran.
    """
    fetch = _begin(node)
    if fetch is None:
        return None
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(_fetch_and_wait(node, fetch))
        return None
    task = loop.create_task(_fetch(node, fetch))
    node.tree.track_load(task)
    return task
