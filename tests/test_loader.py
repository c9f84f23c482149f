# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for lazy children loading."""

import asyncio
import logging

import pytest

from genro_treemodel import LoadError, LoadErrorPolicy, LoadState, TreeModelStore


def _counting_fetch(calls, children=None):
    async def fetch(node):
        calls.append(node.value)
        if children is not None:
            return children
        return [{'value': f'{node.value}-1'}, {'value': f'{node.value}-2'}]
    return fetch


def _failing_fetch(calls):
    async def fetch(node):
        calls.append(node.value)
        raise RuntimeError('backend down')
    return fetch


class TestLazyState:
    """Tests for the initial state of unloaded nodes."""

    def test_unloaded_node(self):
        """Test a lazy node before any fetch."""
        store = TreeModelStore([{'value': 'x', 'children': True}], lazy=True, load=print)
        x = store.get_node('x')
        assert x.load_state is LoadState.UNLOADED
        assert x.loading is False
        assert x.is_leaf() is False
        assert x.leaf is False

    def test_without_load_function(self):
        """Test expanding an unloaded node with no load function."""
        store = TreeModelStore([{'value': 'x', 'children': True}])
        x = store.get_node('x')
        assert x.set_expanded(True) == ['x']
        assert x.load_state is LoadState.UNLOADED

    def test_sync_load_without_event_loop(self):
        """Test a non-lazy node loads during construction outside a loop."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            load=lambda node: [{'value': 'y'}],
        )
        x = store.get_node('x')
        assert x.load_state is LoadState.LOADED
        assert store.get_node('y').get_parent() is x
        assert x.leaf is False

    def test_nested_async_load_without_event_loop(self):
        """Test loads started by loaded children finish outside a loop."""
        async def fetch(node):
            await asyncio.sleep(0)
            if node.value == 'x':
                return [{'value': 'y', 'children': True}]
            return [{'value': 'z'}]

        store = TreeModelStore([{'value': 'x', 'children': True}], load=fetch)
        y = store.get_node('y')
        assert y.loading is False
        assert y.load_state is LoadState.LOADED
        assert store.get_node('z').get_parent() is y

    def test_sync_expand_loads(self):
        """Test expanding a lazy node outside a loop loads it at once."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=lambda node: [{'value': 'y'}, {'value': 'z'}],
        )
        store.get_node('x').set_expanded(True)
        assert [n.value for n in store.visible_nodes] == ['x', 'y', 'z']


class TestAsyncLoad:
    """Tests for loading inside a running event loop."""

    @pytest.mark.asyncio
    async def test_expand_moves_through_loading(self):
        """Test UNLOADED -> LOADING -> LOADED on expand."""
        calls = []
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_counting_fetch(calls),
        )
        x = store.get_node('x')
        x.set_expanded(True)
        assert x.loading is True
        assert x.load_state is LoadState.LOADING
        await store.wait_loaded()
        assert x.load_state is LoadState.LOADED
        assert [child.value for child in x.children] == ['x-1', 'x-2']
        assert store.get_node('x-1').visible is True
        assert calls == ['x']

    @pytest.mark.asyncio
    async def test_empty_result_makes_leaf(self):
        """Test an empty fetch result."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_counting_fetch([], children=[]),
        )
        x = store.get_node('x')
        await x.load_children()
        assert x.load_state is LoadState.NO_CHILDREN
        assert x.is_leaf() is True
        assert x.leaf is True

    @pytest.mark.asyncio
    async def test_load_is_not_repeated(self):
        """Test the loading guard and the loaded state."""
        calls = []
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_counting_fetch(calls),
        )
        x = store.get_node('x')
        x.set_expanded(True)
        await x.load_children()
        await store.wait_loaded()
        x.set_expanded(False)
        x.set_expanded(True)
        await store.wait_loaded()
        assert calls == ['x']

    @pytest.mark.asyncio
    async def test_load_event(self):
        """Test the load notification carries the fetched data."""
        events = []
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_counting_fetch([]),
        )
        store.subscribe('test', load=lambda event, store, node, data, error: events.append(
            (node.value, [item['value'] for item in data], error)))
        await store.get_node('x').load_children()
        assert events == [('x', ['x-1', 'x-2'], None)]

    @pytest.mark.asyncio
    async def test_loaded_children_inherit_checked(self):
        """Test children loaded under a checked node are checked."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            checkable=True,
            load=_counting_fetch([]),
        )
        x = store.get_node('x')
        x.set_checked(True)
        await x.load_children()
        assert store.get_checked() == ['x', 'x-1', 'x-2']
        assert x.checked is True

    @pytest.mark.asyncio
    async def test_nested_loads_are_awaited(self):
        """Test wait_loaded follows loads started by other loads."""
        async def fetch(node):
            await asyncio.sleep(0)
            if node.value == 'x':
                return [{'value': 'y', 'children': True}]
            return [{'value': 'z'}]

        store = TreeModelStore([{'value': 'x', 'children': True}], lazy=True, load=fetch)
        store.set_config(lazy=False)
        store.get_node('x').set_expanded(True)
        await store.wait_loaded()
        assert store.get_node('z').get_parent().value == 'y'
        assert store.get_node('y').load_state is LoadState.LOADED

    @pytest.mark.asyncio
    async def test_cancelled_load_clears_loading(self):
        """Test a cancelled fetch leaves the node unloaded."""
        started = asyncio.Event()

        async def fetch(node):
            started.set()
            await asyncio.Event().wait()

        store = TreeModelStore([{'value': 'x', 'children': True}], lazy=True, load=fetch)
        x = store.get_node('x')
        task = asyncio.ensure_future(x.load_children())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert x.loading is False
        assert x.load_state is LoadState.UNLOADED

    @pytest.mark.asyncio
    async def test_node_removed_while_loading(self):
        """Test the result of a detached node is dropped."""
        release = asyncio.Event()

        async def fetch(node):
            await release.wait()
            return [{'value': 'child'}]

        store = TreeModelStore([{'value': 'x', 'children': True}], lazy=True, load=fetch)
        x = store.get_node('x')
        x.set_expanded(True)
        x.remove()
        release.set()
        await store.wait_loaded()
        assert x.loading is False
        assert x.load_state is LoadState.UNLOADED
        assert 'child' not in store


class TestLoadFailure:
    """Tests for the load error policies."""

    @pytest.mark.asyncio
    async def test_reset_policy(self, caplog):
        """Test a failed load returns to UNLOADED and can be retried."""
        calls = []
        errors = []
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_failing_fetch(calls),
        )
        store.subscribe('test', load=lambda **kw: errors.append(kw['error']))
        x = store.get_node('x')
        with caplog.at_level(logging.WARNING, logger='genro_treemodel.loader'):
            x.set_expanded(True)
            await store.wait_loaded()
        assert x.loading is False
        assert x.load_state is LoadState.UNLOADED
        assert 'backend down' in caplog.text
        assert isinstance(errors[0], RuntimeError)

        x.set_expanded(False)
        x.set_expanded(True)
        await store.wait_loaded()
        assert calls == ['x', 'x']

    @pytest.mark.asyncio
    async def test_no_children_policy(self):
        """Test a failed load turns the node into a leaf."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_failing_fetch([]),
            load_error=LoadErrorPolicy.NO_CHILDREN,
        )
        x = store.get_node('x')
        await x.load_children()
        assert x.load_state is LoadState.NO_CHILDREN
        assert x.leaf is True

    @pytest.mark.asyncio
    async def test_raise_policy(self):
        """Test a failed load raises LoadError after resetting."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_failing_fetch([]),
            load_error='raise',
        )
        x = store.get_node('x')
        with pytest.raises(LoadError) as excinfo:
            await x.load_children()
        assert excinfo.value.value == 'x'
        assert isinstance(excinfo.value.cause, RuntimeError)
        assert x.loading is False
        assert x.load_state is LoadState.UNLOADED

    @pytest.mark.asyncio
    async def test_malformed_result_is_a_failure(self):
        """Test a result that cannot be built follows the error policy."""
        errors = []
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=lambda node: [{'value': 'ok'}, 'bad'],
        )
        store.subscribe('test', load=lambda **kw: errors.append(kw['error']))
        x = store.get_node('x')
        await x.load_children()
        assert x.loading is False
        assert x.load_state is LoadState.UNLOADED
        assert 'ok' not in store
        assert isinstance(errors[0], TypeError)

    @pytest.mark.asyncio
    async def test_malformed_result_with_raise_policy(self):
        """Test a result that cannot be built raises LoadError."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=lambda node: ['bad'],
            load_error='raise',
        )
        x = store.get_node('x')
        with pytest.raises(LoadError) as excinfo:
            await x.load_children()
        assert isinstance(excinfo.value.cause, TypeError)
        assert x.load_state is LoadState.UNLOADED

    @pytest.mark.asyncio
    async def test_raise_policy_through_wait_loaded(self):
        """Test a scheduled load failure surfaces in wait_loaded."""
        store = TreeModelStore(
            [{'value': 'x', 'children': True}],
            lazy=True,
            load=_failing_fetch([]),
            load_error=LoadErrorPolicy.RAISE,
        )
        store.get_node('x').set_expanded(True)
        with pytest.raises(LoadError):
            await store.wait_loaded()
        assert store.get_node('x').load_state is LoadState.UNLOADED
