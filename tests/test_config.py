# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for TreeConfig and TreeKeys."""

import pytest

from genro_treemodel import LoadErrorPolicy, TreeConfig, TreeKeys, ValueMode


class TestTreeConfig:
    """Tests for TreeConfig."""

    def test_defaults(self):
        """Test the default options."""
        config = TreeConfig()
        assert config.prefix == 't'
        assert config.checkable is False
        assert config.expand_level == 0
        assert config.value_mode is ValueMode.ALL
        assert config.load_error is LoadErrorPolicy.RESET
        assert config.has_filter is False
        assert config.get_load() is None

    def test_enum_coercion(self):
        """Test string values are turned into enums."""
        config = TreeConfig(value_mode='onlyLeaf', load_error='no_children')
        assert config.value_mode is ValueMode.ONLY_LEAF
        assert config.load_error is LoadErrorPolicy.NO_CHILDREN

    def test_invalid_enum_value(self):
        """Test an unknown value mode."""
        with pytest.raises(ValueError):
            TreeConfig(value_mode='some')

    def test_update(self):
        """Test update in place."""
        config = TreeConfig()
        config.update(lazy=True, keys={'value': 'id'})
        assert config.lazy is True
        assert config.keys.value == 'id'
        assert config.keys.children == 'children'

    def test_unknown_option(self):
        """Test update rejects unknown options."""
        with pytest.raises(TypeError, match="Unknown tree option 'colour'"):
            TreeConfig().update(colour='red')

    def test_invalid_keys(self):
        """Test keys must be TreeKeys or dict."""
        with pytest.raises(TypeError, match="keys must be TreeKeys or dict"):
            TreeConfig(keys=['id'])

    def test_repr_shows_changed_options(self):
        """Test repr lists only non-default options."""
        assert repr(TreeConfig(checkable=True)) == "TreeConfig({'checkable': True})"
        assert 'value' in repr(TreeKeys())
