# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for PathTree structural encoding."""

import json

import pytest

from genro_pathtree import (
    InvalidPathError,
    PathTree,
    PathTreeNode,
    dump_node,
    dump_records,
    from_json,
    load_node,
    load_records,
    to_json,
)


def build_sample():
    tree = PathTree()
    tree.add('', 'root-value')
    tree.add('config/database/host', 'localhost')
    tree.add('config/database/port', 5432)
    tree.add('config', {'hybrid': True})
    tree.add('flags/debug', None)
    tree.create_directory('empty/dir')
    return tree


class TestDump:
    """Tests for dump_node and as_dict."""

    def test_as_dict(self):
        """Test the encoding of a small tree."""
        tree = PathTree()
        tree.add('a/b', 1)
        tree.create_directory('c')
        assert tree.as_dict() == {
            'children': {
                'a': {'children': {'b': {'value': 1}}},
                'c': {},
            }
        }

    def test_empty_tree(self):
        """Test an empty tree encodes to an empty dict."""
        assert PathTree().as_dict() == {}

    def test_none_value_is_encoded(self):
        """Test a stored None is kept distinct from no value."""
        node = PathTreeNode(None)
        assert dump_node(node) == {'value': None}
        assert dump_node(PathTreeNode()) == {}

    def test_children_sorted(self):
        """Test children are emitted in lexicographic order."""
        tree = PathTree()
        for name in ('c', 'a', 'b'):
            tree.add(name, name)
        assert list(tree.as_dict()['children']) == ['a', 'b', 'c']


class TestLoad:
    """Tests for load_node and from_dict."""

    def test_round_trip_crawl(self):
        """Test decoding an encoded tree preserves the crawl sequence."""
        tree = build_sample()
        restored = PathTree.from_dict(tree.as_dict())
        assert list(restored.crawl()) == list(tree.crawl())
        assert restored == tree

    def test_round_trip_keeps_empty_directories(self):
        """Test explicitly created directories survive a round trip."""
        tree = build_sample()
        restored = PathTree(tree.as_dict())
        assert restored.exists('empty/dir')

    def test_from_dict_options(self):
        """Test name and separator are applied."""
        tree = PathTree.from_dict(
            {'children': {'a': {'value': 1}}}, name='loaded', separator='.')
        assert tree.name == 'loaded'
        assert tree.separator == '.'
        assert tree.obtain('a') == 1

    def test_not_a_dict_raises(self):
        """Test encoded nodes must be dicts."""
        with pytest.raises(TypeError, match="encoded node must be dict"):
            load_node(['value'])

    def test_children_not_a_dict_raises(self):
        """Test 'children' must be a dict."""
        with pytest.raises(TypeError, match="'children' must be dict"):
            load_node({'children': [1, 2]})

    def test_unknown_key_raises(self):
        """Test unexpected keys are rejected."""
        with pytest.raises(ValueError, match="Unknown keys"):
            load_node({'value': 1, 'attr': {}})

    @pytest.mark.parametrize('name', ['', 'a/b'])
    def test_invalid_child_name_raises(self, name):
        """Test empty names and names with the separator are rejected."""
        with pytest.raises(InvalidPathError):
            load_node({'children': {name: {'value': 1}}})

    def test_separator_specific_validation(self):
        """Test validation uses the separator of the target tree."""
        data = {'children': {'a/b': {'value': 1}}}
        tree = PathTree.from_dict(data, separator='.')
        assert tree.obtain('a/b') == 1
        with pytest.raises(InvalidPathError):
            PathTree.from_dict(data)

    def test_deep_round_trip(self):
        """Test trees thousands of levels deep survive both encodings."""
        deep = '/'.join(['d'] * 3000)
        tree = PathTree()
        tree.add(deep, 1)
        tree.add('d', 0)

        restored = PathTree.from_dict(tree.as_dict())
        assert restored.items() == tree.items()

        restored = from_json(to_json(tree))
        assert restored.items() == [('d', 0), (deep, 1)]
        assert restored == tree


class TestRecords:
    """Tests for the flat record encoding."""

    def test_dump_records(self):
        """Test records come in crawl order with parent indexes."""
        tree = PathTree()
        tree.add('b', 2)
        tree.add('a/x', 1)
        tree.create_directory('c')
        assert dump_records(tree.root) == [
            {},
            {'parent': 0, 'name': 'a'},
            {'parent': 1, 'name': 'x', 'value': 1},
            {'parent': 0, 'name': 'b', 'value': 2},
            {'parent': 0, 'name': 'c'},
        ]

    def test_root_value_recorded(self):
        """Test a value stored at the root lands in the first record."""
        tree = PathTree()
        tree.add('', None)
        assert tree.as_records() == [{'value': None}]
        assert PathTree.from_records([{'value': None}]).obtain('') is None

    def test_round_trip(self):
        """Test from_records rebuilds the exact shape."""
        tree = build_sample()
        restored = PathTree.from_records(tree.as_records(), name='copy')
        assert restored == tree
        assert restored.name == 'copy'
        assert restored.exists('empty/dir')

    def test_json_document_shape(self):
        """Test to_json writes the records under 'nodes'."""
        tree = PathTree()
        tree.add('a', 1)
        assert json.loads(to_json(tree)) == {
            'nodes': [{}, {'parent': 0, 'name': 'a', 'value': 1}]
        }

    @pytest.mark.parametrize('records', [[], {}, None])
    def test_not_a_list_raises(self, records):
        """Test records must be a non-empty list."""
        with pytest.raises(TypeError, match="non-empty list"):
            load_records(records)

    def test_record_not_a_dict_raises(self):
        """Test every record must be a dict."""
        with pytest.raises(TypeError, match="record must be dict"):
            load_records([{}, ['a']])

    def test_unknown_key_raises(self):
        """Test unexpected keys are rejected."""
        with pytest.raises(ValueError, match="Unknown keys"):
            load_records([{}, {'parent': 0, 'name': 'a', 'attr': 1}])

    def test_root_with_parent_raises(self):
        """Test the first record cannot name a parent."""
        with pytest.raises(ValueError, match="has no parent"):
            load_records([{'parent': 0, 'name': 'a'}])

    @pytest.mark.parametrize('parent', [None, -1, 1, 2, True, '0'])
    def test_bad_parent_index_raises(self, parent):
        """Test parents must be earlier records."""
        with pytest.raises(ValueError, match="Invalid parent index"):
            load_records([{}, {'parent': parent, 'name': 'a'}])

    def test_duplicate_name_raises(self):
        """Test a name cannot appear twice under one parent."""
        records = [{}, {'parent': 0, 'name': 'a'}, {'parent': 0, 'name': 'a'}]
        with pytest.raises(ValueError, match="Duplicate name 'a'"):
            load_records(records)

    @pytest.mark.parametrize('name', ['', 'a/b'])
    def test_invalid_name_raises(self, name):
        """Test names are validated against the separator."""
        with pytest.raises(InvalidPathError):
            load_records([{}, {'parent': 0, 'name': name}])


class TestJson:
    """Tests for JSON helpers."""

    def test_json_round_trip(self):
        """Test to_json/from_json preserve the crawl sequence."""
        tree = build_sample()
        text = to_json(tree)
        assert isinstance(json.loads(text), dict)
        restored = from_json(text)
        assert restored.items() == tree.items()

    def test_json_kwargs(self):
        """Test json.dumps options are forwarded."""
        tree = PathTree()
        tree.add('a', 1)
        assert '\n' in to_json(tree, indent=2)

    def test_from_json_name(self):
        """Test from_json applies the tree name."""
        tree = from_json('{"children": {"x": {"value": 1}}}', name='cfg')
        assert tree.name == 'cfg'
        assert tree.obtain('x') == 1
