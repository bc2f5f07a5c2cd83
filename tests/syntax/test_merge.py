"""Tests for termsyntax.syntax.merge module."""

import copy

from termsyntax.syntax import add_defaults, add_mandatory, merge_schema_fragments


class TestMergeSchemaFragments:
    """Test deep merging of schema fragments."""

    def test_deep_merge(self):
        """Test that mappings merge recursively and other values are replaced."""
        base = {"a": {"x": 1, "y": {"z": 1}}, "b": [1], "c": "integer"}
        update = {"a": {"y": {"w": 2}}, "b": [2], "d": "binary"}
        assert merge_schema_fragments(update, base) == {
            "a": {"x": 1, "y": {"z": 1, "w": 2}},
            "b": [2],
            "c": "integer",
            "d": "binary",
        }

    def test_update_replaces_non_mapping(self):
        """Test that a mapping replaces a scalar and vice versa."""
        assert merge_schema_fragments({"a": {"x": 1}}, {"a": "integer"}) == {"a": {"x": 1}}
        assert merge_schema_fragments({"a": "integer"}, {"a": {"x": 1}}) == {"a": "integer"}

    def test_inputs_unchanged(self):
        """Test that merging never mutates its arguments."""
        base = {"a": {"x": 1}, "__defaults": {"a": {}}}
        update = {"a": {"y": 2}, "__defaults": {"b": 1}}
        base_copy, update_copy = copy.deepcopy(base), copy.deepcopy(update)
        merge_schema_fragments(update, base)
        assert base == base_copy
        assert update == update_copy


class TestReservedHelpers:
    """Test add_defaults and add_mandatory."""

    def test_add_defaults(self):
        """Test that incoming defaults win over existing ones."""
        schema = {"port": "integer", "__defaults": {"port": 80, "host": "localhost"}}
        result = add_defaults({"port": 8080}, schema)
        assert result["__defaults"] == {"port": 8080, "host": "localhost"}
        assert schema["__defaults"] == {"port": 80, "host": "localhost"}

    def test_add_defaults_without_existing(self):
        """Test adding defaults to a schema that has none."""
        assert add_defaults({"a": 1}, {"a": "integer"}) == {"a": "integer", "__defaults": {"a": 1}}

    def test_add_mandatory(self):
        """Test that new mandatory keys are placed first."""
        schema = {"__mandatory": ["b"]}
        assert add_mandatory(["a"], schema) == {"__mandatory": ["a", "b"]}
        assert schema == {"__mandatory": ["b"]}
        assert add_mandatory(("x",), {}) == {"__mandatory": ["x"]}
