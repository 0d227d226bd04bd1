"""Tests for config/merge.py merge function."""

import copy

from lume.config.merge import ELEMENT_MARKER, ELEMENT_TYPE, is_plain_mapping, merge


class TestMerge:
    """Tests for the merge function."""

    def test_merge_empty_dicts(self) -> None:
        """Merging empty dicts returns empty dict."""
        assert merge({}, {}) == {}

    def test_user_omitted(self) -> None:
        """Without user options a copy of the defaults is returned."""
        defaults = {"a": 1, "nested": {"b": 2}}
        result = merge(defaults)
        assert result == defaults
        assert result is not defaults

    def test_user_none(self) -> None:
        """None user options behave like omitted ones."""
        assert merge({"a": 1}, None) == {"a": 1}

    def test_merge_empty_defaults(self) -> None:
        """User values are used when defaults are empty."""
        assert merge({}, {"a": 1, "b": 2}) == {"a": 1, "b": 2}

    def test_merge_disjoint_keys(self) -> None:
        """Keys from both dicts are present."""
        assert merge({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_override_simple_value(self) -> None:
        """User value replaces default value."""
        assert merge({"a": 1}, {"a": 2}) == {"a": 2}

    def test_override_type_change(self) -> None:
        """User value can change the value type."""
        assert merge({"a": 1}, {"a": "string"}) == {"a": "string"}

    def test_nested_dict_merge(self) -> None:
        """Nested dicts are merged recursively."""
        result = merge({"a": 1, "b": {"x": 1, "y": 2}}, {"b": {"y": 3, "z": 4}})
        assert result == {"a": 1, "b": {"x": 1, "y": 3, "z": 4}}

    def test_deeply_nested_merge(self) -> None:
        """Deep nesting is handled correctly."""
        defaults = {"l1": {"l2": {"l3": {"a": 1, "b": 2}}}}
        user = {"l1": {"l2": {"l3": {"b": 3, "c": 4}}}}
        assert merge(defaults, user) == {"l1": {"l2": {"l3": {"a": 1, "b": 3, "c": 4}}}}

    def test_list_replacement(self) -> None:
        """Lists are replaced entirely, not concatenated."""
        assert merge({"list": [1, 2]}, {"list": [3]}) == {"list": [3]}

    def test_list_to_dict_override(self) -> None:
        """Dict can replace a list."""
        assert merge({"value": [1, 2, 3]}, {"value": {"a": 1}}) == {"value": {"a": 1}}

    def test_dict_to_list_override(self) -> None:
        """List can replace a dict."""
        assert merge({"value": {"a": 1}}, {"value": [1, 2, 3]}) == {"value": [1, 2, 3]}

    def test_none_override(self) -> None:
        """None can override a value."""
        assert merge({"a": 1}, {"a": None}) == {"a": None}

    def test_dict_over_none(self) -> None:
        """A dict replaces a None default."""
        assert merge({"a": None}, {"a": {"b": 1}}) == {"a": {"b": 1}}

    def test_inputs_not_modified(self) -> None:
        """Input dicts are not modified."""
        defaults = {"a": 1, "nested": {"b": 2, "deeper": {"c": 3}}, "list": [1]}
        user = {"a": 2, "nested": {"deeper": {"d": 4}}, "list": [2]}
        defaults_copy = copy.deepcopy(defaults)
        user_copy = copy.deepcopy(user)

        result = merge(defaults, user)
        result["nested"]["deeper"]["e"] = 5

        assert defaults == defaults_copy
        assert user == user_copy

    def test_elements_are_replaced(self) -> None:
        """Rendered elements are not merged key by key."""
        element = {ELEMENT_MARKER: ELEMENT_TYPE, "type": "footer"}
        defaults = {"footer": {ELEMENT_MARKER: ELEMENT_TYPE, "type": "div", "id": 1}}
        result = merge(defaults, {"footer": element})
        assert result == {"footer": element}

    def test_plugin_options(self) -> None:
        """Plugin defaults merged with partial user options."""
        defaults = {
            "extensions": [".html"],
            "formats": {"HUMAN_DATE": "PPP", "HUMAN_DATETIME": "PPPpp"},
            "locales": {},
        }
        user = {
            "extensions": [".md", ".njk"],
            "formats": {"HUMAN_DATE": "PP"},
        }

        assert merge(defaults, user) == {
            "extensions": [".md", ".njk"],
            "formats": {"HUMAN_DATE": "PP", "HUMAN_DATETIME": "PPPpp"},
            "locales": {},
        }


class TestIsPlainMapping:
    """Tests for the is_plain_mapping function."""

    def test_dict(self) -> None:
        assert is_plain_mapping({"a": 1})

    def test_empty_dict(self) -> None:
        assert is_plain_mapping({})

    def test_not_mappings(self) -> None:
        for value in (None, 1, "text", [1], (1,), {1, 2}):
            assert not is_plain_mapping(value)

    def test_element(self) -> None:
        """Dicts tagged as rendered elements are not plain mappings."""
        assert not is_plain_mapping({ELEMENT_MARKER: ELEMENT_TYPE})

    def test_other_marker_value(self) -> None:
        """Only the element marker value is excluded."""
        assert is_plain_mapping({ELEMENT_MARKER: "something.else"})
