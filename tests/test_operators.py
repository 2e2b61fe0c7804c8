"""Unit tests for operator rewriting and filter compilation."""

from __future__ import annotations

import pytest

from mongo_query_builder.builder import RESERVED_FIELDS
from mongo_query_builder.exceptions import FilterParseError, QueryBuilderError
from mongo_query_builder.operators import (
    compile_filter,
    expand_bracket_keys,
    parse_scalar,
    rewrite_operators,
)


class TestRewriteOperators:
    """Tests for the structural operator rewrite."""

    @pytest.mark.parametrize(
        ("token", "mongo_op"),
        [
            ("gte", "$gte"),
            ("gt", "$gt"),
            ("lte", "$lte"),
            ("lt", "$lt"),
            ("ne", "$ne"),
        ],
    )
    def test_comparison_tokens(self, token, mongo_op):
        """Each comparison token used as a key gets the $ prefix."""
        assert rewrite_operators({"age": {token: "30"}}) == {"age": {mongo_op: 30}}

    def test_in_operand_split_on_commas(self):
        result = rewrite_operators({"role": {"in": "admin, user"}})
        assert result == {"role": {"$in": ["admin", "user"]}}

    def test_nin_scalar_operand_becomes_list(self):
        result = rewrite_operators({"role": {"nin": "guest"}})
        assert result == {"role": {"$nin": ["guest"]}}

    def test_in_list_operand_coerced(self):
        result = rewrite_operators({"age": {"in": ["1", "2"]}})
        assert result == {"age": {"$in": [1, 2]}}

    def test_operator_word_in_value_untouched(self):
        """A data value that contains an operator word is not rewritten."""
        result = rewrite_operators({"status": "in stock", "note": "gte lt ne"})
        assert result == {"status": "in stock", "note": "gte lt ne"}

    def test_operator_word_as_field_value_not_key(self):
        assert rewrite_operators({"op": "gte"}) == {"op": "gte"}

    def test_equality_values_not_coerced(self):
        assert rewrite_operators({"zip": "01234"}) == {"zip": "01234"}

    def test_coercion_can_be_disabled(self):
        result = rewrite_operators({"age": {"gte": "30"}}, coerce=False)
        assert result == {"age": {"$gte": "30"}}

    def test_nested_fields_are_walked(self):
        result = rewrite_operators({"address": {"geo": {"lat": {"gt": "1.5"}}}})
        assert result == {"address": {"geo": {"lat": {"$gt": 1.5}}}}

    def test_existing_mongo_operator_kept(self):
        assert rewrite_operators({"age": {"$lt": "5"}}) == {"age": {"$lt": 5}}

    def test_unknown_dollar_operator_rejected(self):
        with pytest.raises(FilterParseError):
            rewrite_operators({"$where": "sleep(1000)"})


class TestExpandBracketKeys:
    """Tests for field[op] key expansion."""

    def test_single_bracket(self):
        assert expand_bracket_keys({"price[gte]": "10"}) == {"price": {"gte": "10"}}

    def test_brackets_for_same_field_merge(self):
        result = expand_bracket_keys({"price[gte]": "10", "price[lt]": "50"})
        assert result == {"price": {"gte": "10", "lt": "50"}}

    def test_nested_brackets(self):
        result = expand_bracket_keys({"address[geo][lat]": "1"})
        assert result == {"address": {"geo": {"lat": "1"}}}

    def test_plain_keys_kept(self):
        assert expand_bracket_keys({"role": "admin"}) == {"role": "admin"}

    def test_input_mapping_not_mutated(self):
        nested = {"gte": "1"}
        params = {"price": nested, "price[lt]": "5"}
        expand_bracket_keys(params)
        assert nested == {"gte": "1"}

    def test_deeply_nested_input_not_mutated(self):
        params = {"addr": {"geo": {"x": "1"}}, "addr[geo][y]": "2"}
        result = expand_bracket_keys(params)
        assert result == {"addr": {"geo": {"x": "1", "y": "2"}}}
        assert params == {"addr": {"geo": {"x": "1"}}, "addr[geo][y]": "2"}

    def test_bracket_key_before_nested_mapping_is_kept(self):
        result = expand_bracket_keys({"addr[geo][y]": "2", "addr": {"geo": {"x": "1"}}})
        assert result == {"addr": {"geo": {"y": "2", "x": "1"}}}

    def test_nested_scalar_conflict(self):
        with pytest.raises(FilterParseError):
            expand_bracket_keys({"addr[geo][x]": "2", "addr": {"geo": {"x": "1"}}})

    @pytest.mark.parametrize("key", ["price[gte", "price]gte[", "[gte]", "price[]"])
    def test_malformed_keys(self, key):
        with pytest.raises(FilterParseError):
            expand_bracket_keys({key: "1"})

    def test_conflict_with_plain_value(self):
        with pytest.raises(FilterParseError):
            expand_bracket_keys({"price": "5", "price[gte]": "1"})


class TestCompileFilter:
    """Tests for compile_filter()."""

    def test_reserved_keys_dropped(self):
        params = {
            "searchTerm": "x",
            "sort": "-name",
            "page": "2",
            "limit": "5",
            "fields": "name",
            "role": "admin",
        }
        assert compile_filter(params, excluded_fields=RESERVED_FIELDS) == {
            "role": "admin"
        }

    def test_only_reserved_keys_yields_empty_filter(self):
        params = {"page": "1", "limit": "10"}
        assert compile_filter(params, excluded_fields=RESERVED_FIELDS) == {}

    def test_empty_params(self):
        assert compile_filter({}) == {}

    def test_bracket_and_equality_combined(self):
        params = {"role": "admin", "age[gte]": "30", "age[lt]": "50"}
        assert compile_filter(params) == {
            "role": "admin",
            "age": {"$gte": 30, "$lt": 50},
        }

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            compile_filter({"age[gte": "1"})
        assert issubclass(FilterParseError, QueryBuilderError)


class TestParseScalar:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("False", False),
            ("null", None),
            ("42", 42),
            ("-3", -3),
            ("2.5", 2.5),
            ("abc", "abc"),
            (7, 7),
        ],
    )
    def test_parse_scalar(self, raw, expected):
        assert parse_scalar(raw) == expected
