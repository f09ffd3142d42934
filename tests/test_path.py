"""Tests for schema_delta.path -- schema paths and JSON Pointer codec."""

import pytest

from schema_delta.errors import InvalidPath
from schema_delta.path import (
    EMPTY_PATH,
    ITEMS,
    Path,
    escape_token,
    join_pointer,
    json_pointer_to_path,
    split_pointer,
    unescape_token,
)


class TestPointerTokens:
    def test_escape_and_unescape(self):
        assert escape_token("a/b~c") == "a~1b~0c"
        assert unescape_token("a~1b~0c") == "a/b~c"

    def test_escape_order_does_not_double_decode(self):
        # "~01" is an escaped "~" followed by "1", not a slash
        assert unescape_token("~01") == "~1"

    def test_split_root_pointers(self):
        assert split_pointer("") == []
        assert split_pointer("/") == []

    def test_split_unescapes_tokens(self):
        assert split_pointer("/a~1b/c") == ["a/b", "c"]

    def test_split_rejects_relative_pointer(self):
        with pytest.raises(InvalidPath):
            split_pointer("a/b")

    def test_split_rejects_bad_escape(self):
        with pytest.raises(InvalidPath):
            split_pointer("/a~2")

    def test_join_escapes_tokens(self):
        assert join_pointer(["a/b", "c", 3]) == "/a~1b/c/3"


class TestPath:
    def test_pointer_form(self):
        path = Path.of("address", "lines", ITEMS)
        assert path.as_pointer() == "/properties/address/properties/lines/items"
        assert str(path) == path.as_pointer()

    def test_simple_form(self):
        assert Path.of("address", "lines", ITEMS, "text").as_simple() == "address.lines[*].text"
        assert Path.of(ITEMS).as_simple() == "[*]"

    def test_property_names_are_escaped(self):
        assert Path.of("a/b").as_pointer() == "/properties/a~1b"

    def test_empty_path(self):
        assert EMPTY_PATH.is_empty()
        assert EMPTY_PATH.as_pointer() == ""
        assert EMPTY_PATH.parent() == EMPTY_PATH
        assert EMPTY_PATH.last() is None

    def test_parent_and_child(self):
        path = Path.of("a", "b")
        assert path.parent() == Path.of("a")
        assert Path.of("a").child("b") == path
        assert Path.of("a").child_items() == Path.of("a", ITEMS)
        assert path.length() == 2

    def test_is_child_of_is_strict(self):
        assert Path.of("a", "b").is_child_of(Path.of("a"))
        assert Path.of("a", "b").is_child_of(EMPTY_PATH)
        assert not Path.of("a").is_child_of(Path.of("a"))
        assert not Path.of("ab").is_child_of(Path.of("a"))

    def test_data_pointer(self):
        assert Path.of("address", "city").as_data_pointer() == "/address/city"
        assert EMPTY_PATH.as_data_pointer() == ""

    def test_data_pointer_is_none_inside_items(self):
        assert Path.of("tags", ITEMS).as_data_pointer() is None
        assert Path.of("tags", ITEMS).items_depth() == 1


class TestJsonPointerToPath:
    def test_round_trip(self):
        pointer = "/properties/address/properties/lines/items/properties/a~1b"
        assert json_pointer_to_path(pointer).as_pointer() == pointer

    def test_root(self):
        assert json_pointer_to_path("") == EMPTY_PATH
        assert json_pointer_to_path("/") == EMPTY_PATH

    def test_rejects_unknown_segment(self):
        with pytest.raises(InvalidPath):
            json_pointer_to_path("/name")

    def test_rejects_properties_without_name(self):
        with pytest.raises(InvalidPath):
            json_pointer_to_path("/properties")

    def test_invalid_path_is_value_error(self):
        with pytest.raises(ValueError):
            json_pointer_to_path("/foo/bar")
