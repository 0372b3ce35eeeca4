"""Unit tests for the EDN reader."""

import pytest

from logseq_graph.utils.edn import EDNError, Keyword, Symbol, loads


class TestLoads:
    """Test reading EDN values."""

    def test_map_with_keywords(self):
        """Test that keyword keys can be looked up by name."""
        value = loads('{:journals-directory "daily" :meta/version 1}')

        assert value["journals-directory"] == "daily"
        assert value["meta/version"] == 1
        assert all(isinstance(key, Keyword) for key in value)

    def test_scalars(self):
        """Test numbers, booleans, nil and symbols."""
        assert loads("[1 -3 42N 2.5 1e3 1.5M true false nil foo]") == [
            1, -3, 42, 2.5, 1000.0, 1.5, True, False, None, Symbol("foo"),
        ]

    def test_collections(self):
        """Test vectors, lists and sets."""
        assert loads("[1 (2 3) #{4}]") == [1, [2, 3], frozenset({4})]

    def test_comments_and_discard(self):
        """Test that comments and discarded forms are skipped."""
        assert loads("[1 #_2 3 ; comment\n 4]") == [1, 3, 4]
        assert loads("#_:skipped :kept") == "kept"

    def test_tagged_literal_keeps_value(self):
        """Test that tags are dropped."""
        assert loads('#inst "2024-01-31"') == "2024-01-31"

    def test_strings_and_characters(self):
        """Test escapes in strings and character literals."""
        assert loads(r'"a\nbA\"c"') == 'a\nbA"c'
        assert loads(r"[\a \newline A \(]") == ["a", "\n", "A", "("]

    def test_composite_keys_are_hashable(self):
        """Test that vector keys become tuples."""
        assert loads("{[1 2] :x}") == {(1, 2): "x"}

    def test_commas_are_whitespace(self):
        """Test that commas separate forms like spaces."""
        assert loads("{:a 1, :b 2}") == {"a": 1, "b": 2}

    def test_first_value_only(self):
        """Test that reading stops after the first value."""
        assert loads(":a :b") == "a"


class TestKeyword:
    """Test keyword values."""

    def test_namespace_and_name(self):
        """Test splitting namespaced keywords."""
        keyword = Keyword("file/name-format")

        assert keyword.namespace == "file"
        assert keyword.name == "name-format"
        assert repr(keyword) == ":file/name-format"

    def test_plain_keyword(self):
        """Test keywords without namespace."""
        keyword = Keyword("triple-lowbar")

        assert keyword.namespace == ""
        assert keyword.name == "triple-lowbar"


class TestErrors:
    """Test invalid input."""

    @pytest.mark.parametrize("text", [
        "",
        "{:a}",
        '"unterminated',
        "[1 2",
        "]",
        r'"\q"',
        r"\nope",
    ])
    def test_invalid(self, text):
        """Test that invalid EDN raises EDNError."""
        with pytest.raises(EDNError):
            loads(text)

    def test_position(self):
        """Test that errors carry the position where reading stopped."""
        with pytest.raises(EDNError) as exc_info:
            loads("[1 2")

        assert exc_info.value.position == 4
        assert "position 4" in str(exc_info.value)

    def test_is_value_error(self):
        """Test that EDNError can be caught as ValueError."""
        assert issubclass(EDNError, ValueError)
