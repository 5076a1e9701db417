import pytest
from dataclasses import FrozenInstanceError

from src.sink_config.identifiers import (
    Identifier,
    IdentifierError,
    IdentifierKind,
    format_qualified_name,
    parse_identifier,
)


# --- parse_identifier ---

def test_quoted_identifier_keeps_case():
    ident = parse_identifier('"Foo"')
    assert ident.internal == "Foo"
    assert ident.kind is IdentifierKind.QUOTED
    assert ident.is_quoted


def test_unquoted_identifiers_compare_case_insensitively():
    assert parse_identifier("foo") == parse_identifier("FOO")
    assert hash(parse_identifier("foo")) == hash(parse_identifier("FOO"))
    assert parse_identifier("FOO").kind is IdentifierKind.UNQUOTED


def test_quoted_differs_from_unquoted_with_other_case():
    assert parse_identifier('"Foo"') != parse_identifier("foo")
    assert parse_identifier('"Foo"') != parse_identifier("Foo")


def test_quoted_lower_case_equals_unquoted():
    # equality is on the internal form only
    assert parse_identifier('"foo"') == parse_identifier("Foo")


def test_doubled_quotes_are_collapsed():
    assert parse_identifier('"My""Table"').internal == 'My"Table'


def test_unquoted_value_is_taken_literally():
    # no CQL interpretation: dots and spaces are part of the name
    assert parse_identifier("my table.x").internal == "my table.x"
    assert parse_identifier('a"b').internal == 'a"b'


@pytest.mark.parametrize(
    "bad",
    [
        "",          # empty
        '"',         # lone quote
        '""',        # empty quoted
        '"Foo',      # unterminated
        '"Fo"o"',    # unescaped inner quote
    ],
)
def test_parse_identifier_errors(bad):
    with pytest.raises(IdentifierError):
        parse_identifier(bad)


def test_identifier_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_identifier('"oops')


# --- rendering ---

def test_as_cql_quotes_and_escapes():
    assert Identifier.quoted('My"Table').as_cql() == '"My""Table"'
    assert Identifier.unquoted("plain").as_cql() == '"plain"'


def test_as_cql_pretty_only_quotes_when_needed():
    assert Identifier.unquoted("plain_1").as_cql(pretty=True) == "plain_1"
    assert Identifier.quoted("Mixed").as_cql(pretty=True) == '"Mixed"'
    assert Identifier.quoted("1st").as_cql(pretty=True) == '"1st"'


def test_str_is_internal_form():
    assert str(parse_identifier("ABC")) == "abc"
    assert str(parse_identifier('"ABC"')) == "ABC"


def test_format_qualified_name():
    assert format_qualified_name(parse_identifier("ks"), parse_identifier('"Tbl"')) == 'ks."Tbl"'


def test_identifier_is_frozen():
    ident = parse_identifier("x")
    with pytest.raises(FrozenInstanceError):
        ident.internal = "y"  # type: ignore[misc]
