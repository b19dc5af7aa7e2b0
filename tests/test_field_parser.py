import pytest

from field_parser import (
    EmptyField,
    FickleRowLength,
    NotEnoughColumns,
    NotEnoughRows,
    Parser,
    UnexpectedCharacter,
    format_field,
    parse_field,
)
from models import Configuration, Pos, Size


def test_parse_empty_square():
    parsed = parse_field("--\n--")
    assert parsed.size == Size(2, 2)
    assert parsed.unavailable == frozenset()


def test_parse_custom_markers():
    parsed = Parser("-", "+").parse("--+\n-+-")
    assert parsed.size == Size(2, 3)
    assert parsed.unavailable == {Pos(0, 2), Pos(1, 1)}


def test_unexpected_character_reports_offset():
    with pytest.raises(UnexpectedCharacter) as info:
        Parser("-", "+").parse("---\n--#")
    err = info.value
    assert err.offset == 6
    assert (err.row, err.col) == (1, 2)
    assert err.char == "#"
    assert err.describe("---\n--#").endswith("\n  --#\n    ^")


def test_fickle_row_length():
    with pytest.raises(FickleRowLength) as info:
        parse_field("---\n--\n---")
    assert info.value.offset == 4
    assert info.value.row == 1
    assert (info.value.expected, info.value.actual) == (3, 2)


def test_not_enough_rows():
    with pytest.raises(NotEnoughRows) as info:
        parse_field("----")
    assert info.value.rows == 1
    with pytest.raises(NotEnoughRows):
        parse_field("----\n")


def test_not_enough_columns_checked_on_first_row():
    with pytest.raises(NotEnoughColumns) as info:
        parse_field("-\n--")
    assert info.value.cols == 1
    assert info.value.row == 0


def test_empty_input():
    with pytest.raises(EmptyField):
        parse_field("")


def test_trailing_newline_and_crlf():
    assert parse_field("-x\n--\n") == parse_field("-x\n--")
    parsed = parse_field("--\r\n-x\r\n")
    assert parsed.size == Size(2, 2)
    assert parsed.unavailable == {Pos(1, 1)}


def test_parse_errors_are_value_errors():
    with pytest.raises(ValueError):
        parse_field("-?\n--")


@pytest.mark.parametrize("empty, busy", [("--", "x"), ("-", ""), ("x", "x")])
def test_parser_rejects_bad_markers(empty, busy):
    with pytest.raises(ValueError):
        Parser(empty, busy)


def test_to_configuration_and_format_field():
    parsed = Parser("-", "+").parse("--+\n-+-")
    configuration = parsed.to_configuration(results_limit=5)
    assert configuration == Configuration((2, 3), [(0, 2), (1, 1)], 5)
    assert format_field(configuration, "-", "+") == "--+\n-+-"
    assert format_field(configuration) == "--x\n-x-"
