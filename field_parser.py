# field_parser.py — text layout of a field
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterator, Optional, Tuple

from config import CFG
from models import Configuration, Pos, Size


class FieldParseError(ValueError):
    """Base for layout errors; ``offset`` is the character offset into the input."""

    def __init__(
        self,
        message: str,
        *,
        offset: int = 0,
        row: Optional[int] = None,
        col: Optional[int] = None,
        length: int = 1,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.row = row
        self.col = col
        self.length = max(1, length)

    def describe(self, source: Optional[str] = None) -> str:
        where = []
        if self.row is not None:
            where.append(f"row {self.row + 1}")
        if self.col is not None:
            where.append(f"column {self.col + 1}")
        where.append(f"offset {self.offset}")
        text = f"{self.message} ({', '.join(where)})"
        if source is None or self.row is None:
            return text
        lines = list(_lines_with_offsets(source))
        if not 0 <= self.row < len(lines):
            return text
        _offset, line = lines[self.row]
        caret_col = self.col if self.col is not None else 0
        caret = " " * caret_col + "^" * (self.length if self.col is not None else max(1, len(line)))
        return f"{text}\n  {line}\n  {caret}"


class EmptyField(FieldParseError):
    def __init__(self) -> None:
        super().__init__("Empty input")


class UnexpectedCharacter(FieldParseError):
    def __init__(self, char: str, *, offset: int, row: int, col: int, char_empty: str, char_busy: str) -> None:
        super().__init__(
            f"Unexpected character {char!r}: expected {char_busy!r} for busy or {char_empty!r} for empty",
            offset=offset,
            row=row,
            col=col,
        )
        self.char = char
        self.char_empty = char_empty
        self.char_busy = char_busy


class FickleRowLength(FieldParseError):
    def __init__(self, *, offset: int, row: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Fickle row length: first row length is {expected}, found row with length {actual}",
            offset=offset,
            row=row,
            length=actual,
        )
        self.expected = expected
        self.actual = actual


class NotEnoughRows(FieldParseError):
    def __init__(self, rows: int, *, length: int) -> None:
        super().__init__(
            f"Not enough rows, should be at least 2 (found {rows})",
            offset=0,
            length=length,
        )
        self.rows = rows


class NotEnoughColumns(FieldParseError):
    def __init__(self, cols: int, *, offset: int, row: int) -> None:
        super().__init__(
            f"Not enough columns, should be at least 2 (found {cols})",
            offset=offset,
            row=row,
            length=cols,
        )
        self.cols = cols


@dataclass(frozen=True)
class ParsedField:
    size: Size
    unavailable: FrozenSet[Pos]

    def to_configuration(self, results_limit: Optional[int] = None) -> Configuration:
        return Configuration(self.size, self.unavailable, results_limit)


def _lines_with_offsets(source: str) -> Iterator[Tuple[int, str]]:
    """Like ``str.split('\\n')`` but yields start offsets and drops ``\\r``.

    A trailing newline does not open another row.
    """
    if not source:
        return
    parts = source.split("\n")
    if source.endswith("\n"):
        parts.pop()
    offset = 0
    for raw in parts:
        line = raw[:-1] if raw.endswith("\r") else raw
        yield offset, line
        offset += len(raw) + 1


class Parser:
    def __init__(self, char_empty: Optional[str] = None, char_busy: Optional[str] = None) -> None:
        char_empty = CFG.CHAR_EMPTY if char_empty is None else char_empty
        char_busy = CFG.CHAR_BUSY if char_busy is None else char_busy
        if len(char_empty) != 1 or len(char_busy) != 1:
            raise ValueError("empty and busy markers must be single characters")
        if char_empty == char_busy:
            raise ValueError("empty and busy markers must differ")
        self.char_empty = char_empty
        self.char_busy = char_busy

    def parse(self, field: str) -> ParsedField:
        cols = 0
        rows = 0
        unavailable = set()

        for row, (offset, line) in enumerate(_lines_with_offsets(field)):
            line_len = len(line)
            if row == 0:
                cols = line_len
                if cols < 2:
                    raise NotEnoughColumns(cols, offset=offset, row=row)
            elif line_len != cols:
                raise FickleRowLength(offset=offset, row=row, expected=cols, actual=line_len)

            for col, char in enumerate(line):
                if char == self.char_busy:
                    unavailable.add(Pos(row, col))
                elif char != self.char_empty:
                    raise UnexpectedCharacter(
                        char,
                        offset=offset + col,
                        row=row,
                        col=col,
                        char_empty=self.char_empty,
                        char_busy=self.char_busy,
                    )
            rows += 1

        if rows == 0:
            raise EmptyField()
        if rows < 2:
            raise NotEnoughRows(rows, length=len(field))

        return ParsedField(size=Size(rows, cols), unavailable=frozenset(unavailable))


def parse_field(field: str, char_empty: Optional[str] = None, char_busy: Optional[str] = None) -> ParsedField:
    return Parser(char_empty, char_busy).parse(field)


def format_field(configuration: Configuration, char_empty: Optional[str] = None, char_busy: Optional[str] = None) -> str:
    """Inverse of :func:`parse_field` for a configuration's size and blockers."""
    char_empty = CFG.CHAR_EMPTY if char_empty is None else char_empty
    char_busy = CFG.CHAR_BUSY if char_busy is None else char_busy
    size = configuration.size
    blocked = configuration.unavailable
    return "\n".join(
        "".join(char_busy if Pos(r, c) in blocked else char_empty for c in range(size.cols))
        for r in range(size.rows)
    )


__all__ = [
    "FieldParseError",
    "EmptyField",
    "UnexpectedCharacter",
    "FickleRowLength",
    "NotEnoughRows",
    "NotEnoughColumns",
    "ParsedField",
    "Parser",
    "parse_field",
    "format_field",
]
