"""Minimal CSV tokenizer.

Supports:
- comma delimiters
- quoted fields with escaped quotes ("")
- CRLF / LF / CR newlines
"""

import re
from dataclasses import dataclass

_WHITESPACE = re.compile(r"\s+")
_BOM = "\ufeff"


@dataclass(frozen=True)
class ParsedCsv:
    """Header row and data rows of a tokenized CSV text."""

    headers: list[str]
    rows: list[list[str]]


def parse_csv(text: str) -> ParsedCsv:
    """Split CSV text into a header row and data rows.

    A leading byte order mark is dropped. Header names are trimmed; data
    fields are returned exactly as written.
    Rows are not validated against the header length.

    Args:
        text: Raw CSV text

    Returns:
        ParsedCsv with headers and data rows
    """
    text = text.removeprefix(_BOM)
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False

    def push_field() -> None:
        row.append("".join(field))
        field.clear()

    def push_row() -> None:
        nonlocal row
        # A lone empty field after the header is a blank line, not a row
        if len(row) == 1 and row[0] == "" and rows:
            row = []
            return
        rows.append(row)
        row = []

    i = 0
    length = len(text)
    while i < length:
        c = text[i]

        if in_quotes:
            if c == '"':
                if i + 1 < length and text[i + 1] == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(c)
        elif c == '"':
            in_quotes = True
        elif c == ",":
            push_field()
        elif c == "\n":
            push_field()
            push_row()
        elif c == "\r":
            if i + 1 < length and text[i + 1] == "\n":
                i += 1
            push_field()
            push_row()
        else:
            field.append(c)
        i += 1

    push_field()
    push_row()

    headers = [h.strip() for h in rows[0]] if rows else []
    return ParsedCsv(headers=headers, rows=rows[1:])


def normalize_header_name(header: str) -> str:
    """Normalize a header for synonym lookup ("Posted Date" -> "posteddate")."""
    return _WHITESPACE.sub("", header.strip().lower())
