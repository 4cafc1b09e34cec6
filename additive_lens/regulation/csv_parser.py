"""
Comma-separated line splitting for the regulation table.

The published substance table is not strictly RFC 4180: it is parsed line by
line with a simple quote toggle. Every double quote flips the "inside quotes"
state and is dropped, commas inside quotes are kept, and each field is
trimmed.
"""

from typing import List


def parse_csv_line(line: str) -> List[str]:
    """
    Split one line of the regulation table into fields.

    Args:
        line: A single line, without its line terminator

    Returns:
        Trimmed fields; always at least one (possibly empty) field

    Examples:
        >>> parse_csv_line('172.515,"BENZOATE, SODIUM", 0 ')
        ['172.515', 'BENZOATE, SODIUM', '0']
    """
    columns = []
    current = []
    inside_quotes = False

    for char in line:
        if char == '"':
            inside_quotes = not inside_quotes
        elif char == ',' and not inside_quotes:
            columns.append(''.join(current))
            current = []
        else:
            current.append(char)
    columns.append(''.join(current))

    return [_clean_field(column) for column in columns]


def _clean_field(field: str) -> str:
    cleaned = field.strip()
    if len(cleaned) >= 2 and cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1]
    return cleaned
