"""
Tabular Text Helpers
Line, delimiter and cell splitting shared by both import parsers
"""

import csv
from typing import List, Optional

from pydantic import BaseModel

BOM = "\ufeff"


class Table(BaseModel):
    """Header cells plus one cell list per non-empty data line, in source order"""
    header: List[str]
    rows: List[List[str]]
    lines: List[str]
    delimiter: str


def non_empty_lines(raw_text: str) -> List[str]:
    return [line for line in (raw_text or "").splitlines() if line.strip()]


def detect_delimiter(lines: List[str]) -> str:
    """Tab when any line contains one, comma otherwise"""
    return "\t" if any("\t" in line for line in lines) else ","


def split_cells(line: str, delimiter: str) -> List[str]:
    try:
        cells = next(csv.reader([line], delimiter=delimiter), [])
    except csv.Error:
        cells = line.split(delimiter)
    return [cell.strip() for cell in cells]


def split_table(raw_text: str) -> Optional[Table]:
    lines = non_empty_lines(raw_text)
    if not lines:
        return None

    lines[0] = lines[0].lstrip(BOM)
    delimiter = detect_delimiter(lines)
    return Table(
        header=split_cells(lines[0], delimiter),
        rows=[split_cells(line, delimiter) for line in lines[1:]],
        lines=lines,
        delimiter=delimiter,
    )
