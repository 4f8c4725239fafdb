"""Lightweight format detection for raw fetched documents."""

import json
from enum import Enum
from typing import Any, List


class Format(Enum):
    JSON = "json"
    HTML = "html"
    CSV = "csv"
    PLAIN_TEXT = "text"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_json_strict(raw: str) -> Any:
    """
    Parse JSON, rejecting the NaN/Infinity extensions Python accepts by default.

    Raises:
        ValueError: if the text is not strict JSON
        RecursionError: if nesting exceeds the interpreter limit
    """
    return json.loads(raw, parse_constant=_reject_constant)


def split_lines(raw: str) -> List[str]:
    """Split on newlines, dropping trailing empty segments."""
    lines = raw.split("\n")
    while lines and lines[-1] == "":
        lines.pop()
    return lines


def is_json(raw: str) -> bool:
    try:
        parse_json_strict(raw)
    except (ValueError, RecursionError):
        return False
    return True


def is_html(raw: str) -> bool:
    return raw.strip().startswith("<") and "</" in raw


def is_csv(raw: str) -> bool:
    lines = split_lines(raw)
    return len(lines) >= 2 and "," in lines[0]


def sniff(raw: str) -> Format:
    """
    Classify raw text. First matching rule wins:

    1. full JSON parse succeeds
    2. trimmed text starts with '<' and contains a closing tag
    3. two or more lines, first line has a comma
    4. anything else is plain text
    """
    if is_json(raw):
        return Format.JSON
    if is_html(raw):
        return Format.HTML
    if is_csv(raw):
        return Format.CSV
    return Format.PLAIN_TEXT
