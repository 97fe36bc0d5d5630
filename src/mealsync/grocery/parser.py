"""Quantity/unit parser for free-text ingredient lines.

Each line is handled by exactly one rule, tried in order:

1. ``<number> <unit> <name...>`` -- at least three whitespace-delimited tokens.
   The token right after the number is taken as the unit, whatever it is, so
   ``"2 large onions"`` yields unit ``large``.
2. ``<number> <name>`` -- a numeral followed by a single token; no unit.
3. anything else -- the whole line is the name and the quantity is 1.

Parsing never fails.
"""

from __future__ import annotations

import re
from typing import Iterable, List

from mealsync.models.grocery import ParsedEntry

_NUMBER = r"(\d+(?:\.\d+)?)"
_QUANTITY_UNIT_NAME = re.compile(_NUMBER + r"\s+(\S+)\s+(.+)")
_QUANTITY_NAME = re.compile(_NUMBER + r"\s+(.+)")


def parse_line(line: str) -> ParsedEntry:
    """Decompose a single normalized line into a :class:`ParsedEntry`."""

    stripped = line.strip()

    match = _QUANTITY_UNIT_NAME.fullmatch(stripped)
    if match:
        quantity, unit, name = match.groups()
        return ParsedEntry(name=name.strip().lower(), quantity=float(quantity), unit=unit)

    match = _QUANTITY_NAME.fullmatch(stripped)
    if match:
        quantity, name = match.groups()
        return ParsedEntry(name=name.strip().lower(), quantity=float(quantity))

    return ParsedEntry(name=stripped.lower(), quantity=1.0)


def parse_lines(lines: Iterable[str]) -> List[ParsedEntry]:
    return [parse_line(line) for line in lines]


__all__ = ["parse_line", "parse_lines"]
