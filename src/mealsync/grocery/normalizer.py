"""Split raw ingredient blocks into clean lines."""

from __future__ import annotations

from typing import Iterable, List


def normalize_lines(text: str | None) -> List[str]:
    """Return trimmed, non-empty lines from a newline-delimited block."""

    if not text:
        return []
    lines = (line.strip() for line in text.split("\n"))
    return [line for line in lines if line]


def join_blocks(blocks: Iterable[str | None]) -> str:
    """Concatenate per-meal ingredient blocks with newline separators."""

    return "\n".join(block for block in blocks if block)


__all__ = ["normalize_lines", "join_blocks"]
