from __future__ import annotations

from typing import Iterable, Sequence

from ..index.schema import PositionedWord

# Baseline jump (PDF user-space units) that starts a new line.
LINE_TOLERANCE = 4.0
PAGE_BREAK = "\n\n"


def reconstruct_page(words: Sequence[PositionedWord], tolerance: float = LINE_TOLERANCE) -> str:
    """
    Rebuild one page's text from words in decoder (reading) order.

    A new line starts whenever a word's baseline moves more than `tolerance`
    away from the baseline of the current line. Every word is followed by a
    single space and the page ends with a blank line so pages stay separable.
    Columns and tables may come out interleaved; this is a layout heuristic,
    not a text-flow analysis.
    """
    if not words:
        return ""

    parts: list[str] = []
    current_y = words[0].baseline_y
    for w in words:
        if abs(w.baseline_y - current_y) > tolerance:
            parts.append("\n")
            current_y = w.baseline_y
        parts.append(w.text)
        parts.append(" ")
    parts.append(PAGE_BREAK)
    return "".join(parts)


def reconstruct_document(
    pages: Iterable[Sequence[PositionedWord]], tolerance: float = LINE_TOLERANCE
) -> str:
    return "".join(reconstruct_page(p, tolerance) for p in pages)
