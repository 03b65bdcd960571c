from __future__ import annotations

from typing import List, Sequence, Tuple

from ..index.schema import Chunk

CONTEXT_CHARS = 1500
CONTEXT_SEPARATOR = "\n---\n"
TRUNCATION_MARKER = "\n...[truncated]"


def build_context(
    chunks: Sequence[Chunk],
    max_chars: int = CONTEXT_CHARS,
    separator: str = CONTEXT_SEPARATOR,
    truncation_marker: str = TRUNCATION_MARKER,
) -> Tuple[str, List[Chunk]]:
    """
    Join ranked chunk contents into one context string of at most
    `max_chars` characters (separators included).

    Packing is greedy: the first chunk that would overflow the budget stops
    it. The first chunk is always taken, so a single oversized chunk is cut
    to exactly `max_chars` and followed by `truncation_marker`.
    Returns the context and the chunks that went into it.
    """
    if max_chars <= 0:
        return "", []

    pieces: List[str] = []
    used: List[Chunk] = []
    total = 0
    for ch in chunks:
        txt = ch.content
        if not txt:
            continue
        extra = len(txt) + (len(separator) if pieces else 0)
        if pieces and total + extra > max_chars:
            break
        pieces.append(txt)
        used.append(ch)
        total += extra

    context = separator.join(pieces)
    if len(context) > max_chars:
        context = context[:max_chars] + truncation_marker
    return context, used
