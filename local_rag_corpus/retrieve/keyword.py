from __future__ import annotations

import re
from typing import FrozenSet, Iterable, List, Optional, Sequence

from ..index.schema import Chunk, ScoredChunk

_SPLIT_RE = re.compile(r"[\s,.?!]+")
# Tokens must be longer than this to count as keywords.
MIN_KEYWORD_LEN = 3
TOP_N = 2


def extract_keywords(query: str) -> FrozenSet[str]:
    toks = _SPLIT_RE.split((query or "").lower())
    return frozenset(t for t in toks if len(t) > MIN_KEYWORD_LEN)


def score_chunk(keywords: Iterable[str], content_lower: str) -> int:
    # substring containment: "volcano" matches inside "volcanoes"
    return sum(1 for k in keywords if k in content_lower)


def rank_chunks(
    query: str,
    chunks: Sequence[Chunk],
    top_n: int,
    lowered: Optional[Sequence[str]] = None,
) -> List[ScoredChunk]:
    """
    Keyword-overlap ranking. Zero-score chunks are dropped, ties keep corpus
    order, and at most `top_n` results come back.
    """
    if top_n <= 0 or not chunks:
        return []
    keywords = extract_keywords(query)
    if not keywords:
        return []
    if lowered is None:
        lowered = [c.content.lower() for c in chunks]

    scored: List[ScoredChunk] = []
    for ch, low in zip(chunks, lowered):
        s = score_chunk(keywords, low)
        if s > 0:
            scored.append(ScoredChunk(chunk=ch, score=s))
    scored.sort(key=lambda x: x.score, reverse=True)
    return scored[:top_n]
