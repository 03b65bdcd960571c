from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from pydantic import TypeAdapter

from ..answer.extract import CONTEXT_CHARS, CONTEXT_SEPARATOR, TRUNCATION_MARKER, build_context
from ..retrieve.keyword import TOP_N, rank_chunks
from .schema import Chunk, ScoredChunk

logger = logging.getLogger(__name__)

_CHUNK_LIST = TypeAdapter(List[Chunk])


def save_corpus(chunks: Iterable[Chunk], path: str | Path) -> Path:
    """Write the corpus as an indented UTF-8 JSON array of {Id, SourceFile, Content}."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [c.model_dump(by_alias=True) for c in chunks]
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def load_corpus(path: str | Path) -> List[Chunk]:
    """
    Read a corpus file. Anything unreadable (missing file, bad JSON, wrong
    shape, invalid chunk) yields an empty corpus instead of an error.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("Corpus file not found: %s (using empty corpus)", path)
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        return _CHUNK_LIST.validate_python(data)
    except (OSError, ValueError) as e:
        logger.warning("Corpus file %s is malformed (using empty corpus): %s", path, e)
        return []


class CorpusContext:
    """
    Read-only view of a loaded corpus, shared by every retrieval call.

    Build it once at process start (`CorpusContext.load(path)`) and pass it
    to request handlers; nothing mutates it afterwards, so concurrent
    readers need no locking. There is no teardown.
    """

    def __init__(self, chunks: Iterable[Chunk] = ()):
        self._chunks: Tuple[Chunk, ...] = tuple(chunks)
        self._lowered: Tuple[str, ...] = tuple(c.content.lower() for c in self._chunks)

    @classmethod
    def load(cls, path: str | Path) -> "CorpusContext":
        ctx = cls(load_corpus(path))
        logger.info("Loaded corpus: %d chunks from %s", len(ctx), path)
        return ctx

    @property
    def chunks(self) -> Sequence[Chunk]:
        return self._chunks

    def __len__(self) -> int:
        return len(self._chunks)

    def rank(self, query: str, top_n: int) -> List[ScoredChunk]:
        return rank_chunks(query, self._chunks, top_n, lowered=self._lowered)

    def retrieve(
        self,
        query: str,
        top_n: int = TOP_N,
        max_chars: int = CONTEXT_CHARS,
        separator: str = CONTEXT_SEPARATOR,
        truncation_marker: str = TRUNCATION_MARKER,
    ) -> str:
        ranked = self.rank(query, top_n)
        context, _ = build_context(
            [s.chunk for s in ranked],
            max_chars=max_chars,
            separator=separator,
            truncation_marker=truncation_marker,
        )
        return context
