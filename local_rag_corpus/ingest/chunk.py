import hashlib
from typing import List, Optional, Sequence

from ..index.schema import Chunk
from .clean import PARAGRAPH_SEP

TARGET_CHARS = 1000
MIN_FLUSH_CHARS = 200


def chunk_id(doc_key: str, order: int, content: str) -> str:
    h = hashlib.sha1(f"{doc_key}::{order}::{content}".encode("utf-8", errors="ignore"))
    return h.hexdigest()


def assemble_chunks(
    paragraphs: Sequence[str],
    source_file: str,
    target_chars: int = TARGET_CHARS,
    min_flush_chars: int = MIN_FLUSH_CHARS,
    doc_key: Optional[str] = None,
) -> List[Chunk]:
    """
    Pack whole paragraphs into chunks of roughly `target_chars`.

    The buffer is flushed before a paragraph that would push it past
    `target_chars`, but only once it already holds more than
    `min_flush_chars`; that paragraph then seeds the next chunk. Paragraphs
    are never split. `doc_key` (defaults to `source_file`) keeps ids unique
    when two documents share a display name.
    """
    key = doc_key or source_file
    chunks: List[Chunk] = []
    buf: List[str] = []
    buf_len = 0

    def flush():
        content = "".join(buf).strip()
        if content:
            chunks.append(
                Chunk(
                    id=chunk_id(key, len(chunks), content),
                    source_file=source_file,
                    content=content,
                )
            )

    for p in paragraphs:
        if buf_len + len(p) > target_chars and buf_len > min_flush_chars:
            flush()
            buf, buf_len = [], 0
        piece = p + PARAGRAPH_SEP
        buf.append(piece)
        buf_len += len(piece)

    if buf:
        flush()
    return chunks
