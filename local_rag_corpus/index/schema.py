from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PositionedWord(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    baseline_y: float


class Chunk(BaseModel):
    """
    One bounded, source-attributed unit of document text.

    Serialized with the corpus file keys (Id / SourceFile / Content); python
    code uses the snake_case field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="Id")
    source_file: str = Field(alias="SourceFile")  # display name only, no directories
    content: str = Field(alias="Content")

    @field_validator("content")
    @classmethod
    def _content_trimmed(cls, v: str) -> str:
        if not v or v != v.strip():
            raise ValueError("chunk content must be non-empty and trimmed")
        return v


class ScoredChunk(BaseModel):
    chunk: Chunk
    score: int = Field(ge=0)


class DocumentResult(BaseModel):
    path: str
    source_file: str
    chunks: List[Chunk] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IngestReport(BaseModel):
    documents: List[DocumentResult] = Field(default_factory=list)
    corpus_path: Optional[str] = None

    @property
    def chunks(self) -> List[Chunk]:
        out: List[Chunk] = []
        for d in self.documents:
            out.extend(d.chunks)
        return out

    @property
    def succeeded(self) -> List[DocumentResult]:
        return [d for d in self.documents if d.ok]

    @property
    def failed(self) -> List[DocumentResult]:
        return [d for d in self.documents if not d.ok]

    def summary(self) -> Dict[str, int]:
        return {
            "documents": len(self.documents),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "chunks": sum(len(d.chunks) for d in self.documents),
        }
