import json

import pytest
from pydantic import ValidationError

from local_rag_corpus.index.corpus import CorpusContext, load_corpus, save_corpus
from local_rag_corpus.index.schema import Chunk


def test_round_trip(tmp_path, geo_chunks):
    path = save_corpus(geo_chunks, tmp_path / "nested" / "corpus.json")
    assert load_corpus(path) == geo_chunks


def test_file_shape_is_stable(tmp_path):
    chunks = [Chunk(id="1", source_file="café.pdf", content="Crème brûlée")]
    path = save_corpus(chunks, tmp_path / "corpus.json")
    raw = path.read_text(encoding="utf-8")
    assert "café.pdf" in raw
    assert raw.startswith("[\n  {")
    data = json.loads(raw)
    assert list(data[0].keys()) == ["Id", "SourceFile", "Content"]


def test_reads_existing_corpus_files(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(
        json.dumps([{"Id": "x-1", "SourceFile": "a.pdf", "Content": "Alpha"}]), encoding="utf-8"
    )
    chunks = load_corpus(path)
    assert chunks[0].id == "x-1"
    assert chunks[0].source_file == "a.pdf"


def test_missing_file_gives_empty_corpus(tmp_path):
    assert load_corpus(tmp_path / "nope.json") == []


def test_malformed_files_give_empty_corpus(tmp_path):
    bad_json = tmp_path / "bad.json"
    bad_json.write_text("[{", encoding="utf-8")
    not_list = tmp_path / "obj.json"
    not_list.write_text('{"Id": "1"}', encoding="utf-8")
    bad_chunk = tmp_path / "chunk.json"
    bad_chunk.write_text('[{"Id": "1", "SourceFile": "a.pdf", "Content": ""}]', encoding="utf-8")
    for p in (bad_json, not_list, bad_chunk):
        assert load_corpus(p) == []


def test_empty_save_writes_empty_array(tmp_path):
    path = save_corpus([], tmp_path / "corpus.json")
    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_context_is_read_only_snapshot(geo_chunks):
    ctx = CorpusContext(geo_chunks)
    geo_chunks.clear()
    assert len(ctx) == 2
    assert isinstance(ctx.chunks, tuple)
    with pytest.raises(ValidationError):
        ctx.chunks[0].content = "changed"


def test_context_from_missing_file_is_empty(tmp_path):
    ctx = CorpusContext.load(tmp_path / "missing.json")
    assert len(ctx) == 0
    assert ctx.retrieve("anything at all about volcanoes") == ""


def test_reads_corpus_saved_with_bom(tmp_path):
    path = tmp_path / "bom.json"
    path.write_text(
        json.dumps([{"Id": "1", "SourceFile": "a.pdf", "Content": "Alpha"}]), encoding="utf-8-sig"
    )
    assert [c.content for c in load_corpus(path)] == ["Alpha"]
