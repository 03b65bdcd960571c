import random

from local_rag_corpus.ingest.chunk import assemble_chunks


def _para(ch: str, n: int) -> str:
    return ch * n


def test_overflow_paragraph_seeds_next_chunk():
    paras = [_para("a", 150), _para("b", 150), _para("c", 150), _para("d", 800)]
    chunks = assemble_chunks(paras, "geo.pdf", target_chars=1000, min_flush_chars=200)
    assert len(chunks) == 2
    assert chunks[0].content == "\n\n".join(paras[:3])
    assert chunks[1].content == paras[3]
    assert all(c.source_file == "geo.pdf" for c in chunks)


def test_no_flush_below_floor_even_when_over_target():
    paras = [_para("a", 100), _para("b", 950)]
    chunks = assemble_chunks(paras, "x.pdf", target_chars=1000, min_flush_chars=200)
    assert len(chunks) == 1
    assert chunks[0].content == "\n\n".join(paras)


def test_empty_input_yields_no_chunks():
    assert assemble_chunks([], "x.pdf") == []


def test_ids_unique_and_deterministic():
    paras = [_para(c, 400) for c in "abcde"]
    first = assemble_chunks(paras, "x.pdf")
    second = assemble_chunks(paras, "x.pdf")
    assert [c.id for c in first] == [c.id for c in second]
    assert len({c.id for c in first}) == len(first)
    other = assemble_chunks(paras, "x.pdf", doc_key="sub/x.pdf")
    assert {c.id for c in first}.isdisjoint({c.id for c in other})


def test_paragraph_atomicity_and_size_floor():
    rng = random.Random(7)
    words = ["basalt", "magma", "crater", "lava", "ash", "vent", "plume"]
    paras = [
        " ".join(rng.choice(words) for _ in range(rng.randint(3, 120)))
        for _ in range(60)
    ]
    chunks = assemble_chunks(paras, "rocks.pdf", target_chars=1000, min_flush_chars=200)

    rebuilt = [p for c in chunks for p in c.content.split("\n\n")]
    assert rebuilt == paras
    for c in chunks[:-1]:
        # the buffer (content plus its trailing separator) was over the floor
        assert len(c.content) + 2 > 200
        assert c.content == c.content.strip()
