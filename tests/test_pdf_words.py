from local_rag_corpus.ingest import pdf as pdf_mod
from local_rag_corpus.ingest.pdf import extract_page_words, parse_pdf

IDENTITY = [1.0, 0.0, 0.0, 1.0, 0.0, 0.0]


class FakePage:
    def __init__(self, runs):
        # runs: (text, cm, tm)
        self.runs = runs

    def extract_text(self, visitor_text=None):
        for text, cm, tm in self.runs:
            visitor_text(text, cm, tm, {}, 12.0)
        return "".join(r[0] for r in self.runs)


def test_words_take_run_baseline():
    page = FakePage([("Hello world", IDENTITY, [1, 0, 0, 1, 72, 700])])
    words = extract_page_words(page)
    assert [w.text for w in words] == ["Hello", "world"]
    assert all(w.baseline_y == 700 for w in words)


def test_whitespace_runs_are_ignored():
    page = FakePage([("\n", IDENTITY, [1, 0, 0, 1, 0, 500]), ("  ", IDENTITY, [1, 0, 0, 1, 0, 500])])
    assert extract_page_words(page) == []


def test_baseline_applies_transformation_matrix():
    cm = [1.0, 0.0, 0.0, 1.0, 0.0, 10.0]
    page = FakePage([("x", cm, [1, 0, 0, 1, 0, 5])])
    assert extract_page_words(page)[0].baseline_y == 15.0


def test_parse_pdf_reconstructs_pages(monkeypatch):
    pages = [
        FakePage(
            [
                ("Title line", IDENTITY, [1, 0, 0, 1, 72, 700]),
                ("Body text", IDENTITY, [1, 0, 0, 1, 72, 680]),
            ]
        ),
        FakePage([]),
        FakePage([("Second page", IDENTITY, [1, 0, 0, 1, 72, 700])]),
    ]

    class FakeReader:
        def __init__(self, path):
            self.pages = pages

    monkeypatch.setattr(pdf_mod, "PdfReader", FakeReader)
    text = parse_pdf("doc.pdf")
    assert text == "Title line \nBody text \n\nSecond page \n\n"
