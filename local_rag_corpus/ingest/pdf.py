from pathlib import Path
from typing import List, Sequence

from pypdf import PdfReader

from ..index.schema import PositionedWord
from .layout import LINE_TOLERANCE, reconstruct_document


def _baseline_y(cm: Sequence[float], tm: Sequence[float]) -> float:
    # y of the text-space origin after applying tm then cm
    return float(tm[4]) * float(cm[1]) + float(tm[5]) * float(cm[3]) + float(cm[5])


def extract_page_words(page) -> List[PositionedWord]:
    """Words of one pypdf page, in the order the decoder emits them."""
    words: List[PositionedWord] = []

    def _visit(text, cm, tm, font_dict, font_size):
        if not text or not text.strip():
            return
        y = _baseline_y(cm, tm)
        for tok in text.split():
            words.append(PositionedWord(text=tok, baseline_y=y))

    page.extract_text(visitor_text=_visit)
    return words


def read_pdf_pages(path: Path) -> List[List[PositionedWord]]:
    reader = PdfReader(str(path))
    return [extract_page_words(page) for page in reader.pages]


def parse_pdf(path: Path, tolerance: float = LINE_TOLERANCE) -> str:
    return reconstruct_document(read_pdf_pages(path), tolerance=tolerance)
