import re
from typing import List

PARAGRAPH_SEP = "\n\n"
# Footer noise like "Page 3" or "page 3 of 12"
PAGE_MARKER_RE = re.compile(r"Page\s+\d+(\s+of\s+\d+)?", re.IGNORECASE)


def normalize_newlines(s: str) -> str:
    return s.replace("\r\n", "\n").replace("\r", "\n")


def strip_page_markers(s: str) -> str:
    return PAGE_MARKER_RE.sub("", s)


def _is_page_number(p: str) -> bool:
    return len(p) < 5 and p[0].isdigit()


def split_paragraphs(text: str) -> List[str]:
    """
    Clean a document's reconstructed text and cut it into paragraphs.

    Paragraphs are separated by a blank line. Empty pieces and short
    digit-led leftovers ("3", "12 ") are dropped; order is preserved.
    """
    if not text:
        return []
    s = strip_page_markers(normalize_newlines(text))
    out: List[str] = []
    for raw in s.split(PARAGRAPH_SEP):
        p = raw.strip()
        if not p:
            continue
        if _is_page_number(p):
            continue
        out.append(p)
    return out
