from pathlib import Path


def parse_md_or_txt(path: Path) -> str:
    """Plain-text documents already carry their own line structure."""
    return Path(path).read_text(encoding="utf-8", errors="ignore")
