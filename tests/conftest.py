import sys
from pathlib import Path

import pytest

# Repo root = one level above tests/
REPO_ROOT = Path(__file__).resolve().parents[1]

# Ensure repo root is on sys.path so `import cli`, `llm`, `web` work (root modules).
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from local_rag_corpus.app import load_config  # noqa: E402
from local_rag_corpus.index.schema import Chunk  # noqa: E402


@pytest.fixture
def cfg(tmp_path):
    c = load_config(None)
    c["app"]["corpus_path"] = str(tmp_path / "out" / "corpus.json")
    c["app"]["log_dir"] = str(tmp_path / "logs")
    return c


@pytest.fixture
def geo_chunks():
    return [
        Chunk(
            id="a",
            source_file="geo.pdf",
            content="Volcanoes form when magma from within the earth's mantle works its way to the surface.",
        ),
        Chunk(
            id="b",
            source_file="geo.pdf",
            content="The history of volcanic eruption monitoring began in the 19th century.",
        ),
    ]
